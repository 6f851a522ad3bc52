"""Revision parsing and age comparison for Maven ``<version>`` strings."""

import re
from typing import Optional

from constants import Constants

from .models import AgeTier, Revision

_DIGITS = re.compile(r"[0-9]+")


def parse_revision(version: Optional[str]) -> Optional[Revision]:
    """Decompose a ``#.#.#[-SNAPSHOT]`` version string into a Revision.

    Anything else (two or four segments, blank or non-numeric segments,
    property placeholders) returns None. Never raises.
    """
    if version is None or not version.strip():
        return None

    snapshot = version.endswith(Constants.SNAPSHOT_SUFFIX)
    if snapshot:
        version = version[: -len(Constants.SNAPSHOT_SUFFIX)]

    segments = version.split(".")
    if len(segments) != 3:
        return None
    segments = [s.strip() for s in segments]
    if not all(_DIGITS.fullmatch(s) for s in segments):
        return None

    major, minor, build = (int(s) for s in segments)
    return Revision(major, minor, build, snapshot)


def _one_build_ahead(current: Revision, other: Revision) -> bool:
    return (current.major, current.minor) == (other.major, other.minor) \
        and current.build - other.build == 1


def compare_revisions(current: Revision, other: Revision) -> AgeTier:
    """Classify ``other`` against ``current``, the newest known revision.

    Anything newer than ``current`` counts as current. A snapshot is assumed
    to sit exactly one build above the latest release, so that release is
    still current while the snapshot exists.
    """
    if other.key > current.key:
        return AgeTier.CURRENT_SNAPSHOT if other.is_snapshot else AgeTier.CURRENT_RELEASE

    if other.key == current.key:
        if other.is_snapshot and current.is_snapshot:
            return AgeTier.CURRENT_SNAPSHOT
        if other.is_snapshot:
            return AgeTier.OLD_SNAPSHOT
        return AgeTier.CURRENT_RELEASE

    # current is newer than other
    if other.is_snapshot and current.is_snapshot:
        return AgeTier.OLD_SNAPSHOT
    if not other.is_snapshot and not current.is_snapshot:
        return AgeTier.OLD_RELEASE
    if current.is_snapshot:
        if _one_build_ahead(current, other):
            return AgeTier.CURRENT_RELEASE
        return AgeTier.OLD_RELEASE
    return AgeTier.OLD_SNAPSHOT
