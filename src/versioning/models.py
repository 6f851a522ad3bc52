"""Data models for declared versions and their comparison."""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class Revision:
    """A ``major.minor.build[-SNAPSHOT]`` version broken into its parts."""
    major: int
    minor: int
    build: int
    is_snapshot: bool = False

    @property
    def key(self) -> Tuple[int, int, int]:
        """Ordering key; snapshots are handled by the comparator, not here."""
        return (self.major, self.minor, self.build)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.build}"
        return text + "-SNAPSHOT" if self.is_snapshot else text


class AgeTier(Enum):
    """How old a declared version is compared to the current one."""
    CURRENT_SNAPSHOT = (1, "✓ ", "current snapshot found in nexus")
    CURRENT_RELEASE = (0, "✓ ", "current release found in nexus")
    OLD_RELEASE = (-1, "℞ ", "newer release available")
    OLD_SNAPSHOT = (-2, "﹆ ", "old snapshot may soon be deleted from nexus")
    NOT_FOUND = (-3, "✗ ", "not found in nexus")
    UNKNOWN = (-9, "? ", "not enough info to determine age")

    def __init__(self, precedence: int, glyph: str, description: str):
        self.precedence = precedence
        self.glyph = glyph
        self.description = description

    @property
    def is_stale(self) -> bool:
        """Old releases, old snapshots and versions missing from the registry."""
        return self in (AgeTier.OLD_RELEASE, AgeTier.OLD_SNAPSHOT, AgeTier.NOT_FOUND)


class HierarchyTag(Enum):
    """Where in a pom.xml a version reference was declared."""
    ROOT = ("project", 0, "")
    PARENT = ("parent", 1, "parent:      ")
    DEPENDENCY = ("dependencies", 1, "dependency:  ")
    MANAGED_DEPENDENCY = ("dependencyManagement", 2, "managed: ")

    def __init__(self, tag_name: str, output_tabs: int, output_prefix: str):
        self.tag_name = tag_name
        self.output_tabs = output_tabs
        self.output_prefix = output_prefix

    @classmethod
    def from_tag_name(cls, tag_name: str) -> Optional["HierarchyTag"]:
        """Return the tag for a POM element name, ignoring case."""
        for tag in cls:
            if tag.tag_name.lower() == (tag_name or "").lower():
                return tag
        return None


@dataclass
class VersionRecord:
    """One explicit version declaration found in a pom.xml.

    ``revision`` is None when the version string is not ``#.#.#[-SNAPSHOT]``
    (for example ``1.2.3.RELEASE``); such records are reported but never
    compared. ``exists`` is None when the registry was not asked or could not
    answer.
    """
    group_id: Optional[str]
    artifact_id: Optional[str]
    version: str
    tag: HierarchyTag = HierarchyTag.ROOT
    revision: Optional[Revision] = None
    exists: Optional[bool] = None
    project_path: Optional[str] = None
    parent: Optional["VersionRecord"] = None
    dependencies: List["VersionRecord"] = field(default_factory=list)

    @property
    def sort_key(self) -> Tuple[str, str, str]:
        return (self.group_id or "", self.artifact_id or "", self.version or "")

    def references(self) -> Iterator["VersionRecord"]:
        """The parent reference (if any) followed by every dependency."""
        if self.parent is not None:
            yield self.parent
        yield from self.dependencies


class ProjectTree:
    """Root version records keyed by project path relative to the scan root.

    Iteration is always in path order regardless of insertion order.
    """

    def __init__(self) -> None:
        self._records: Dict[str, VersionRecord] = {}
        self._lock = threading.Lock()

    def add(self, path: str, record: VersionRecord) -> None:
        with self._lock:
            self._records[path] = record

    def get(self, path: str) -> Optional[VersionRecord]:
        return self._records.get(path)

    def paths(self) -> List[str]:
        with self._lock:
            return sorted(self._records)

    def items(self) -> List[Tuple[str, VersionRecord]]:
        with self._lock:
            return sorted(self._records.items(), key=lambda kv: kv[0])

    def records(self) -> List[VersionRecord]:
        return [record for _, record in self.items()]

    def __contains__(self, path: object) -> bool:
        return path in self._records

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths())

    def __len__(self) -> int:
        return len(self._records)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProjectTree):
            return NotImplemented
        return self.items() == other.items()

    def __repr__(self) -> str:
        return f"ProjectTree({self.paths()!r})"
