"""Pairs declared references with the locally built project they point at."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from .models import AgeTier, ProjectTree, VersionRecord
from .revision import compare_revisions


@dataclass(frozen=True)
class ReferenceAge:
    """Age of one parent/dependency reference of a project."""
    project_path: str
    record: VersionRecord
    current: Optional[VersionRecord]
    age: AgeTier


def find_current(tree: ProjectTree, record: VersionRecord) -> Optional[VersionRecord]:
    """Return the local project that declares ``record``'s artifact.

    Projects are scanned in path order and the first artifactId match wins.
    None means the artifact is not built locally (a third-party dependency).
    """
    if record.artifact_id is None:
        return None
    for candidate in tree.records():
        if candidate.artifact_id is not None and candidate.artifact_id == record.artifact_id:
            return candidate
    return None


def classify_age(tree: ProjectTree, record: VersionRecord) -> Tuple[AgeTier, Optional[VersionRecord]]:
    """Return the age of ``record`` and the current record it was judged by."""
    current = find_current(tree, record)
    if current is None or current.revision is None or record.revision is None:
        return AgeTier.UNKNOWN, current
    if record.exists is False:
        return AgeTier.NOT_FOUND, current
    return compare_revisions(current.revision, record.revision), current


def iter_references(tree: ProjectTree) -> Iterator[ReferenceAge]:
    """Classify every parent and dependency reference, in report order."""
    for path, project in tree.items():
        for ref in project.references():
            age, current = classify_age(tree, ref)
            yield ReferenceAge(path, ref, current, age)


def find_stale(tree: ProjectTree) -> List[ReferenceAge]:
    return [ref for ref in iter_references(tree) if ref.age.is_stale]
