"""Version collection and age classification for local Maven projects.

The graph builder reads every project's pom.xml into a ProjectTree; the
resolver pairs each parent/dependency reference with the project that builds
it and classifies the reference's age.
"""

from .models import AgeTier, HierarchyTag, ProjectTree, Revision, VersionRecord
from .revision import compare_revisions, parse_revision
from .graph import VersionGraphBuilder
from .resolver import ReferenceAge, classify_age, find_current, find_stale

__all__ = [
    "AgeTier",
    "HierarchyTag",
    "ProjectTree",
    "Revision",
    "VersionRecord",
    "compare_revisions",
    "parse_revision",
    "VersionGraphBuilder",
    "ReferenceAge",
    "classify_age",
    "find_current",
    "find_stale",
]
