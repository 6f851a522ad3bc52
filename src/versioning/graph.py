"""Builds the project version tree from the pom.xml files under a scan root.

Every directory directly under the scan root is a candidate project and is
processed on a worker thread. Projects named in the subproject map have their
listed subprojects processed right after them, in the listed order, on the
same thread: a subproject may itself be named in the map, and its children
are looked up by its own directory name, so order matters.
"""
from __future__ import annotations

import logging
import os
import re
import xml.etree.ElementTree as ET
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional, Sequence, Set, Tuple

from constants import Constants
from common.diagnostics import DiagnosticCollector
from common.errors import DescriptorError, RegistryCheckError, VersionShapeError
from common.logging_utils import extra_context, is_debug_enabled, Timer
from registry.nexus import registry_name_for

from .models import HierarchyTag, ProjectTree, VersionRecord
from .pom import (
    TAG_ARTIFACT_ID,
    TAG_DEPENDENCY,
    TAG_GROUP_ID,
    TAG_VERSION,
    child_text,
    descriptor_path,
    find_child,
    find_children,
    local_name,
    read_descriptor,
)
from .revision import parse_revision

logger = logging.getLogger(__name__)

# Same loose shape the report has always accepted: three dotted digit runs at
# the start, anything after (1.2.3.RELEASE is kept, ${spring.version} is not).
VERSION_SHAPE = re.compile(r"[0-9]*\.[0-9]*\.[0-9]*")

ProjectEntry = Tuple[str, VersionRecord]


def has_version_shape(version: Optional[str]) -> bool:
    return bool(version) and VERSION_SHAPE.match(version) is not None


class VersionGraphBuilder:
    """Walks a scan root and collects a VersionRecord per parsable project.

    Args:
        checker: Object with ``exists(name, version) -> bool`` used to look up
            each project version, and each reference to a project found in
            the walk, in the registry. None skips registry checks.
        workers: Number of project directories processed concurrently.
        diagnostics: Collector receiving per-project problems. A new one is
            created when omitted; read it from ``self.diagnostics``.
    """

    def __init__(self, checker=None, workers: int = Constants.DEFAULT_WORKERS,
                 diagnostics: Optional[DiagnosticCollector] = None):
        self.checker = checker
        self.workers = max(1, int(workers))
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticCollector()

    def build(self, scan_root: str,
              extra_projects: Optional[Dict[str, Sequence[str]]] = None) -> ProjectTree:
        """Process every project directory under ``scan_root``.

        Failures are recorded in ``self.diagnostics`` and never stop the walk.
        """
        tree = ProjectTree()
        extra_projects = extra_projects or {}
        root = os.path.abspath(scan_root)

        try:
            names = sorted(os.listdir(root))
        except OSError as e:
            self.diagnostics.error(f'While listing "{root}"', error=e)
            return tree

        project_dirs = [os.path.join(root, n) for n in names if os.path.isdir(os.path.join(root, n))]
        logger.info("Parsing data from POMs in %d directories under %s", len(project_dirs), root)

        if not project_dirs:
            return tree

        with Timer() as timer:
            with ThreadPoolExecutor(max_workers=min(self.workers, len(project_dirs))) as pool:
                futures = {
                    pool.submit(self._walk_project, root, path, extra_projects): path
                    for path in project_dirs
                }
                for future in as_completed(futures):
                    path = futures[future]
                    try:
                        entries = future.result()
                    except Exception as e:  # pylint: disable=broad-exception-caught
                        self.diagnostics.error(
                            f'While processing project "{self._relative(root, path)}"',
                            project=self._relative(root, path),
                            error=e,
                        )
                        continue
                    # Single collector: only this thread inserts into the tree
                    for rel, record in entries:
                        tree.add(rel, record)

            self._check_local_references(tree)

        if is_debug_enabled(logger):
            logger.debug(
                "Project walk finished",
                extra=extra_context(
                    event="function_exit",
                    component="graph",
                    action="build",
                    outcome="success",
                    count=len(tree),
                    duration_ms=timer.duration_ms(),
                )
            )
        return tree

    def _check_local_references(self, tree: ProjectTree) -> None:
        """Look up parent/dependency versions of artifacts built under the scan root.

        Third-party references are never compared, so they are not looked up.
        """
        if self.checker is None:
            return
        local = {r.artifact_id for r in tree.records() if r.artifact_id}
        pending = [
            (path, ref)
            for path, project in tree.items()
            for ref in project.references()
            if ref.artifact_id in local
        ]
        if not pending:
            return

        def check(item):
            path, ref = item
            ref.exists = self._check_exists(path, ref.artifact_id, ref.version)

        with ThreadPoolExecutor(max_workers=min(self.workers, len(pending))) as pool:
            list(pool.map(check, pending))

    def _walk_project(self, root: str, project_dir: str,
                      extra_projects: Dict[str, Sequence[str]]) -> List[ProjectEntry]:
        entries: List[ProjectEntry] = []
        self._process_project(root, project_dir, extra_projects, entries, set())
        return entries

    def _process_project(self, root: str, project_dir: str,
                         extra_projects: Dict[str, Sequence[str]],
                         entries: List[ProjectEntry], visited: Set[str]) -> None:
        rel = self._relative(root, project_dir)
        real = os.path.realpath(project_dir)
        if real in visited:
            self.diagnostics.warn(f'Subproject "{rel}" was already processed, skipping', project=rel)
            return
        visited.add(real)

        try:
            element = read_descriptor(project_dir)
        except DescriptorError as e:
            self.diagnostics.error(f'While processing project "{rel}"', project=rel, error=e)
            return
        if element is None:
            self.diagnostics.warn(f"Cannot read pom.xml in {descriptor_path(rel)}", project=rel)
            return

        try:
            project = self._extract_project(rel, element)
        except VersionShapeError as e:
            self.diagnostics.warn(str(e), project=rel)
            return
        except Exception as e:  # pylint: disable=broad-exception-caught
            self.diagnostics.error(f'While processing project "{rel}"', project=rel, error=e)
            return

        entries.append((rel, project))
        if is_debug_enabled(logger):
            logger.debug(
                "Project parsed",
                extra=extra_context(
                    event="parse",
                    component="graph",
                    action="process_project",
                    outcome="success",
                    target=rel,
                    count=len(project.dependencies),
                )
            )

        # Subprojects are declared against the directory name, at any depth
        name = os.path.basename(os.path.normpath(project_dir))
        for subproject in extra_projects.get(name, ()):
            self._process_project(root, os.path.join(project_dir, subproject),
                                  extra_projects, entries, visited)

    def _extract_project(self, rel: str, element: ET.Element) -> VersionRecord:
        """Build the root record with its parent and dependency references."""
        if not has_version_shape(child_text(element, TAG_VERSION)):
            raise VersionShapeError(
                f"Could not find <project><version> element in {descriptor_path(rel)}"
            )
        project = self._make_record(rel, HierarchyTag.ROOT, element)
        project.exists = self._check_exists(rel, registry_name_for(rel), project.version)

        # Only the first element of each kind counts, as with find_child
        sections: Dict[HierarchyTag, ET.Element] = {}
        for child in element:
            tag = HierarchyTag.from_tag_name(local_name(child.tag))
            if tag is not None and tag is not HierarchyTag.ROOT:
                sections.setdefault(tag, child)

        if HierarchyTag.PARENT in sections:
            project.parent = self._make_record(rel, HierarchyTag.PARENT, sections[HierarchyTag.PARENT])
        project.dependencies.extend(
            self._get_dependencies(rel, sections.get(HierarchyTag.DEPENDENCY), HierarchyTag.DEPENDENCY)
        )
        managed = sections.get(HierarchyTag.MANAGED_DEPENDENCY)
        project.dependencies.extend(
            self._get_dependencies(rel, find_child(managed, HierarchyTag.DEPENDENCY.tag_name),
                                   HierarchyTag.MANAGED_DEPENDENCY)
        )
        return project

    def _make_record(self, rel: str, tag: HierarchyTag, element: ET.Element) -> Optional[VersionRecord]:
        version = child_text(element, TAG_VERSION)
        if not has_version_shape(version):
            if version and is_debug_enabled(logger):
                logger.debug("Skipping non-standard version %r in %s", version, rel)
            return None

        return VersionRecord(
            group_id=child_text(element, TAG_GROUP_ID),
            artifact_id=child_text(element, TAG_ARTIFACT_ID),
            version=version,
            tag=tag,
            revision=parse_revision(version),
            project_path=rel,
        )

    def _check_exists(self, rel: str, name: Optional[str], version: str) -> Optional[bool]:
        if self.checker is None or not name:
            return None
        try:
            return self.checker.exists(name, version)
        except RegistryCheckError as e:
            self.diagnostics.warn(f"Registry check failed for {name} {version}", project=rel, error=e)
            return None

    def _get_dependencies(self, rel: str, node: Optional[ET.Element],
                          tag: HierarchyTag) -> List[VersionRecord]:
        """Records for every versioned ``<dependency>`` under a ``<dependencies>`` node."""
        records = []
        for item in find_children(node, TAG_DEPENDENCY):
            record = self._make_record(rel, tag, item)
            if record is not None:
                records.append(record)
        records.sort(key=lambda r: r.sort_key)
        return records

    @staticmethod
    def _relative(root: str, path: str) -> str:
        return os.path.relpath(os.path.normpath(path), root).replace(os.sep, "/")
