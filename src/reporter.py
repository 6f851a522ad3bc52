"""Versions report rendering and export."""
from __future__ import annotations

import json
import logging
import sys
from typing import Iterable, List, Optional, TextIO

from constants import Constants, ExitCodes
from common.diagnostics import Diagnostic
from versioning.models import AgeTier, ProjectTree, VersionRecord
from versioning.resolver import classify_age

SPACE = " "
CURRENT_MARKER = "▷ Current version is: "
LEGEND_ORDER = [
    AgeTier.CURRENT_SNAPSHOT,
    AgeTier.CURRENT_RELEASE,
    AgeTier.OLD_SNAPSHOT,
    AgeTier.OLD_RELEASE,
    AgeTier.NOT_FOUND,
    AgeTier.UNKNOWN,
]


def registry_indicator(record: VersionRecord) -> str:
    """Marker for whether the project's own version is published."""
    if record.exists is False:
        return "✗  "
    if record.exists is True:
        return "✓ "
    return "  "


def _indent(tabs: int) -> str:
    return SPACE * (Constants.TAB_LEN * tabs) if tabs > 0 else ""


def _project_rule(project_path: str) -> str:
    fill = max(3, Constants.LINE_LEN - 6 - len(project_path))
    return f"---- {project_path} " + "-" * fill


def _reference_lines(tree: ProjectTree, ref: VersionRecord) -> List[str]:
    age, current = classify_age(tree, ref)
    lines = [
        age.glyph + _indent(ref.tag.output_tabs) + ref.tag.output_prefix
        + f"{ref.artifact_id}{SPACE}{ref.version}"
    ]
    if age.is_stale and current is not None:
        lines.append("  " + _indent(ref.tag.output_tabs + 1) + CURRENT_MARKER + current.version)
    return lines


def render_project(tree: ProjectTree, project_path: str, project: VersionRecord) -> List[str]:
    """Report rows for one project: its own version, parent and dependencies."""
    lines = ["", _project_rule(project_path)]
    lines.append(registry_indicator(project) + f"{project.artifact_id}{SPACE}{project.version}")
    for ref in project.references():
        lines.extend(_reference_lines(tree, ref))
    return lines


def render_report(tree: ProjectTree, scan_root: str,
                  diagnostics: Optional[Iterable[Diagnostic]] = None) -> str:
    """Build the full text report."""
    lines = ["", "=" * Constants.LINE_LEN, f"Version Report for {scan_root}/**"]
    for i, age in enumerate(LEGEND_ORDER):
        label = "Legend:  " if i == 0 else SPACE * 9
        lines.append(f"{label}{age.glyph} {age.description}")
    lines.append("")

    for project_path, project in tree.items():
        lines.extend(render_project(tree, project_path, project))

    diagnostics = list(diagnostics or [])
    if diagnostics:
        lines.append("")
        lines.append("Messages:")
        lines.extend(str(d) for d in diagnostics)

    lines.append("")
    lines.append("EOF")
    return "\n".join(lines) + "\n"


def print_report(report: str, stream: Optional[TextIO] = None) -> None:
    (stream or sys.stdout).write(report)


def write_report(report: str, path: str) -> None:
    """Write the text report to ``path``."""
    try:
        with open(path, "w", encoding="utf-8") as file:
            file.write(report)
        logging.info("Report has been successfully written at: %s", path)
    except OSError as e:
        logging.error("Report file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def _record_json(tree: ProjectTree, record: VersionRecord, with_age: bool) -> dict:
    data = {
        "groupId": record.group_id,
        "artifactId": record.artifact_id,
        "version": record.version,
        "revision": str(record.revision) if record.revision is not None else None,
        "exists": record.exists,
    }
    if with_age:
        age, current = classify_age(tree, record)
        data.update({
            "declaredIn": record.tag.tag_name,
            "age": age.name,
            "stale": age.is_stale,
            "currentVersion": current.version if current is not None else None,
        })
    return data


def export_json(tree: ProjectTree, path: str) -> None:
    """Exports the collected versions and reference ages to a JSON file.

    Args:
        tree: The project tree to export.
        path: File path to export the JSON.
    """
    data = []
    for project_path, project in tree.items():
        entry = {"projectPath": project_path}
        entry.update(_record_json(tree, project, with_age=False))
        entry["parent"] = (
            _record_json(tree, project.parent, with_age=True) if project.parent is not None else None
        )
        entry["dependencies"] = [_record_json(tree, dep, with_age=True) for dep in project.dependencies]
        data.append(entry)
    try:
        with open(path, "w", encoding="utf-8") as file:
            json.dump(data, file, ensure_ascii=False, indent=4)
        logging.info("JSON file has been successfully exported at: %s", path)
    except OSError as e:
        logging.error("JSON file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
