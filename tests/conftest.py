"""Shared fixtures: POM writers and a clean HTTP cache per test."""
from __future__ import annotations

import os

import pytest

from common import http_client
from common.errors import RegistryCheckError


@pytest.fixture(autouse=True)
def _clear_http_cache():
    http_client.clear_cache()
    yield
    http_client.clear_cache()


def _coordinates(group, artifact, version, indent):
    lines = []
    if group is not None:
        lines.append(f"{indent}<groupId>{group}</groupId>")
    if artifact is not None:
        lines.append(f"{indent}<artifactId>{artifact}</artifactId>")
    if version is not None:
        lines.append(f"{indent}<version>{version}</version>")
    return "\n".join(lines)


def _dependency_block(deps, indent):
    if not deps:
        return ""
    body = "\n".join(
        f"{indent}  <dependency>\n{_coordinates(g, a, v, indent + '    ')}\n{indent}  </dependency>"
        for g, a, v in deps
    )
    return f"{indent}<dependencies>\n{body}\n{indent}</dependencies>"


def pom_xml(artifact, version, group="com.example", parent=None, deps=(), managed=()):
    """Render a small pom.xml; parent/deps entries are (group, artifact, version)."""
    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<project xmlns="http://maven.apache.org/POM/4.0.0">',
        "  <modelVersion>4.0.0</modelVersion>",
    ]
    if parent is not None:
        parts.append("  <parent>")
        parts.append(_coordinates(*parent, "    "))
        parts.append("  </parent>")
    parts.append(_coordinates(group, artifact, version, "  "))
    if deps:
        parts.append(_dependency_block(deps, "  "))
    if managed:
        parts.append("  <dependencyManagement>")
        parts.append(_dependency_block(managed, "    "))
        parts.append("  </dependencyManagement>")
    parts.append("</project>")
    return "\n".join(parts) + "\n"


@pytest.fixture
def write_pom():
    """Write a pom.xml into ``directory`` (created if needed) and return its path."""
    def _write(directory, artifact, version, **kwargs):
        os.makedirs(directory, exist_ok=True)
        path = os.path.join(str(directory), "pom.xml")
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(pom_xml(artifact, version, **kwargs))
        return path
    return _write


class FakeChecker:
    """Registry stand-in recording every lookup."""

    def __init__(self, missing=(), failing=()):
        self.calls = []
        self.missing = set(missing)
        self.failing = set(failing)

    def exists(self, name, version):
        self.calls.append((name, version))
        if (name, version) in self.failing:
            raise RegistryCheckError(f"{name} {version}: HTTP 502")
        return (name, version) not in self.missing


@pytest.fixture
def fake_checker():
    return FakeChecker
