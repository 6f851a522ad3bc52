"""Version graph builder over temporary project directories."""
from __future__ import annotations

import os

from common.diagnostics import Severity
from versioning.graph import VersionGraphBuilder, has_version_shape
from versioning.models import HierarchyTag, Revision


def make_workspace(root, write_pom):
    write_pom(os.path.join(root, "A"), "foo", "2.0.0")
    write_pom(os.path.join(root, "B"), "bar", "1.0.0",
              parent=("com.example", "foo", "1.9.0"),
              deps=[("com.example", "foo", "1.9.0")])
    write_pom(os.path.join(root, "B", "sub"), "bar-sub", "1.0.0-SNAPSHOT")


def test_has_version_shape():
    assert has_version_shape("1.2.3")
    assert has_version_shape("1.2.3.RELEASE")
    assert has_version_shape("1.2.3-SNAPSHOT")
    assert not has_version_shape("${spring.version}")
    assert not has_version_shape("1.2")
    assert not has_version_shape(None)
    assert not has_version_shape("")


def test_build_with_subprojects(tmp_path, write_pom, fake_checker):
    make_workspace(str(tmp_path), write_pom)
    checker = fake_checker()
    builder = VersionGraphBuilder(checker=checker, workers=2)

    tree = builder.build(str(tmp_path), {"B": ["sub"]})

    assert list(tree) == ["A", "B", "B/sub"]
    assert len(builder.diagnostics) == 0

    a = tree.get("A")
    assert a.artifact_id == "foo"
    assert a.revision == Revision(2, 0, 0, False)
    assert a.tag is HierarchyTag.ROOT
    assert a.exists is True
    assert a.project_path == "A"

    b = tree.get("B")
    assert b.parent.tag is HierarchyTag.PARENT
    assert b.parent.version == "1.9.0"
    assert [(d.artifact_id, d.tag) for d in b.dependencies] == [("foo", HierarchyTag.DEPENDENCY)]

    sub = tree.get("B/sub")
    assert sub.revision.is_snapshot is True

    # Roots are looked up under their project path, nested ones under the parent path
    assert ("A", "2.0.0") in checker.calls
    assert ("B", "1.0.0") in checker.calls
    assert ("B", "1.0.0-SNAPSHOT") in checker.calls
    assert ("foo", "1.9.0") in checker.calls


def test_subprojects_not_walked_unless_declared(tmp_path, write_pom):
    make_workspace(str(tmp_path), write_pom)
    tree = VersionGraphBuilder().build(str(tmp_path))
    assert list(tree) == ["A", "B"]


def test_build_is_deterministic(tmp_path, write_pom):
    make_workspace(str(tmp_path), write_pom)
    first = VersionGraphBuilder(workers=4).build(str(tmp_path), {"B": ["sub"]})
    second = VersionGraphBuilder(workers=1).build(str(tmp_path), {"B": ["sub"]})
    assert first == second


def test_directory_without_descriptor_is_reported(tmp_path, write_pom):
    write_pom(str(tmp_path / "A"), "foo", "2.0.0")
    (tmp_path / "C").mkdir()
    (tmp_path / "notes.txt").write_text("not a project", encoding="utf-8")
    builder = VersionGraphBuilder()

    tree = builder.build(str(tmp_path))

    assert list(tree) == ["A"]
    diags = builder.diagnostics.snapshot()
    assert len(diags) == 1
    assert diags[0].severity is Severity.WARN
    assert diags[0].message == "Cannot read pom.xml in C/pom.xml"
    assert diags[0].project == "C"


def test_malformed_descriptor_does_not_stop_walk(tmp_path, write_pom):
    write_pom(str(tmp_path / "A"), "foo", "2.0.0")
    bad = tmp_path / "bad"
    bad.mkdir()
    (bad / "pom.xml").write_text("<project><version>1.0.0</project>", encoding="utf-8")
    builder = VersionGraphBuilder()

    tree = builder.build(str(tmp_path))

    assert list(tree) == ["A"]
    diags = builder.diagnostics.snapshot()
    assert [(d.severity, d.message) for d in diags] == [
        (Severity.ERROR, 'While processing project "bad"')
    ]
    assert diags[0].detail


def test_project_version_must_have_shape(tmp_path, write_pom):
    write_pom(str(tmp_path / "P"), "prop", "${revision}")
    builder = VersionGraphBuilder()

    tree = builder.build(str(tmp_path))

    assert len(tree) == 0
    diags = builder.diagnostics.snapshot()
    assert diags[0].message == "Could not find <project><version> element in P/pom.xml"


def test_reference_versions_filtered_and_sorted(tmp_path, write_pom):
    write_pom(str(tmp_path / "A"), "app", "1.0.0", deps=[
        ("org.z", "zeta", "3.0.0"),
        ("org.a", "alpha", "1.2.3.RELEASE"),
        ("org.a", "placeholder", "${alpha.version}"),
        ("org.a", "unversioned", None),
    ], managed=[
        ("org.m", "managed-lib", "4.0.0"),
    ])

    project = VersionGraphBuilder().build(str(tmp_path)).get("A")

    assert [(d.artifact_id, d.tag) for d in project.dependencies] == [
        ("alpha", HierarchyTag.DEPENDENCY),
        ("zeta", HierarchyTag.DEPENDENCY),
        ("managed-lib", HierarchyTag.MANAGED_DEPENDENCY),
    ]
    alpha = project.dependencies[0]
    assert alpha.revision is None
    assert alpha.version == "1.2.3.RELEASE"
    assert project.parent is None


def test_registry_failure_leaves_existence_unknown(tmp_path, write_pom, fake_checker):
    write_pom(str(tmp_path / "A"), "foo", "2.0.0")
    builder = VersionGraphBuilder(checker=fake_checker(failing=[("A", "2.0.0")]))

    tree = builder.build(str(tmp_path))

    assert tree.get("A").exists is None
    diags = builder.diagnostics.snapshot()
    assert len(diags) == 1
    assert diags[0].severity is Severity.WARN
    assert diags[0].message == "Registry check failed for A 2.0.0"


def test_registry_missing_version(tmp_path, write_pom, fake_checker):
    write_pom(str(tmp_path / "A"), "foo", "2.0.0", deps=[("g", "lib", "1.0.0")])
    write_pom(str(tmp_path / "L"), "lib", "1.1.0")
    tree = VersionGraphBuilder(checker=fake_checker(missing=[("lib", "1.0.0")])).build(str(tmp_path))
    project = tree.get("A")
    assert project.exists is True
    assert project.dependencies[0].exists is False


def test_third_party_references_not_looked_up(tmp_path, write_pom, fake_checker):
    write_pom(str(tmp_path / "A"), "foo", "2.0.0",
              parent=("org.springframework.boot", "spring-boot-starter-parent", "2.7.0"),
              deps=[("org.springframework", "spring-core", "5.3.1"), ("junit", "junit", "4.13.2")])
    checker = fake_checker(failing=[("spring-core", "5.3.1")])
    builder = VersionGraphBuilder(checker=checker)

    tree = builder.build(str(tmp_path))

    assert checker.calls == [("A", "2.0.0")]
    assert len(builder.diagnostics) == 0
    project = tree.get("A")
    assert project.parent.exists is None
    assert [d.exists for d in project.dependencies] == [None, None]


def test_first_section_of_each_kind_wins(tmp_path):
    project_dir = tmp_path / "A"
    project_dir.mkdir()
    (project_dir / "pom.xml").write_text(
        "<project>"
        "<artifactId>app</artifactId><version>1.0.0</version>"
        "<DEPENDENCIES><dependency><artifactId>first</artifactId><version>1.0.0</version></dependency></DEPENDENCIES>"
        "<dependencies><dependency><artifactId>second</artifactId><version>1.0.0</version></dependency></dependencies>"
        "</project>",
        encoding="utf-8",
    )

    project = VersionGraphBuilder().build(str(tmp_path)).get("A")

    assert [d.artifact_id for d in project.dependencies] == ["first"]


def test_no_checker_means_unknown_existence(tmp_path, write_pom):
    write_pom(str(tmp_path / "A"), "foo", "2.0.0")
    tree = VersionGraphBuilder().build(str(tmp_path))
    assert tree.get("A").exists is None


def test_subproject_loop_is_cut(tmp_path, write_pom):
    write_pom(str(tmp_path / "A"), "foo", "2.0.0")
    builder = VersionGraphBuilder()

    tree = builder.build(str(tmp_path), {"A": ["."]})

    assert list(tree) == ["A"]
    messages = [d.message for d in builder.diagnostics.snapshot()]
    assert messages == ['Subproject "A" was already processed, skipping']


def test_nested_subprojects_use_their_own_directory_name(tmp_path, write_pom):
    write_pom(str(tmp_path / "A"), "a", "1.0.0")
    write_pom(str(tmp_path / "A" / "mid"), "mid", "1.0.0")
    write_pom(str(tmp_path / "A" / "mid" / "leaf"), "leaf", "1.0.0")

    tree = VersionGraphBuilder().build(str(tmp_path), {"A": ["mid"], "mid": ["leaf"]})

    assert list(tree) == ["A", "A/mid", "A/mid/leaf"]


def test_missing_scan_root(tmp_path):
    builder = VersionGraphBuilder()
    tree = builder.build(str(tmp_path / "missing"))
    assert len(tree) == 0
    assert builder.diagnostics.snapshot()[0].severity is Severity.ERROR
