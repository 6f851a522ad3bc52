"""Diagnostics collector."""
import logging
import threading

from common.diagnostics import Diagnostic, DiagnosticCollector, Severity


def test_str_includes_detail():
    diag = Diagnostic(Severity.ERROR, 'While processing project "x"', "x", "bad xml")
    assert str(diag) == 'ERROR: While processing project "x" (bad xml)'
    assert str(Diagnostic(Severity.WARN, "msg")) == "WARN: msg"


def test_snapshot_is_sorted():
    collector = DiagnosticCollector()
    collector.warn("second", project="b")
    collector.error("first", project="a", error=ValueError("boom"))
    snap = collector.snapshot()
    assert [d.project for d in snap] == ["a", "b"]
    assert snap[0].detail == "boom"
    assert len(collector) == 2


def test_concurrent_adds():
    collector = DiagnosticCollector()

    def worker(n):
        for i in range(50):
            collector.warn(f"{n}-{i}", project=str(n))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(collector) == 200


def test_log_all_uses_severity(caplog):
    collector = DiagnosticCollector()
    collector.warn("Cannot read pom.xml in C/pom.xml", project="C")
    collector.error("While processing project \"bad\"", project="bad", error=RuntimeError("oops"))
    logger = logging.getLogger("tests.diagnostics")

    with caplog.at_level(logging.INFO, logger="tests.diagnostics"):
        collector.log_all(logger)

    levels = {r.getMessage(): r.levelno for r in caplog.records}
    assert levels["Cannot read pom.xml in C/pom.xml"] == logging.WARNING
    assert levels['While processing project "bad" (oops)'] == logging.ERROR


def test_severities_map_to_log_levels():
    assert [s.name for s in Severity] == ["ERROR", "WARN"]
    assert Severity.ERROR.log_level == logging.ERROR
    assert Severity.WARN.log_level == logging.WARNING
