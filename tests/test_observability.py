import json
from pathlib import Path

from iostest import assemble
from iostest.collaborators import InProcessResolver
from iostest.errors import RequiresSourceError
from iostest.models import TargetAttributes
from iostest.observability import Diagnostic, DiagnosticsSink, StructuredLogger


def test_structured_logs_cover_every_stage_for_the_target(
    resolver: InProcessResolver, xctest_attributes: TargetAttributes
) -> None:
    logger = StructuredLogger()
    assemble(xctest_attributes, resolver, logger=logger)

    assert logger.stages_for("//app:tests") == ["classify", "common", "link", "bundle", "aggregate"]
    for record in logger.records_for_target("//app:tests"):
        assert record.operation == "assemble"
        assert record.level == "info"


def test_reported_errors_are_logged_at_error_level(resolver: InProcessResolver) -> None:
    logger = StructuredLogger()
    assemble(TargetAttributes(label="//app:empty"), resolver, logger=logger)

    assert logger.stages_for("//app:empty", level="error") == ["validate"]
    errors = [r for r in logger.records_for_target("//app:empty") if r.level == "error"]
    assert dict(errors[0].extra) == {"code": "E_REQUIRES_SOURCE"}


def test_missing_host_is_logged_at_link_stage(resolver: InProcessResolver) -> None:
    logger = StructuredLogger()
    attributes = TargetAttributes(
        label="//app:tests", is_xctest=True, srcs=("FooTests.m",), xctest_app="//app:absent"
    )
    assemble(attributes, resolver, logger=logger)

    assert logger.stages_for("//app:tests", level="error") == ["link"]
    assert "bundle" not in logger.stages_for("//app:tests")


def test_bound_stage_log_tags_target_and_operation() -> None:
    logger = StructuredLogger()
    log = logger.bind("assemble", "//a:t")
    info = log.info("common", "resolved", has_archive=True)
    failure = log.failure("validate", RequiresSourceError())

    assert logger.records == [info, failure]
    assert info.to_dict() == {
        "level": "info",
        "operation": "assemble",
        "target": "//a:t",
        "stage": "common",
        "message": "resolved",
        "extra": {"has_archive": True},
    }
    assert failure.level == "error"
    assert failure.message == "test target requires at least one source file."
    assert dict(failure.extra) == {"code": "E_REQUIRES_SOURCE"}


def test_logger_writes_sorted_json_lines(tmp_path: Path) -> None:
    logger = StructuredLogger()
    logger.log(operation="assemble", target="//a:t", stage="link", message="ok")
    path = logger.to_json_lines(tmp_path / "logs" / "assemble.jsonl")

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0]) == {
        "level": "info",
        "operation": "assemble",
        "target": "//a:t",
        "stage": "link",
        "message": "ok",
    }


def test_sink_keeps_targets_separate() -> None:
    sink = DiagnosticsSink()
    sink.report("//a:one", "error", "broken", code="E_X")
    sink.report("//a:two", "warning", "careful")
    sink.report_all("//a:two", (Diagnostic(severity="info", message="note"),))

    assert sink.has_errors("//a:one")
    assert not sink.has_errors("//a:two")
    assert [d.message for d in sink.diagnostics_for("//a:two")] == ["careful", "note"]
    assert sink.diagnostics_for("//a:missing") == []
