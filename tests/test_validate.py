from iostest.config import BuildConfiguration
from iostest.errors import NoMultiArchError, RequiresSourceError
from iostest.models import CommonLibraryResult, LibraryInfo
from iostest.observability import DiagnosticsSink
from iostest.validate import check_single_architecture, check_sources, report, validate

WITH_SOURCES = CommonLibraryResult(has_compiled_archive=True, library=LibraryInfo())
WITHOUT_SOURCES = CommonLibraryResult(has_compiled_archive=False, library=LibraryInfo())


def test_check_sources() -> None:
    assert check_sources(WITH_SOURCES) is None
    assert isinstance(check_sources(WITHOUT_SOURCES), RequiresSourceError)


def test_check_single_architecture() -> None:
    assert check_single_architecture(BuildConfiguration()) is None
    assert check_single_architecture(BuildConfiguration(ios_multi_cpus=("arm64",))) is None
    assert check_single_architecture(BuildConfiguration(ios_multi_cpus=("arm64", "arm64"))) is None
    error = check_single_architecture(BuildConfiguration(ios_multi_cpus=("armv7", "arm64")))
    assert isinstance(error, NoMultiArchError)
    assert error.context["architectures"] == "armv7,arm64"


def test_validate_reports_both_errors_independently() -> None:
    errors = validate(WITHOUT_SOURCES, BuildConfiguration(ios_multi_cpus=("armv7", "arm64")))
    assert [type(error) for error in errors] == [RequiresSourceError, NoMultiArchError]
    assert validate(WITH_SOURCES, BuildConfiguration()) == []


def test_report_forwards_to_sink() -> None:
    sink = DiagnosticsSink()
    report(sink, "//app:tests", validate(WITHOUT_SOURCES, BuildConfiguration()))
    errors = sink.errors_for("//app:tests")
    assert len(errors) == 1
    assert errors[0].code == "E_REQUIRES_SOURCE"
    assert errors[0].message == "test target requires at least one source file."
    assert not sink.has_errors("//other:target")
