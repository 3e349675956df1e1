"""Target-level validation that reports instead of aborting."""

from __future__ import annotations

from collections.abc import Iterable

from iostest.config import BuildConfiguration
from iostest.errors import IosTestError, NoMultiArchError, RequiresSourceError
from iostest.models import CommonLibraryResult
from iostest.observability import DiagnosticsSink


def check_sources(common: CommonLibraryResult) -> RequiresSourceError | None:
    if common.has_compiled_archive:
        return None
    return RequiresSourceError(
        hint="Add at least one file to `srcs` or `non_arc_srcs`.",
        context={"operation": "check_sources"},
    )


def check_single_architecture(config: BuildConfiguration) -> NoMultiArchError | None:
    architectures = config.requested_architectures
    if len(architectures) <= 1:
        return None
    return NoMultiArchError(
        hint="Pass a single architecture in `ios_multi_cpus` or leave it empty.",
        context={"operation": "check_single_architecture", "architectures": ",".join(architectures)},
    )


def validate(common: CommonLibraryResult, config: BuildConfiguration) -> list[IosTestError]:
    errors: list[IosTestError] = []
    for error in (check_sources(common), check_single_architecture(config)):
        if error is not None:
            errors.append(error)
    return errors


def report(sink: DiagnosticsSink, target: str, errors: Iterable[IosTestError]) -> None:
    for error in errors:
        sink.report_error(target, error)


__all__ = ["check_single_architecture", "check_sources", "report", "validate"]
