"""Structured logging and the per-target diagnostics sink."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Literal

from iostest.errors import IosTestError

Severity = Literal["error", "warning", "info"]


@dataclass(frozen=True, slots=True)
class LogRecord:
    level: Severity
    operation: str
    target: str | None
    stage: str | None
    message: str
    extra: Mapping[str, object] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "level": self.level,
            "operation": self.operation,
            "target": self.target,
            "stage": self.stage,
            "message": self.message,
        }
        if self.extra:
            payload["extra"] = dict(self.extra)
        return payload


@dataclass(slots=True)
class StructuredLogger:
    """In-memory log of assembly stages, exportable as JSON lines."""

    records: list[LogRecord] = field(default_factory=list)

    def log(
        self,
        *,
        operation: str,
        target: str | None,
        stage: str | None,
        message: str,
        level: Severity = "info",
        extra: Mapping[str, object] | None = None,
    ) -> LogRecord:
        record = LogRecord(
            level=level,
            operation=operation,
            target=target,
            stage=stage,
            message=message,
            extra=extra or {},
        )
        self.records.append(record)
        return record

    def bind(self, operation: str, target: str) -> StageLog:
        return StageLog(logger=self, operation=operation, target=target)

    def records_for_target(self, target: str) -> list[LogRecord]:
        return [record for record in self.records if record.target == target]

    def stages_for(self, target: str, *, level: Severity | None = None) -> list[str | None]:
        return [
            record.stage
            for record in self.records_for_target(target)
            if level is None or record.level == level
        ]

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(record.to_dict(), sort_keys=True) for record in self.records]
        output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return output_path


@dataclass(frozen=True, slots=True)
class StageLog:
    """Logger bound to one operation on one target."""

    logger: StructuredLogger
    operation: str
    target: str

    def info(self, stage: str, message: str, **extra: object) -> LogRecord:
        return self.logger.log(
            operation=self.operation,
            target=self.target,
            stage=stage,
            message=message,
            extra=extra,
        )

    def failure(self, stage: str, error: IosTestError) -> LogRecord:
        return self.logger.log(
            operation=self.operation,
            target=self.target,
            stage=stage,
            message=error.message,
            level="error",
            extra={"code": error.code},
        )


@dataclass(frozen=True, slots=True)
class Diagnostic:
    severity: Severity
    message: str
    code: str | None = None


@dataclass(slots=True)
class DiagnosticsSink:
    """Collects diagnostics per target; reporting never raises."""

    entries: dict[str, list[Diagnostic]] = field(default_factory=dict)

    def report(
        self,
        target: str,
        severity: Severity,
        message: str,
        *,
        code: str | None = None,
    ) -> None:
        self.entries.setdefault(target, []).append(
            Diagnostic(severity=severity, message=message, code=code)
        )

    def report_error(self, target: str, error: IosTestError) -> None:
        self.report(target, "error", error.message, code=error.code)

    def report_all(self, target: str, diagnostics: tuple[Diagnostic, ...]) -> None:
        self.entries.setdefault(target, []).extend(diagnostics)

    def diagnostics_for(self, target: str) -> list[Diagnostic]:
        return list(self.entries.get(target, ()))

    def errors_for(self, target: str) -> list[Diagnostic]:
        return [d for d in self.entries.get(target, ()) if d.severity == "error"]

    def has_errors(self, target: str) -> bool:
        return bool(self.errors_for(target))


__all__ = [
    "Diagnostic",
    "DiagnosticsSink",
    "LogRecord",
    "Severity",
    "StageLog",
    "StructuredLogger",
]
