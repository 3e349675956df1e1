"""Typed error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import ClassVar

REQUIRES_SOURCE_ERROR = "test target requires at least one source file."
NO_MULTI_ARCH_ERROR = "test target cannot be built for multiple architectures at the same time."


class ErrorCode(StrEnum):
    """Stable error identifiers reported through diagnostics."""

    REQUIRES_SOURCE = "E_REQUIRES_SOURCE"
    NO_MULTI_ARCH = "E_NO_MULTI_ARCH"
    MISSING_HOST_APP = "E_MISSING_HOST_APP"
    INTERNAL_CONSISTENCY = "E_INTERNAL_CONSISTENCY"
    CONFIGURATION = "E_CONFIGURATION"


class IosTestError(Exception):
    """Base error class that carries code, optional hint, and context."""

    user_facing: ClassVar[bool] = True

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.context:
            for k, v in self.context.items():
                if v:
                    parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class RequiresSourceError(IosTestError):
    def __init__(
        self,
        message: str = REQUIRES_SOURCE_ERROR,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.REQUIRES_SOURCE, hint=hint, context=context)


class NoMultiArchError(IosTestError):
    def __init__(
        self,
        message: str = NO_MULTI_ARCH_ERROR,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.NO_MULTI_ARCH, hint=hint, context=context)


class MissingHostAppError(IosTestError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.MISSING_HOST_APP, hint=hint, context=context)


class ConfigurationError(IosTestError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.CONFIGURATION, hint=hint, context=context)


class InternalConsistencyError(IosTestError):
    """Contract violation between collaborators; never reported, always raised."""

    user_facing: ClassVar[bool] = False

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message, code=ErrorCode.INTERNAL_CONSISTENCY, hint=hint, context=context
        )


__all__ = [
    "NO_MULTI_ARCH_ERROR",
    "REQUIRES_SOURCE_ERROR",
    "ConfigurationError",
    "ErrorCode",
    "InternalConsistencyError",
    "IosTestError",
    "MissingHostAppError",
    "NoMultiArchError",
    "RequiresSourceError",
]
