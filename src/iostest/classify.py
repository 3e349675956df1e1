"""Build mode classification."""

from __future__ import annotations

from iostest.errors import InternalConsistencyError
from iostest.models import BuildMode, TargetAttributes

AUTOMATIC_SDK_FRAMEWORKS_FOR_XCTEST = ("XCTest",)


def classify(attributes: TargetAttributes) -> BuildMode:
    """Return the build mode selected by the `xctest` attribute."""
    if attributes.is_xctest:
        return BuildMode.HOSTED_UNIT_TEST
    return BuildMode.APPLICATION


def extra_sdk_frameworks(mode: BuildMode) -> tuple[str, ...]:
    if mode is BuildMode.APPLICATION:
        return ()
    if mode is BuildMode.HOSTED_UNIT_TEST:
        return AUTOMATIC_SDK_FRAMEWORKS_FOR_XCTEST
    raise InternalConsistencyError(
        "Unhandled build mode.", context={"mode": str(mode), "operation": "extra_sdk_frameworks"}
    )


__all__ = ["AUTOMATIC_SDK_FRAMEWORKS_FOR_XCTEST", "classify", "extra_sdk_frameworks"]
