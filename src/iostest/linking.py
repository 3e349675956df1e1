"""Mode-specific linker configuration."""

from __future__ import annotations

from collections.abc import Callable

from iostest.errors import InternalConsistencyError, MissingHostAppError
from iostest.models import (
    APP_BUNDLE_DIR_FORMAT,
    XCTEST_BUNDLE_DIR_FORMAT,
    BuildMode,
    HostApp,
    LinkConfiguration,
)

HostAppLookup = Callable[[], HostApp | None]


def derive_link_config(
    mode: BuildMode,
    host_app_lookup: HostAppLookup,
    *,
    xctest_app: str | None = None,
) -> LinkConfiguration:
    """Derive extra link args, extra link inputs, and the bundle format for *mode*.

    Application tests link as ordinary executables. Hosted unit tests link with
    ``-bundle`` so no entry point is required, and with ``-bundle_loader`` so
    the linker resolves missing symbols against the host application binary.
    The lookup is only consulted for hosted unit tests. *xctest_app* names the
    requested host in the error raised when the lookup comes back empty.
    """
    if mode is BuildMode.APPLICATION:
        return LinkConfiguration(bundle_format=APP_BUNDLE_DIR_FORMAT)
    if mode is BuildMode.HOSTED_UNIT_TEST:
        host = host_app_lookup()
        if host is None:
            raise MissingHostAppError(
                "Hosted unit test has no resolvable host application.",
                hint="Set `xctest_app` to an application target that exports a linked binary.",
                context={"operation": "derive_link_config", "xctest_app": xctest_app or ""},
            )
        bundle_loader = host.linked_binary
        return LinkConfiguration(
            extra_link_args=("-bundle", "-bundle_loader", bundle_loader.exec_path),
            extra_link_inputs=(bundle_loader,),
            bundle_format=XCTEST_BUNDLE_DIR_FORMAT,
        )
    raise InternalConsistencyError(
        "Unhandled build mode.", context={"mode": str(mode), "operation": "derive_link_config"}
    )


__all__ = ["HostAppLookup", "derive_link_config"]
