"""Protocol for the external subsystems a test target is assembled from."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from iostest.config import BuildConfiguration
from iostest.models import (
    Artifact,
    CommonLibraryResult,
    DsymOutputType,
    HostApp,
    InstrumentedFiles,
    LibraryInfo,
    LinkConfiguration,
    ProductType,
    Runfiles,
    TargetAttributes,
    XcodeInfo,
)
from iostest.observability import Diagnostic

Settings = tuple[tuple[str, str], ...]


@dataclass(frozen=True, slots=True)
class CompileLinkResult:
    files: tuple[Artifact, ...] = ()
    settings: Settings = ()
    diagnostics: tuple[Diagnostic, ...] = ()


@dataclass(frozen=True, slots=True)
class BundlingResult:
    bundle_dir: str
    files: tuple[Artifact, ...] = ()
    settings: Settings = ()
    diagnostics: tuple[Diagnostic, ...] = ()


@dataclass(frozen=True, slots=True)
class ResourceValidationResult:
    settings: Settings = ()
    diagnostics: tuple[Diagnostic, ...] = ()


@dataclass(frozen=True, slots=True)
class IdeProjectResult:
    xcode: XcodeInfo
    files: tuple[Artifact, ...] = ()


@dataclass(frozen=True, slots=True)
class TestSupportResult:
    executable: Artifact
    runfiles: Runfiles
    instrumented: InstrumentedFiles
    files: tuple[Artifact, ...] = ()
    extras: tuple[object, ...] = ()


class DependencyResolver(Protocol):
    def resolve_common_library(
        self,
        attributes: TargetAttributes,
        extra_frameworks: tuple[str, ...],
        extra_libraries: tuple[LibraryInfo, ...],
    ) -> CommonLibraryResult:
        """Resolve sources and dependencies into the target's common library."""

    def lookup_host_app(self, attributes: TargetAttributes) -> HostApp | None:
        """Resolve the `xctest_app` dependency, or None when it is unavailable."""

    def lookup_memleaks_library(self, attributes: TargetAttributes) -> LibraryInfo:
        """Return the library that pauses the test run for leak inspection."""

    def register_compile_and_link(
        self,
        attributes: TargetAttributes,
        library: LibraryInfo,
        link_config: LinkConfiguration,
        extra_inputs: tuple[Artifact, ...],
        dsym_output_type: DsymOutputType,
    ) -> CompileLinkResult:
        """Schedule compile, archive, and link actions."""

    def register_release_bundling(
        self,
        attributes: TargetAttributes,
        library: LibraryInfo,
        link_config: LinkConfiguration,
        bundle_format: str,
        minimum_os: str,
        dsym_output_type: DsymOutputType,
    ) -> BundlingResult:
        """Schedule bundle and ipa packaging actions."""

    def register_resource_validation(
        self, attributes: TargetAttributes
    ) -> ResourceValidationResult:
        """Validate resource attributes."""

    def register_ide_project_export(
        self,
        attributes: TargetAttributes,
        library: LibraryInfo,
        product_type: ProductType,
        *,
        settings: Settings,
        test_host: str | None,
    ) -> IdeProjectResult:
        """Schedule IDE project generation."""

    def register_test_support(
        self, attributes: TargetAttributes, config: BuildConfiguration
    ) -> TestSupportResult:
        """Schedule test runner script generation."""
