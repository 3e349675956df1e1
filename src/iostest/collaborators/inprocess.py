"""In-process collaborators for testing and development.

Produces deterministic artifact handles derived from the target label without
scheduling any real compile, link, or packaging work. Every registration call
is recorded in ``calls`` so tests can assert on what the orchestrator asked
for and in which order.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from iostest.collaborators.base import (
    BundlingResult,
    CompileLinkResult,
    IdeProjectResult,
    ResourceValidationResult,
    Settings,
    TestSupportResult,
)
from iostest.config import BuildConfiguration
from iostest.models import (
    Artifact,
    CommonLibraryResult,
    CoverageToolInfo,
    DsymOutputType,
    HostApp,
    InstrumentedFiles,
    LibraryInfo,
    LinkConfiguration,
    ProductType,
    Runfiles,
    TargetAttributes,
    TestRunnerInfo,
    XcodeInfo,
)
from iostest.nestedset import OrderedArtifactSet
from iostest.observability import Diagnostic

TEST_RUNNER = Artifact("tools/objc/testrunner", root="tools")
MCOV_TOOL = Artifact("tools/objc/mcov", root="tools")
MEMLEAKS_LIBRARY = LibraryInfo(
    linked_libraries=(Artifact("tools/objc/memleaks/libmemleaks.a"),),
)


def make_host_app(label: str, *, frameworks: tuple[str, ...] = ()) -> HostApp:
    """Return a host application as an ``ios_application`` target would export it."""
    package, _, name = label.lstrip("/").partition(":")
    prefix = f"{package}/{name}" if package else name
    binary = Artifact(f"{prefix}_bin")
    return HostApp(
        label=label,
        linked_binary=binary,
        ipa=Artifact(f"{prefix}.ipa"),
        library=LibraryInfo(sdk_frameworks=frameworks, linked_libraries=(binary,)),
        xcode=XcodeInfo(label=label, product_type=ProductType.APPLICATION),
    )


@dataclass(slots=True)
class InProcessResolver:
    """Resolver that answers every collaborator call in-process."""

    host_apps: dict[str, HostApp] = field(default_factory=dict)
    libraries: dict[str, LibraryInfo] = field(default_factory=dict)
    memleaks_library: LibraryInfo = MEMLEAKS_LIBRARY
    calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    def add_host_app(self, host: HostApp) -> HostApp:
        self.host_apps[host.label] = host
        return host

    def operations(self) -> list[str]:
        return [operation for operation, _ in self.calls]

    def call(self, operation: str) -> dict[str, Any]:
        for name, arguments in self.calls:
            if name == operation:
                return arguments
        raise KeyError(operation)

    def resolve_common_library(
        self,
        attributes: TargetAttributes,
        extra_frameworks: tuple[str, ...],
        extra_libraries: tuple[LibraryInfo, ...],
    ) -> CommonLibraryResult:
        self.calls.append(
            (
                "resolve_common_library",
                {"extra_frameworks": extra_frameworks, "extra_libraries": extra_libraries},
            )
        )
        sources = tuple(
            _source(attributes, path) for path in (*attributes.srcs, *attributes.non_arc_srcs)
        )
        archive = Artifact(f"{_lib_prefix(attributes)}lib{attributes.name}.a") if sources else None
        own = LibraryInfo(
            sdk_frameworks=(*attributes.sdk_frameworks, *extra_frameworks),
            sources=sources,
            storyboards=tuple(_source(attributes, p) for p in attributes.storyboards),
            xcdatamodels=tuple(_source(attributes, p) for p in attributes.xcdatamodels),
            linked_libraries=(archive,) if archive is not None else (),
        )
        deps = tuple(self.libraries[dep] for dep in attributes.deps if dep in self.libraries)
        library = own.merged(*deps, *extra_libraries)
        return CommonLibraryResult(has_compiled_archive=archive is not None, library=library)

    def lookup_host_app(self, attributes: TargetAttributes) -> HostApp | None:
        self.calls.append(("lookup_host_app", {"xctest_app": attributes.xctest_app}))
        if attributes.xctest_app is None:
            return None
        return self.host_apps.get(attributes.xctest_app)

    def lookup_memleaks_library(self, attributes: TargetAttributes) -> LibraryInfo:
        self.calls.append(("lookup_memleaks_library", {}))
        return self.memleaks_library

    def register_compile_and_link(
        self,
        attributes: TargetAttributes,
        library: LibraryInfo,
        link_config: LinkConfiguration,
        extra_inputs: tuple[Artifact, ...],
        dsym_output_type: DsymOutputType,
    ) -> CompileLinkResult:
        self.calls.append(
            (
                "register_compile_and_link",
                {
                    "link_config": link_config,
                    "extra_inputs": extra_inputs,
                    "dsym_output_type": dsym_output_type,
                },
            )
        )
        settings: list[tuple[str, str]] = []
        if link_config.extra_link_args:
            settings.append(("OTHER_LDFLAGS", " ".join(link_config.extra_link_args)))
        if library.sdk_frameworks:
            settings.append(("SDK_FRAMEWORKS", " ".join(library.sdk_frameworks)))
        return CompileLinkResult(settings=tuple(settings))

    def register_release_bundling(
        self,
        attributes: TargetAttributes,
        library: LibraryInfo,
        link_config: LinkConfiguration,
        bundle_format: str,
        minimum_os: str,
        dsym_output_type: DsymOutputType,
    ) -> BundlingResult:
        self.calls.append(
            (
                "register_release_bundling",
                {
                    "link_config": link_config,
                    "bundle_format": bundle_format,
                    "minimum_os": minimum_os,
                    "dsym_output_type": dsym_output_type,
                },
            )
        )
        diagnostics: list[Diagnostic] = []
        if bundle_format != link_config.bundle_format:
            diagnostics.append(
                Diagnostic(
                    severity="error",
                    message=(
                        f"bundle format {bundle_format!r} does not match the link "
                        f"configuration's {link_config.bundle_format!r}"
                    ),
                )
            )
        prefix = _prefix(attributes)
        files = (Artifact(f"{prefix}.ipa"), Artifact(f"{prefix}.{dsym_output_type}.dSYM"))
        return BundlingResult(
            bundle_dir=bundle_format.format(name=attributes.name),
            files=files,
            settings=(("IPHONEOS_DEPLOYMENT_TARGET", minimum_os),),
            diagnostics=tuple(diagnostics),
        )

    def register_resource_validation(
        self, attributes: TargetAttributes
    ) -> ResourceValidationResult:
        self.calls.append(("register_resource_validation", {}))
        declared = Counter((*attributes.resources, *attributes.storyboards, *attributes.xcdatamodels))
        diagnostics = tuple(
            Diagnostic(severity="error", message=f"resource {path!r} is declared more than once")
            for path, count in sorted(declared.items())
            if count > 1
        )
        return ResourceValidationResult(diagnostics=diagnostics)

    def register_ide_project_export(
        self,
        attributes: TargetAttributes,
        library: LibraryInfo,
        product_type: ProductType,
        *,
        settings: Settings,
        test_host: str | None,
    ) -> IdeProjectResult:
        self.calls.append(
            (
                "register_ide_project_export",
                {"product_type": product_type, "settings": settings, "test_host": test_host},
            )
        )
        xcode = XcodeInfo(
            label=attributes.label,
            product_type=product_type,
            test_host=test_host,
            dependencies=(*attributes.bundles, *attributes.deps),
            non_propagated_dependencies=attributes.non_propagated_deps,
            settings=settings,
        )
        project = Artifact(f"{_prefix(attributes)}.xcodeproj/project.pbxproj")
        return IdeProjectResult(xcode=xcode, files=(project,))

    def register_test_support(
        self, attributes: TargetAttributes, config: BuildConfiguration
    ) -> TestSupportResult:
        self.calls.append(("register_test_support", {"config": config}))
        prefix = _prefix(attributes)
        executable = Artifact(f"{prefix}_test_script")
        runfiles = Runfiles(
            workspace_name=config.workspace_name,
            artifacts=OrderedArtifactSet.of(executable, TEST_RUNNER, Artifact(f"{prefix}.ipa")),
            executable=executable,
            legacy_external_runfiles=config.legacy_external_runfiles,
        )
        extras: list[object] = [
            TestRunnerInfo(
                runner=TEST_RUNNER,
                target_device=attributes.ios_test_target_device,
                device_args=attributes.ios_device_arg,
                plugins=attributes.plugins,
            )
        ]
        instrumented = InstrumentedFiles()
        if config.coverage_enabled:
            sources = tuple(
                _source(attributes, p) for p in (*attributes.srcs, *attributes.non_arc_srcs)
            )
            notes = tuple(
                Artifact(f"{_lib_prefix(attributes)}{s.basename.rsplit('.', 1)[0]}.gcno")
                for s in sources
            )
            instrumented = InstrumentedFiles(
                instrumented=OrderedArtifactSet(sources),
                metadata=OrderedArtifactSet(notes),
            )
            extras.append(CoverageToolInfo(tool=MCOV_TOOL, instrumented_sources=sources))
        return TestSupportResult(
            executable=executable,
            runfiles=runfiles,
            instrumented=instrumented,
            files=(executable,),
            extras=tuple(extras),
        )


def _prefix(attributes: TargetAttributes) -> str:
    if attributes.package:
        return f"{attributes.package}/{attributes.name}"
    return attributes.name


def _lib_prefix(attributes: TargetAttributes) -> str:
    if attributes.package:
        return f"{attributes.package}/_objs/{attributes.name}/"
    return f"_objs/{attributes.name}/"


def _source(attributes: TargetAttributes, path: str) -> Artifact:
    if attributes.package:
        return Artifact(f"{attributes.package}/{path}", root="src")
    return Artifact(path, root="src")


__all__ = ["MCOV_TOOL", "MEMLEAKS_LIBRARY", "TEST_RUNNER", "InProcessResolver", "make_host_app"]
