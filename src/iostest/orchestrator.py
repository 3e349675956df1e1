"""Assemble the build description of one mobile test target."""

from __future__ import annotations

from iostest.aggregate import Contribution, aggregate
from iostest.classify import classify, extra_sdk_frameworks
from iostest.collaborators.base import DependencyResolver, Settings
from iostest.config import BuildConfiguration
from iostest.errors import MissingHostAppError
from iostest.linking import derive_link_config
from iostest.models import (
    REQUIRES_DARWIN,
    BuildMode,
    DsymOutputType,
    ExecutionInfo,
    HostApp,
    LibraryInfo,
    LinkConfiguration,
    TargetAttributes,
    TargetDescription,
)
from iostest.observability import DiagnosticsSink, StructuredLogger
from iostest.resources import resource_files_to_build
from iostest.validate import report, validate


def assemble(
    attributes: TargetAttributes,
    resolver: DependencyResolver,
    *,
    config: BuildConfiguration | None = None,
    sink: DiagnosticsSink | None = None,
    logger: StructuredLogger | None = None,
) -> TargetDescription:
    """Classify, validate, and assemble *attributes* into a target description.

    User-facing problems (missing sources, multiple architectures, an
    unresolvable host application, collaborator diagnostics) are reported to
    *sink* under the target label and do not stop assembly, so one pass
    surfaces every problem. A description is always returned; callers must
    treat any reported error as a failed target. An
    :class:`~iostest.errors.InternalConsistencyError` raised while merging
    contributions propagates and no description is produced.
    """
    config = config if config is not None else BuildConfiguration()
    sink = sink if sink is not None else DiagnosticsSink()
    logger = logger if logger is not None else StructuredLogger()
    label = attributes.label
    log = logger.bind("assemble", label)

    mode = classify(attributes)
    log.info("classify", f"build mode is {mode}")

    host_app: HostApp | None = None
    if mode is BuildMode.HOSTED_UNIT_TEST:
        host_app = resolver.lookup_host_app(attributes)

    extra_libraries: list[LibraryInfo] = []
    if host_app is not None:
        extra_libraries.append(host_app.library)
    # Pauses the test after all tests have run so leaks can be inspected.
    if config.run_memleaks:
        extra_libraries.append(resolver.lookup_memleaks_library(attributes))
    common = resolver.resolve_common_library(
        attributes, extra_sdk_frameworks(mode), tuple(extra_libraries)
    )
    log.info("common", "resolved common library", has_archive=common.has_compiled_archive)

    errors = validate(common, config)
    report(sink, label, errors)
    for error in errors:
        log.failure("validate", error)

    contributions = [
        Contribution.of("resources", files=resource_files_to_build(attributes, common.library))
    ]
    settings: list[tuple[str, str]] = []

    link_config: LinkConfiguration | None
    try:
        link_config = derive_link_config(
            mode, lambda: host_app, xctest_app=attributes.xctest_app
        )
    except MissingHostAppError as exc:
        sink.report_error(label, exc)
        log.failure("link", exc)
        link_config = None
    else:
        log.info("link", "derived link configuration", args=link_config.extra_link_args)

    if link_config is not None:
        if host_app is not None:
            contributions.append(Contribution.of("host_app", files=(host_app.ipa,)))

        compiled = resolver.register_compile_and_link(
            attributes,
            common.library,
            link_config,
            link_config.extra_link_inputs,
            DsymOutputType.TEST,
        )
        sink.report_all(label, compiled.diagnostics)
        settings.extend(compiled.settings)
        contributions.append(Contribution.of("compile_and_link", files=compiled.files))

        bundled = resolver.register_release_bundling(
            attributes,
            common.library,
            link_config,
            link_config.bundle_format,
            config.minimum_os,
            DsymOutputType.TEST,
        )
        sink.report_all(label, bundled.diagnostics)
        settings.extend(bundled.settings)
        contributions.append(Contribution.of("release_bundling", files=bundled.files))
        log.info("bundle", f"bundle directory is {bundled.bundle_dir}")

    resources = resolver.register_resource_validation(attributes)
    sink.report_all(label, resources.diagnostics)
    settings.extend(resources.settings)
    contributions.append(Contribution.of("resource_validation"))

    ide = resolver.register_ide_project_export(
        attributes,
        common.library,
        mode.product_type,
        settings=_dedupe_settings(settings),
        test_host=_test_host(host_app),
    )
    contributions.append(
        Contribution.of("ide_project", files=ide.files, capabilities=(ide.xcode,))
    )

    tests = resolver.register_test_support(attributes, config)
    contributions.append(
        Contribution.of(
            "test_support",
            files=tests.files,
            capabilities=(tests.runfiles, tests.instrumented),
            extras=tests.extras,
            executable=tests.executable,
        )
    )
    contributions.append(
        Contribution.of(
            "execution_info", capabilities=(ExecutionInfo(requirements={REQUIRES_DARWIN: ""}),)
        )
    )

    description = aggregate(label, contributions)
    log.info(
        "aggregate",
        "assembled target description",
        files=len(description.files_to_build),
        errors=len(sink.errors_for(label)),
    )
    return description


def _test_host(host_app: HostApp | None) -> str | None:
    if host_app is None or host_app.xcode is None:
        return None
    return host_app.xcode.label


def _dedupe_settings(settings: list[tuple[str, str]]) -> Settings:
    return tuple(dict.fromkeys(settings))


__all__ = ["assemble"]
