"""Core typed dataclasses for target attributes, capabilities, and descriptions."""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, is_dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import Any, ClassVar, TypeVar, Union

import cbor2

from iostest.errors import ConfigurationError
from iostest.nestedset import EMPTY, OrderedArtifactSet

# Declared attribute names of the test rule.
IS_XCTEST_ATTR = "xctest"
XCTEST_APP_ATTR = "xctest_app"
DEVICE_ARG_ATTR = "ios_device_arg"
PLUGINS_ATTR = "plugins"
TEST_TARGET_DEVICE_ATTR = "ios_test_target_device"

APP_BUNDLE_DIR_FORMAT = "Payload/{name}.app"
XCTEST_BUNDLE_DIR_FORMAT = "Payload/{name}.xctest"

REQUIRES_DARWIN = "requires-darwin"

T = TypeVar("T")


class BuildMode(StrEnum):
    APPLICATION = "application"
    HOSTED_UNIT_TEST = "hosted_unit_test"

    @property
    def product_type(self) -> ProductType:
        if self is BuildMode.HOSTED_UNIT_TEST:
            return ProductType.UNIT_TEST
        return ProductType.APPLICATION


class ProductType(StrEnum):
    APPLICATION = "com.apple.product-type.application"
    UNIT_TEST = "com.apple.product-type.bundle.unit-test"


class DsymOutputType(StrEnum):
    TEST = "test"


class CapabilityKind(StrEnum):
    EXECUTION_INFO = "execution_info"
    RUNFILES = "runfiles"
    INSTRUMENTED_FILES = "instrumented_files"
    IDE_PROJECT = "ide_project"


@dataclass(frozen=True, slots=True)
class Artifact:
    exec_path: str
    root: str = "bin"

    @property
    def basename(self) -> str:
        return self.exec_path.rsplit("/", 1)[-1]


@dataclass(frozen=True, slots=True)
class TargetAttributes:
    label: str
    is_xctest: bool = False
    srcs: tuple[str, ...] = ()
    non_arc_srcs: tuple[str, ...] = ()
    hdrs: tuple[str, ...] = ()
    deps: tuple[str, ...] = ()
    bundles: tuple[str, ...] = ()
    non_propagated_deps: tuple[str, ...] = ()
    storyboards: tuple[str, ...] = ()
    xcdatamodels: tuple[str, ...] = ()
    resources: tuple[str, ...] = ()
    sdk_frameworks: tuple[str, ...] = ()
    xctest_app: str | None = None
    plugins: tuple[str, ...] = ()
    ios_device_arg: tuple[str, ...] = ()
    ios_test_target_device: str | None = None

    @property
    def package(self) -> str:
        return self.label.lstrip("/").split(":", 1)[0]

    @property
    def name(self) -> str:
        if ":" in self.label:
            return self.label.rsplit(":", 1)[1]
        return self.package.rsplit("/", 1)[-1]

    @classmethod
    def from_mapping(cls, label: str, attributes: Mapping[str, Any]) -> TargetAttributes:
        """Build attributes from a declared rule mapping.

        Unknown keys are ignored; list-valued attributes accept any sequence of
        strings and are frozen into tuples.
        """
        values: dict[str, Any] = {"label": label}
        if IS_XCTEST_ATTR in attributes:
            is_xctest = attributes[IS_XCTEST_ATTR]
            if not isinstance(is_xctest, bool):
                raise ConfigurationError(
                    "Attribute `xctest` must be a boolean.",
                    context={"target": label, "value": repr(is_xctest)},
                )
            values["is_xctest"] = is_xctest
        for name in _LIST_ATTRS:
            if name in attributes:
                values[name] = _string_tuple(label, name, attributes[name])
        for name in (XCTEST_APP_ATTR, TEST_TARGET_DEVICE_ATTR):
            raw = attributes.get(name)
            if raw is not None:
                if not isinstance(raw, str):
                    raise ConfigurationError(
                        f"Attribute `{name}` must be a label string.",
                        context={"target": label, "value": repr(raw)},
                    )
                values[name] = raw
        return cls(**values)


_LIST_ATTRS = (
    "srcs",
    "non_arc_srcs",
    "hdrs",
    "deps",
    "bundles",
    "non_propagated_deps",
    "storyboards",
    "xcdatamodels",
    "resources",
    "sdk_frameworks",
    PLUGINS_ATTR,
    DEVICE_ARG_ATTR,
)


def _string_tuple(label: str, name: str, raw: Any) -> tuple[str, ...]:
    if isinstance(raw, str) or not isinstance(raw, (list, tuple)):
        raise ConfigurationError(
            f"Attribute `{name}` must be a list of strings.",
            context={"target": label, "value": repr(raw)},
        )
    for item in raw:
        if not isinstance(item, str):
            raise ConfigurationError(
                f"Attribute `{name}` must contain only strings.",
                context={"target": label, "value": repr(item)},
            )
    return tuple(raw)


@dataclass(frozen=True, slots=True)
class LinkConfiguration:
    extra_link_args: tuple[str, ...] = ()
    extra_link_inputs: tuple[Artifact, ...] = ()
    bundle_format: str = APP_BUNDLE_DIR_FORMAT

    def bundle_dir(self, name: str) -> str:
        return self.bundle_format.format(name=name)


@dataclass(frozen=True, slots=True)
class LibraryInfo:
    """Capability descriptor exported by the common library builder."""

    sdk_frameworks: tuple[str, ...] = ()
    sources: tuple[Artifact, ...] = ()
    storyboards: tuple[Artifact, ...] = ()
    xcdatamodels: tuple[Artifact, ...] = ()
    linked_libraries: tuple[Artifact, ...] = ()

    def merged(self, *others: LibraryInfo) -> LibraryInfo:
        infos = (self, *others)
        return LibraryInfo(
            sdk_frameworks=_ordered_union(info.sdk_frameworks for info in infos),
            sources=_ordered_union(info.sources for info in infos),
            storyboards=_ordered_union(info.storyboards for info in infos),
            xcdatamodels=_ordered_union(info.xcdatamodels for info in infos),
            linked_libraries=_ordered_union(info.linked_libraries for info in infos),
        )


def _ordered_union(groups: Any) -> tuple[Any, ...]:
    return tuple(dict.fromkeys(item for group in groups for item in group))


@dataclass(frozen=True, slots=True)
class CommonLibraryResult:
    has_compiled_archive: bool
    library: LibraryInfo


@dataclass(frozen=True, slots=True)
class ExecutionInfo:
    kind: ClassVar[CapabilityKind] = CapabilityKind.EXECUTION_INFO

    requirements: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        object.__setattr__(self, "requirements", MappingProxyType(dict(self.requirements)))


@dataclass(frozen=True, slots=True)
class Runfiles:
    kind: ClassVar[CapabilityKind] = CapabilityKind.RUNFILES

    workspace_name: str
    artifacts: OrderedArtifactSet = EMPTY
    executable: Artifact | None = None
    legacy_external_runfiles: bool = True


@dataclass(frozen=True, slots=True)
class InstrumentedFiles:
    kind: ClassVar[CapabilityKind] = CapabilityKind.INSTRUMENTED_FILES

    instrumented: OrderedArtifactSet = EMPTY
    metadata: OrderedArtifactSet = EMPTY


@dataclass(frozen=True, slots=True)
class XcodeInfo:
    kind: ClassVar[CapabilityKind] = CapabilityKind.IDE_PROJECT

    label: str
    product_type: ProductType
    test_host: str | None = None
    dependencies: tuple[str, ...] = ()
    non_propagated_dependencies: tuple[str, ...] = ()
    settings: tuple[tuple[str, str], ...] = ()


Capability = Union[ExecutionInfo, Runfiles, InstrumentedFiles, XcodeInfo]


@dataclass(frozen=True, slots=True)
class TestRunnerInfo:
    """Extra capability: how the test runner reaches a device."""

    runner: Artifact
    target_device: str | None = None
    device_args: tuple[str, ...] = ()
    plugins: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CoverageToolInfo:
    """Extra capability: coverage tooling available to the test action."""

    tool: Artifact
    instrumented_sources: tuple[Artifact, ...] = ()


@dataclass(frozen=True, slots=True)
class HostApp:
    label: str
    linked_binary: Artifact
    ipa: Artifact
    library: LibraryInfo = field(default_factory=LibraryInfo)
    xcode: XcodeInfo | None = None


@dataclass(frozen=True, slots=True)
class TargetDescription:
    label: str
    files_to_build: OrderedArtifactSet
    capabilities: Mapping[CapabilityKind, Capability] = field(
        default_factory=lambda: MappingProxyType({})
    )
    extras: tuple[object, ...] = ()
    executable: Artifact | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "capabilities", MappingProxyType(dict(self.capabilities)))

    @property
    def execution_info(self) -> ExecutionInfo | None:
        value = self.capabilities.get(CapabilityKind.EXECUTION_INFO)
        return value if isinstance(value, ExecutionInfo) else None

    @property
    def runfiles(self) -> Runfiles | None:
        value = self.capabilities.get(CapabilityKind.RUNFILES)
        return value if isinstance(value, Runfiles) else None

    @property
    def instrumented_files(self) -> InstrumentedFiles | None:
        value = self.capabilities.get(CapabilityKind.INSTRUMENTED_FILES)
        return value if isinstance(value, InstrumentedFiles) else None

    @property
    def xcode(self) -> XcodeInfo | None:
        value = self.capabilities.get(CapabilityKind.IDE_PROJECT)
        return value if isinstance(value, XcodeInfo) else None

    def extras_of(self, kind: type[T]) -> tuple[T, ...]:
        return tuple(extra for extra in self.extras if isinstance(extra, kind))

    def to_payload(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "files_to_build": [_artifact_payload(a) for a in self.files_to_build],
            "capabilities": {
                str(kind): _value_payload(value)
                for kind, value in sorted(self.capabilities.items())
            },
            "extras": [
                {"type": type(extra).__name__, "value": _value_payload(extra)}
                for extra in self.extras
            ],
            "executable": None
            if self.executable is None
            else _artifact_payload(self.executable),
        }

    def to_cbor(self) -> bytes:
        return cbor2.dumps(self.to_payload(), canonical=True)

    def digest(self) -> str:
        return hashlib.sha256(self.to_cbor()).hexdigest()


def _artifact_payload(artifact: Artifact) -> dict[str, str]:
    return {"root": artifact.root, "path": artifact.exec_path}


def _value_payload(value: Any) -> Any:
    if isinstance(value, Artifact):
        return _artifact_payload(value)
    if isinstance(value, OrderedArtifactSet):
        return [_artifact_payload(a) for a in value]
    if isinstance(value, StrEnum):
        return value.value
    if isinstance(value, Mapping):
        return {str(k): _value_payload(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_value_payload(v) for v in value]
    if is_dataclass(value):
        return {f.name: _value_payload(getattr(value, f.name)) for f in fields(value)}
    return value


__all__ = [
    "APP_BUNDLE_DIR_FORMAT",
    "DEVICE_ARG_ATTR",
    "IS_XCTEST_ATTR",
    "PLUGINS_ATTR",
    "REQUIRES_DARWIN",
    "TEST_TARGET_DEVICE_ATTR",
    "XCTEST_APP_ATTR",
    "XCTEST_BUNDLE_DIR_FORMAT",
    "Artifact",
    "BuildMode",
    "Capability",
    "CapabilityKind",
    "CommonLibraryResult",
    "CoverageToolInfo",
    "DsymOutputType",
    "ExecutionInfo",
    "HostApp",
    "InstrumentedFiles",
    "LibraryInfo",
    "LinkConfiguration",
    "ProductType",
    "Runfiles",
    "TargetAttributes",
    "TargetDescription",
    "TestRunnerInfo",
    "XcodeInfo",
]
