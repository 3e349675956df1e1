"""Public package entrypoint for mobile test target assembly."""

from .aggregate import Contribution, aggregate
from .classify import classify
from .collaborators import DependencyResolver, InProcessResolver, make_host_app
from .config import BuildConfiguration, parse_build_configuration, read_build_configuration
from .errors import (
    ConfigurationError,
    ErrorCode,
    InternalConsistencyError,
    IosTestError,
    MissingHostAppError,
    NoMultiArchError,
    RequiresSourceError,
)
from .linking import derive_link_config
from .models import (
    Artifact,
    BuildMode,
    CapabilityKind,
    HostApp,
    LinkConfiguration,
    TargetAttributes,
    TargetDescription,
)
from .nestedset import OrderedArtifactSet, OrderedArtifactSetBuilder
from .observability import Diagnostic, DiagnosticsSink, StructuredLogger
from .orchestrator import assemble
from .validate import validate

__all__ = [
    "Artifact",
    "BuildConfiguration",
    "BuildMode",
    "CapabilityKind",
    "ConfigurationError",
    "Contribution",
    "DependencyResolver",
    "Diagnostic",
    "DiagnosticsSink",
    "ErrorCode",
    "HostApp",
    "InProcessResolver",
    "InternalConsistencyError",
    "IosTestError",
    "LinkConfiguration",
    "MissingHostAppError",
    "NoMultiArchError",
    "OrderedArtifactSet",
    "OrderedArtifactSetBuilder",
    "RequiresSourceError",
    "StructuredLogger",
    "TargetAttributes",
    "TargetDescription",
    "aggregate",
    "assemble",
    "classify",
    "derive_link_config",
    "make_host_app",
    "parse_build_configuration",
    "read_build_configuration",
    "validate",
]
