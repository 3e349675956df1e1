"""External collaborator interfaces and implementations."""

from .base import (
    BundlingResult,
    CompileLinkResult,
    DependencyResolver,
    IdeProjectResult,
    ResourceValidationResult,
    Settings,
    TestSupportResult,
)
from .inprocess import InProcessResolver, make_host_app

__all__ = [
    "BundlingResult",
    "CompileLinkResult",
    "DependencyResolver",
    "IdeProjectResult",
    "InProcessResolver",
    "ResourceValidationResult",
    "Settings",
    "TestSupportResult",
    "make_host_app",
]
