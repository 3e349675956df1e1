"""Shared test fixtures."""

from __future__ import annotations

import pytest

from iostest.collaborators import InProcessResolver, make_host_app
from iostest.models import HostApp, TargetAttributes

HOST_LABEL = "//app:host"


@pytest.fixture
def resolver() -> InProcessResolver:
    """Provide an in-process resolver with one registered host application."""
    resolver = InProcessResolver()
    resolver.add_host_app(make_host_app(HOST_LABEL, frameworks=("UIKit",)))
    return resolver


@pytest.fixture
def host_app(resolver: InProcessResolver) -> HostApp:
    return resolver.host_apps[HOST_LABEL]


@pytest.fixture
def xctest_attributes() -> TargetAttributes:
    return TargetAttributes(
        label="//app:tests",
        is_xctest=True,
        srcs=("FooTests.m",),
        xctest_app=HOST_LABEL,
    )


@pytest.fixture
def app_attributes() -> TargetAttributes:
    return TargetAttributes(label="//app:app_tests", srcs=("main.m", "AppTests.m"))
