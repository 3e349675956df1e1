import pytest

from iostest.classify import classify, extra_sdk_frameworks
from iostest.errors import MissingHostAppError
from iostest.linking import derive_link_config
from iostest.models import (
    APP_BUNDLE_DIR_FORMAT,
    XCTEST_BUNDLE_DIR_FORMAT,
    BuildMode,
    HostApp,
    ProductType,
    TargetAttributes,
)


def test_classify_reads_only_the_xctest_attribute() -> None:
    assert classify(TargetAttributes(label="//a:t")) is BuildMode.APPLICATION
    assert classify(TargetAttributes(label="//a:t", is_xctest=True)) is BuildMode.HOSTED_UNIT_TEST
    # A declared host app alone does not make the target hosted.
    assert classify(TargetAttributes(label="//a:t", xctest_app="//a:host")) is BuildMode.APPLICATION


def test_product_type_and_frameworks_follow_mode() -> None:
    assert BuildMode.APPLICATION.product_type is ProductType.APPLICATION
    assert BuildMode.HOSTED_UNIT_TEST.product_type is ProductType.UNIT_TEST
    assert extra_sdk_frameworks(BuildMode.APPLICATION) == ()
    assert extra_sdk_frameworks(BuildMode.HOSTED_UNIT_TEST) == ("XCTest",)


def test_application_link_config_is_empty_and_skips_lookup() -> None:
    def lookup() -> HostApp | None:
        raise AssertionError("host app must not be resolved for application tests")

    config = derive_link_config(BuildMode.APPLICATION, lookup)
    assert config.extra_link_args == ()
    assert config.extra_link_inputs == ()
    assert config.bundle_format == APP_BUNDLE_DIR_FORMAT
    assert config.bundle_dir("app_tests") == "Payload/app_tests.app"


def test_hosted_link_config_loads_against_host_binary(host_app: HostApp) -> None:
    config = derive_link_config(BuildMode.HOSTED_UNIT_TEST, lambda: host_app)
    assert config.extra_link_args == ("-bundle", "-bundle_loader", "app/host_bin")
    assert config.extra_link_inputs == (host_app.linked_binary,)
    assert config.bundle_format == XCTEST_BUNDLE_DIR_FORMAT
    assert config.bundle_dir("tests") == "Payload/tests.xctest"


def test_hosted_link_config_without_host_raises() -> None:
    calls: list[str] = []

    def lookup() -> HostApp | None:
        calls.append("lookup")
        return None

    with pytest.raises(MissingHostAppError) as excinfo:
        derive_link_config(BuildMode.HOSTED_UNIT_TEST, lookup, xctest_app="//app:absent")
    assert calls == ["lookup"]
    assert excinfo.value.context["xctest_app"] == "//app:absent"
    assert "xctest_app: //app:absent" in str(excinfo.value)
