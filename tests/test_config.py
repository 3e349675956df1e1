from pathlib import Path

import pytest

from iostest.config import (
    BuildConfiguration,
    parse_build_configuration,
    read_build_configuration,
    write_build_configuration,
)
from iostest.errors import ConfigurationError


def test_defaults_request_a_single_architecture() -> None:
    config = BuildConfiguration()
    assert config.requested_architectures == ("x86_64",)
    assert BuildConfiguration(ios_multi_cpus=("arm64", "armv7", "arm64")).requested_architectures == (
        "arm64",
        "armv7",
    )


def test_parse_partial_configuration_uses_defaults() -> None:
    config = parse_build_configuration('{"ios_multi_cpus": ["armv7", "arm64"], "run_memleaks": true}')
    assert config.ios_multi_cpus == ("armv7", "arm64")
    assert config.run_memleaks is True
    assert config.minimum_os == BuildConfiguration().minimum_os


def test_write_then_read_configuration(tmp_path: Path) -> None:
    config = BuildConfiguration(minimum_os="9.0", coverage_enabled=True, workspace_name="ws")
    path = write_build_configuration(config, tmp_path / "nested" / "config.json")
    assert read_build_configuration(path) == config


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[]",
        '{"ios_multi_cpus": "arm64"}',
        '{"ios_multi_cpus": [""]}',
        '{"run_memleaks": "yes"}',
        '{"minimum_os": 9}',
    ],
)
def test_malformed_configuration_is_rejected(raw: str) -> None:
    with pytest.raises(ConfigurationError):
        parse_build_configuration(raw)


def test_missing_configuration_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        read_build_configuration(tmp_path / "absent.json")
    assert excinfo.value.context["path"].endswith("absent.json")
