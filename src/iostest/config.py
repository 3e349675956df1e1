"""Active build configuration and its JSON parser/serializer."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from iostest.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class BuildConfiguration:
    ios_multi_cpus: tuple[str, ...] = ()
    ios_cpu: str = "x86_64"
    minimum_os: str = "7.0"
    run_memleaks: bool = False
    workspace_name: str = "__main__"
    legacy_external_runfiles: bool = True
    coverage_enabled: bool = False

    @property
    def requested_architectures(self) -> tuple[str, ...]:
        if not self.ios_multi_cpus:
            return (self.ios_cpu,)
        return tuple(dict.fromkeys(self.ios_multi_cpus))


def serialize_build_configuration(config: BuildConfiguration) -> str:
    payload = {
        "ios_multi_cpus": list(config.ios_multi_cpus),
        "ios_cpu": config.ios_cpu,
        "minimum_os": config.minimum_os,
        "run_memleaks": config.run_memleaks,
        "workspace_name": config.workspace_name,
        "legacy_external_runfiles": config.legacy_external_runfiles,
        "coverage_enabled": config.coverage_enabled,
    }
    return json.dumps(payload, indent=2, sort_keys=True) + "\n"


def parse_build_configuration(raw: str) -> BuildConfiguration:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError("Invalid build configuration JSON.", hint=str(exc)) from exc

    if not isinstance(payload, dict):
        raise ConfigurationError("Invalid build configuration payload type.")

    defaults = BuildConfiguration()
    return BuildConfiguration(
        ios_multi_cpus=_optional_str_list(payload, "ios_multi_cpus"),
        ios_cpu=_optional_str(payload, "ios_cpu", defaults.ios_cpu),
        minimum_os=_optional_str(payload, "minimum_os", defaults.minimum_os),
        run_memleaks=_optional_bool(payload, "run_memleaks", defaults.run_memleaks),
        workspace_name=_optional_str(payload, "workspace_name", defaults.workspace_name),
        legacy_external_runfiles=_optional_bool(
            payload, "legacy_external_runfiles", defaults.legacy_external_runfiles
        ),
        coverage_enabled=_optional_bool(payload, "coverage_enabled", defaults.coverage_enabled),
    )


def read_build_configuration(path: str | Path) -> BuildConfiguration:
    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigurationError(
            "Build configuration file does not exist.",
            hint="Write one with write_build_configuration() or pass BuildConfiguration().",
            context={"path": str(config_path)},
        ) from exc
    return parse_build_configuration(raw)


def write_build_configuration(config: BuildConfiguration, path: str | Path) -> Path:
    config_path = Path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(serialize_build_configuration(config), encoding="utf-8")
    return config_path


def _optional_str(payload: dict[str, Any], key: str, default: str) -> str:
    value = payload.get(key, default)
    if not isinstance(value, str) or not value:
        raise ConfigurationError(
            f"Invalid build configuration `{key}` value.",
            context={"key": key, "value": repr(value)},
        )
    return value


def _optional_bool(payload: dict[str, Any], key: str, default: bool) -> bool:
    value = payload.get(key, default)
    if not isinstance(value, bool):
        raise ConfigurationError(
            f"Invalid build configuration `{key}` value.",
            hint="Use JSON true/false.",
            context={"key": key, "value": repr(value)},
        )
    return value


def _optional_str_list(payload: dict[str, Any], key: str) -> tuple[str, ...]:
    value = payload.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, str) and item for item in value):
        raise ConfigurationError(
            f"Invalid build configuration `{key}` value.",
            hint="Expected a list of architecture names.",
            context={"key": key, "value": repr(value)},
        )
    return tuple(value)


__all__ = [
    "BuildConfiguration",
    "parse_build_configuration",
    "read_build_configuration",
    "serialize_build_configuration",
    "write_build_configuration",
]
