"""YAML configuration loading.

A file may nest everything under a top-level ``consul:`` key or put the
sections (``discovery``, ``heartbeat``, ``agent``, ``retry``) at the root.
String values may reference environment variables as ``${NAME}`` or
``${NAME:-fallback}``.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .models import RegistrationConfig

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_LOCATIONS",
    "get_default_config_path",
    "load_config",
    "load_config_with_overloads",
    "load_default_config",
]


class ConfigError(RuntimeError):
    """Raised when configuration loading fails."""


ROOT_KEY = "consul"
YAML_SUFFIXES = (".yaml", ".yml")

DEFAULT_CONFIG_LOCATIONS: tuple[Path, ...] = (
    Path("consul_registration.yaml"),
    Path("consul_registration.yml"),
    Path("~/.consul_registration.yaml"),
    Path("/etc/consul_registration/config.yaml"),
)

_ENV_REFERENCE = re.compile(r"\$\{(?P<name>[A-Za-z_]\w*)(?::-(?P<fallback>[^}]*))?\}")


def get_default_config_path() -> Path | None:
    """First existing file among :data:`DEFAULT_CONFIG_LOCATIONS`."""
    for location in DEFAULT_CONFIG_LOCATIONS:
        candidate = location.expanduser()
        if candidate.is_file():
            return candidate
    return None


def load_default_config() -> RegistrationConfig:
    path = get_default_config_path()
    if path is None:
        raise ConfigError("No default config file found")
    return load_config(path)


def load_config(path: str | Path | None) -> RegistrationConfig:
    """Load ``path`` (or the default file when ``path`` is empty)."""
    if not path:
        return load_default_config()
    return _build(_read(Path(path)), source=str(path))


def load_config_with_overloads(base_path: str | Path, *overload_paths: str | Path) -> RegistrationConfig:
    """Load ``base_path`` and deep-merge each override file over it, in order."""
    data = _read(Path(base_path))
    for overload in overload_paths:
        data = _deep_merge(data, _read(Path(overload)))
    return _build(data, source=", ".join(str(p) for p in (base_path, *overload_paths)))


def _build(data: Mapping[str, Any], source: str) -> RegistrationConfig:
    try:
        return RegistrationConfig.from_dict(data)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid config in {source}: {exc}") from exc


def _read(path: Path) -> dict[str, Any]:
    path = path.expanduser()
    if path.suffix.lower() not in YAML_SUFFIXES:
        raise ConfigError(f"Unsupported config file type: {path.suffix or path.name}")
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to load config file: {path}") from exc

    if document is None:
        return {}
    if not isinstance(document, Mapping):
        raise ConfigError(f"Config file must contain a mapping: {path}")

    data = _substitute_env(document)
    root = data.pop(ROOT_KEY, None)
    if root is None:
        return data
    if not isinstance(root, Mapping):
        raise ConfigError(f"'{ROOT_KEY}' section must be a mapping")
    return {**root, **data}


def _substitute_env(value: Any) -> Any:
    if isinstance(value, str):
        return _ENV_REFERENCE.sub(_env_value, value)
    if isinstance(value, Mapping):
        return {key: _substitute_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_substitute_env(item) for item in value]
    return value


def _env_value(match: re.Match[str]) -> str:
    name, fallback = match.group("name"), match.group("fallback")
    value = os.environ.get(name)
    if value:
        return value
    if fallback is None:
        raise ConfigError(f"Environment variable '{name}' is not set and no default provided")
    return fallback


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged
