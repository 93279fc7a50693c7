"""YAML settings source that layers environment overrides over base files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic_settings import PydanticBaseSettingsSource


if TYPE_CHECKING:
    from pydantic.fields import FieldInfo


# src/dishes_api/core/config/yaml_source.py -> project root
_DEFAULT_CONFIG_DIR = Path(__file__).resolve().parents[4] / "config"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict with ``override`` merged recursively into ``base``."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_directory(directory: Path) -> dict[str, Any]:
    """Merge every ``*.yaml`` file of a directory in file-name order.

    A missing directory yields an empty mapping.
    """
    merged: dict[str, Any] = {}
    if not directory.is_dir():
        return merged
    for yaml_file in sorted(directory.glob("*.yaml")):
        with yaml_file.open(encoding="utf-8") as f:
            merged = deep_merge(merged, yaml.safe_load(f) or {})
    return merged


def load_yaml_config(config_dir: Path, app_env: str) -> dict[str, Any]:
    """Load ``base/`` then deep-merge ``environments/{app_env}/`` on top."""
    base = load_yaml_directory(config_dir / "base")
    overrides = load_yaml_directory(config_dir / "environments" / app_env)
    return deep_merge(base, overrides)


class MultiYamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by the merged YAML tree for ``APP_ENV``.

    The config directory defaults to ``<project root>/config`` and can be
    moved with the ``CONFIG_DIR`` environment variable.
    """

    def __init__(self, settings_cls: type[Any]) -> None:
        super().__init__(settings_cls)
        config_dir = Path(os.getenv("CONFIG_DIR", str(_DEFAULT_CONFIG_DIR)))
        app_env = os.getenv("APP_ENV", "development")
        self._yaml_data = load_yaml_config(config_dir, app_env)

    def get_field_value(
        self,
        _field: FieldInfo,
        field_name: str,
    ) -> tuple[Any, str, bool]:
        value = self._yaml_data.get(field_name)
        return value, field_name, isinstance(value, (dict, list))

    def __call__(self) -> dict[str, Any]:
        return self._yaml_data
