from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml

CONFIG_DEFAULT = "vika.config.yaml"
DEFAULT_ID_PATTERN = "^[A-Za-z0-9][A-Za-z0-9._-]*$"
STORAGE_FORMATS = ("markdown", "yaml")


class ConfigError(RuntimeError):
    pass


@dataclass
class VikaConfig:
    version: int
    source_file: Path | None
    issues_dir: Path
    storage_format: str
    id_pattern: str
    # Logging configuration
    logging_json_enabled: bool
    logging_level: str
    # Output artifacts
    export_json: str
    schema_file: str


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name, {}) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Configuration section '{name}' must be a mapping")
    return cast(dict[str, Any], value)


def _build_config(raw: dict[str, Any], base: Path, source_file: Path | None) -> VikaConfig:
    storage = _section(raw, "storage")
    logging_config = _section(raw, "logging")
    out = _section(raw, "output")

    storage_format = str(storage.get("format", "markdown")).lower()
    if storage_format not in STORAGE_FORMATS:
        raise ConfigError(
            f"Unknown storage format '{storage_format}' (expected one of {', '.join(STORAGE_FORMATS)})"
        )
    # Environment override keeps CI invocations config-free
    directory = os.environ.get("VIKA_ISSUES_DIR") or storage.get("directory", ".issues")

    return VikaConfig(
        version=int(raw.get("version", 1)),
        source_file=source_file,
        issues_dir=base / str(directory),
        storage_format=storage_format,
        id_pattern=str(storage.get("id_pattern", DEFAULT_ID_PATTERN)),
        logging_json_enabled=bool(logging_config.get("json_enabled", False)),
        logging_level=str(logging_config.get("level", "WARNING")),
        export_json=str(out.get("export_json", "issues_export.json")),
        schema_file=str(out.get("schema_file", "issues_export.schema.json")),
    )


def default_config(base: str | Path = ".") -> VikaConfig:
    return _build_config({}, Path(base), None)


def load_config(path: str | Path) -> VikaConfig:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Configuration file not found: {p}")
    try:
        loaded = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {p}: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ConfigError(f"Configuration file {p} must contain a mapping")
    return _build_config(cast(dict[str, Any], loaded), p.parent, p)


__all__ = ["CONFIG_DEFAULT", "ConfigError", "VikaConfig", "default_config", "load_config"]
