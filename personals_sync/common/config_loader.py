"""Configuration loading: YAML run config plus environment settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from personals_sync.common.constants import (
    DEFAULT_CREDENTIALS_FILE,
    MIRROR_TABLE,
    SUBMISSIONS_TABLE,
)
from personals_sync.common.errors import ConfigError, MissingConfigError
from personals_sync.common.fs import read_yaml
from personals_sync.common.models import FieldSpec
from personals_sync.common.schema import validate_sync_config

SPREADSHEET_ID_ENV = "GOOGLE_SPREADSHEET_ID"
CREDENTIALS_JSON_ENV = "GOOGLE_SHEETS_CREDENTIALS"
CREDENTIALS_FILE_ENV = "GOOGLE_CREDENTIALS_FILE"

# Correlation fields that the chosen matching strategy cannot do without.
STRATEGY_REQUIRED_FIELDS = {
    "url": {SUBMISSIONS_TABLE: ("formResponseUrl",)},
    "title": {MIRROR_TABLE: ("title",)},
}


@dataclass(frozen=True)
class SyncSettings:
    spreadsheet_id: str
    credentials_json: str | None
    credentials_file: Path


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _read_config_yaml(path: Path):
    try:
        return read_yaml(path)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    base = _read_config_yaml(path)
    if not isinstance(base, dict):
        raise ConfigError(f"Config file must contain a mapping: {path}")
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = _read_config_yaml(overlay_path)
    if overlay is None:
        return base
    if not isinstance(overlay, dict):
        raise ConfigError(f"Overlay config must contain a mapping: {overlay_path}")
    return _deep_merge(base, overlay)


def load_sync_config(path: Path, *, overlay_path: Path | None = None, allow_unknown: bool = False) -> dict:
    cfg = _load_yaml_with_overlay(path, overlay_path)
    return validate_sync_config(cfg, allow_unknown=allow_unknown)


def load_settings(environ: Mapping[str, str] | None = None) -> SyncSettings:
    env = os.environ if environ is None else environ
    spreadsheet_id = (env.get(SPREADSHEET_ID_ENV) or "").strip()
    if not spreadsheet_id:
        raise MissingConfigError(f"{SPREADSHEET_ID_ENV} environment variable is required")

    credentials_json = env.get(CREDENTIALS_JSON_ENV) or None
    credentials_file = Path(env.get(CREDENTIALS_FILE_ENV) or DEFAULT_CREDENTIALS_FILE)
    return SyncSettings(
        spreadsheet_id=spreadsheet_id,
        credentials_json=credentials_json,
        credentials_file=credentials_file,
    )


def field_specs(cfg: dict, table: str, strategy: str) -> list[FieldSpec]:
    forced = STRATEGY_REQUIRED_FIELDS.get(strategy, {}).get(table, ())
    specs = []
    for name, spec in cfg["columns"][table].items():
        specs.append(
            FieldSpec(
                name=name,
                patterns=tuple(str(p).strip().lower() for p in spec["patterns"]),
                required=bool(spec.get("required", False)) or name in forced,
                reverse=bool(spec.get("reverse", False)),
            )
        )
    return specs
