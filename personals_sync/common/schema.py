"""Minimal strict schema for the sync YAML config."""

from __future__ import annotations

from personals_sync.common.constants import ID_POLICIES, MATCHING_STRATEGIES, TABLES
from personals_sync.common.errors import ConfigError


def _assert_mapping(obj, ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    _assert_mapping(obj, ctx)
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _validate_columns(columns: dict, table: str) -> None:
    ctx = f"columns.{table}"
    _assert_mapping(columns, ctx)
    if not columns:
        raise ConfigError(f"{ctx} must define at least one field")
    for name, spec in columns.items():
        _assert_required_keys(spec, {"patterns"}, f"{ctx}.{name}")
        _assert_no_unknown_keys(spec, {"patterns", "required", "reverse"}, f"{ctx}.{name}", False)
        patterns = spec["patterns"]
        if not isinstance(patterns, list) or not patterns:
            raise ConfigError(f"{ctx}.{name}.patterns must be a non-empty list")
        if any(not str(p).strip() for p in patterns):
            raise ConfigError(f"{ctx}.{name}.patterns must not contain blank entries")


def validate_sync_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"tables", "columns", "matching", "ids", "locations", "output"}
    top_known = top_required | {"http", "dry_run"}
    _assert_required_keys(cfg, top_required, "sync config")
    _assert_no_unknown_keys(cfg, top_known, "sync config", allow_unknown)

    _assert_required_keys(cfg["tables"], set(TABLES), "tables")
    _assert_required_keys(cfg["columns"], set(TABLES), "columns")
    for table in TABLES:
        _assert_required_keys(cfg["tables"][table], {"name", "range", "header_range"}, f"tables.{table}")
        _validate_columns(cfg["columns"][table], table)

    _assert_required_keys(cfg["matching"], {"strategy"}, "matching")
    if cfg["matching"]["strategy"] not in MATCHING_STRATEGIES:
        raise ConfigError(f"matching.strategy must be one of: {', '.join(MATCHING_STRATEGIES)}")

    _assert_required_keys(cfg["ids"], {"policy"}, "ids")
    if cfg["ids"]["policy"] not in ID_POLICIES:
        raise ConfigError(f"ids.policy must be one of: {', '.join(ID_POLICIES)}")

    _assert_required_keys(cfg["locations"], {"aliases"}, "locations")
    _assert_mapping(cfg["locations"]["aliases"], "locations.aliases")

    _assert_required_keys(cfg["output"], {"path"}, "output")
    return cfg
