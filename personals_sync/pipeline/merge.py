"""Load, merge and persist the personals JSON array."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from personals_sync.common.errors import LoadError, SaveError
from personals_sync.common.fs import read_json, write_json
from personals_sync.common.ids import find_duplicate_ids
from personals_sync.common.logging import log_event
from personals_sync.common.models import PersonalRecord

LOGGER = logging.getLogger("personals_sync")


@dataclass(frozen=True)
class MergeResult:
    records: list[PersonalRecord]
    added: list[str]
    updated: list[str]
    removed: list[str]


def load_existing(path: Path) -> list[PersonalRecord]:
    try:
        payload = read_json(path)
    except FileNotFoundError:
        return []
    except (OSError, ValueError) as exc:
        raise LoadError(f"Failed to load existing personals: {exc}") from exc

    if not isinstance(payload, list):
        raise LoadError(f"Failed to load existing personals: {path} does not contain a JSON array")
    if any(not isinstance(item, dict) for item in payload):
        raise LoadError(f"Failed to load existing personals: {path} contains non-object entries")
    return [PersonalRecord.from_dict(item) for item in payload]


def merge_records(
    new_records: list[PersonalRecord],
    existing: list[PersonalRecord],
    *,
    run_id: str | None = None,
    logger: logging.Logger | None = None,
) -> MergeResult:
    """Last run wins: the new set replaces the old one wholesale.

    Old records missing from the new set are dropped; records sharing an id are
    replaced by the new version. Nothing is merged field by field.
    """
    logger = logger or LOGGER
    existing_ids = {record.id for record in existing}
    new_ids = {record.id for record in new_records}

    removed = [record.id for record in existing if record.id not in new_ids]
    updated = [record.id for record in new_records if record.id in existing_ids]
    added = [record.id for record in new_records if record.id not in existing_ids]

    for record_id in removed:
        log_event(logger, f"removing un-approved personal {record_id}", run_id=run_id, stage="merge", status="ok")
    log_event(
        logger,
        f"merge: {len(added)} added, {len(updated)} updated, {len(removed)} removed",
        run_id=run_id,
        stage="merge",
        status="ok",
        rows_in=len(existing),
        rows_out=len(new_records),
    )
    return MergeResult(records=list(new_records), added=added, updated=updated, removed=removed)


def save_records(path: Path, records: list[PersonalRecord]) -> Path:
    dupes = find_duplicate_ids([record.id for record in records])
    if dupes:
        raise SaveError(f"Refusing to save personals with duplicate ids: {', '.join(dupes)}")
    try:
        write_json(path, [record.to_dict() for record in records], sort_keys=False)
    except (OSError, TypeError, ValueError) as exc:
        raise SaveError(f"Failed to save personals: {exc}") from exc
    return path
