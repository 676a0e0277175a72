"""Run and record identifier helpers."""

from __future__ import annotations

from datetime import datetime, timezone

from personals_sync.common.constants import ID_PREFIX


def generate_run_id() -> str:
    now = datetime.now(tz=timezone.utc)
    return now.strftime("run-%Y%m%dT%H%M%S%fZ")


def synthesize_personal_id(epoch_ms: int, ordinal: int) -> str:
    return f"{ID_PREFIX}-{epoch_ms}-{ordinal}"


def find_duplicate_ids(ids: list[str]) -> list[str]:
    seen: set[str] = set()
    dupes: list[str] = []
    for value in ids:
        if value in seen and value not in dupes:
            dupes.append(value)
        seen.add(value)
    return dupes
