"""Build persisted PersonalRecords from validated drafts."""

from __future__ import annotations

import logging
from datetime import datetime

from personals_sync.common.ids import synthesize_personal_id
from personals_sync.common.logging import log_event, log_warning
from personals_sync.common.models import PersonalDraft, PersonalRecord
from personals_sync.common.time_utils import epoch_millis, timestamp_to_date_iso, utc_now

LOGGER = logging.getLogger("personals_sync")


def _ids_by_title(existing: list[PersonalRecord]) -> dict[str, str]:
    out: dict[str, str] = {}
    for record in existing:
        if record.title and record.id:
            out.setdefault(record.title, record.id)
    return out


def resolve_date_posted(
    draft: PersonalDraft,
    today: str,
    *,
    run_id: str | None = None,
    logger: logging.Logger | None = None,
) -> str:
    logger = logger or LOGGER
    date_posted = timestamp_to_date_iso(draft.timestamp)
    if date_posted is not None:
        return date_posted
    log_warning(
        logger,
        f"Invalid or missing timestamp in form row {draft.submission_row}: {draft.timestamp!r}; using {today}",
        run_id=run_id,
        stage="build",
        status="partial",
    )
    return today


def build_records(
    drafts: list[PersonalDraft],
    *,
    policy: str = "synthesized",
    carry_over_by_title: bool = True,
    existing: list[PersonalRecord] | None = None,
    now: datetime | None = None,
    run_id: str | None = None,
    logger: logging.Logger | None = None,
) -> list[PersonalRecord]:
    logger = logger or LOGGER
    now = now or utc_now()
    batch_millis = epoch_millis(now)
    today = now.date().isoformat()
    previous_ids = _ids_by_title(existing or []) if carry_over_by_title else {}

    used: set[str] = set()
    records: list[PersonalRecord] = []
    for ordinal, draft in enumerate(drafts):
        candidate = ""
        if policy == "explicit_column" and draft.explicit_id:
            candidate = draft.explicit_id
        elif draft.title in previous_ids:
            candidate = previous_ids[draft.title]

        if not candidate or candidate in used:
            candidate = synthesize_personal_id(batch_millis, ordinal)
        used.add(candidate)

        records.append(
            PersonalRecord(
                id=candidate,
                title=draft.title,
                personal=draft.body,
                contact=draft.contact,
                date_posted=resolve_date_posted(draft, today, run_id=run_id, logger=logger),
                categories=list(draft.categories),
                locations=list(draft.locations),
            )
        )

    log_event(
        logger,
        f"built {len(records)} records",
        run_id=run_id,
        stage="build",
        status="ok",
        rows_in=len(drafts),
        rows_out=len(records),
    )
    return records
