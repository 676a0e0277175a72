"""Per-entry validation and normalisation of matched rows."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

from personals_sync.common.logging import log_event, log_warning
from personals_sync.common.models import Approved, EntryOutcome, Invalid, MatchedEntry, PersonalDraft, Skipped
from personals_sync.pipeline.normalize import is_truthy, parse_categories, parse_locations

LOGGER = logging.getLogger("personals_sync")


@dataclass(frozen=True)
class ValidationBatch:
    drafts: list[PersonalDraft]
    invalid: list[Invalid]
    skipped: int


def validate_entry(entry: MatchedEntry, aliases: Mapping[str, str] | None = None) -> EntryOutcome:
    mirror, submission = entry.mirror, entry.submission
    if not is_truthy(mirror.approved):
        return Skipped(reason="not approved")

    errors: list[str] = []
    if not submission.title:
        errors.append("Title missing from form data")
    if not submission.body:
        errors.append("Body missing from form data")
    if not mirror.form_response_url:
        errors.append("Form Response URL is required")
    if errors:
        return Invalid(mirror_row=mirror.row_number, submission_row=submission.row_number, errors=errors)

    return Approved(
        draft=PersonalDraft(
            mirror_row=mirror.row_number,
            submission_row=submission.row_number,
            title=submission.title,
            body=submission.body,
            contact=mirror.form_response_url,
            timestamp=submission.timestamp,
            categories=parse_categories(submission.category),
            locations=parse_locations(submission.location or mirror.location, aliases),
            explicit_id=mirror.personal_id,
        )
    )


def validate_entries(
    entries: list[MatchedEntry],
    aliases: Mapping[str, str] | None = None,
    *,
    run_id: str | None = None,
    logger: logging.Logger | None = None,
) -> ValidationBatch:
    logger = logger or LOGGER
    drafts: list[PersonalDraft] = []
    invalid: list[Invalid] = []
    skipped = 0

    for entry in entries:
        outcome = validate_entry(entry, aliases)
        if isinstance(outcome, Approved):
            drafts.append(outcome.draft)
        elif isinstance(outcome, Invalid):
            invalid.append(outcome)
        else:
            skipped += 1

    if invalid:
        log_warning(
            logger,
            f"Validation errors found: {' | '.join(item.describe() for item in invalid)}",
            run_id=run_id,
            stage="validate",
            status="partial",
        )
    log_event(
        logger,
        f"validated {len(drafts)} entries",
        run_id=run_id,
        stage="validate",
        status="ok",
        rows_in=len(entries),
        rows_out=len(drafts),
    )
    return ValidationBatch(drafts=drafts, invalid=invalid, skipped=skipped)
