"""Join approved Mirror rows to their form submissions."""

from __future__ import annotations

import logging
from typing import Callable

from personals_sync.common.logging import log_event, log_warning
from personals_sync.common.models import MatchedEntry, MatchResult, MirrorRow, SubmissionRow, UnmatchedRow
from personals_sync.pipeline.normalize import is_truthy

LOGGER = logging.getLogger("personals_sync")

REASON_NO_CORRELATION = "no correlation value"
REASON_NO_SUBMISSION = "no matching submission"


def _url_key_of_mirror(row: MirrorRow) -> str:
    return row.form_response_url.strip()


def _url_key_of_submission(row: SubmissionRow) -> str:
    return row.form_response_url.strip()


def _title_key_of_mirror(row: MirrorRow) -> str:
    return row.title.strip().lower()


def _title_key_of_submission(row: SubmissionRow) -> str:
    return row.title.strip().lower()


KEY_FUNCTIONS: dict[str, tuple[Callable[[MirrorRow], str], Callable[[SubmissionRow], str]]] = {
    "url": (_url_key_of_mirror, _url_key_of_submission),
    "title": (_title_key_of_mirror, _title_key_of_submission),
}


def build_submission_lookup(
    submissions: list[SubmissionRow],
    key_of: Callable[[SubmissionRow], str],
) -> dict[str, SubmissionRow]:
    lookup: dict[str, SubmissionRow] = {}
    for row in submissions:
        key = key_of(row)
        if key:
            # Later rows overwrite earlier ones sharing a key.
            lookup[key] = row
    return lookup


def match_entries(
    mirror_rows: list[MirrorRow],
    submission_rows: list[SubmissionRow],
    *,
    strategy: str = "url",
    run_id: str | None = None,
    logger: logging.Logger | None = None,
) -> MatchResult:
    logger = logger or LOGGER
    mirror_key_of, submission_key_of = KEY_FUNCTIONS[strategy]
    lookup = build_submission_lookup(submission_rows, submission_key_of)

    matched: list[MatchedEntry] = []
    unmatched: list[UnmatchedRow] = []

    for mirror in mirror_rows:
        key = mirror_key_of(mirror)
        if not key:
            unmatched.append(UnmatchedRow(row_number=mirror.row_number, reason=REASON_NO_CORRELATION))
            continue

        submission = lookup.get(key)
        if submission is None:
            unmatched.append(UnmatchedRow(row_number=mirror.row_number, reason=REASON_NO_SUBMISSION))
            continue

        if not is_truthy(mirror.approved):
            continue

        matched.append(MatchedEntry(mirror=mirror, submission=submission))

    log_event(
        logger,
        f"matched {len(matched)} approved entries using {strategy} correlation",
        run_id=run_id,
        stage="match",
        status="ok",
        rows_in=len(mirror_rows),
        rows_out=len(matched),
    )
    if unmatched:
        details = "; ".join(f"row {item.row_number}: {item.reason}" for item in unmatched)
        log_warning(
            logger,
            f"{len(unmatched)} mirror entries could not be matched: {details}",
            run_id=run_id,
            stage="match",
            status="partial",
        )
    return MatchResult(matched=matched, unmatched=unmatched)
