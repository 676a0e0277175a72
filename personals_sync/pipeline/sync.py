"""End-to-end sync run: structure check, fetch, match, validate, build, persist."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from personals_sync.common.config_loader import SyncSettings, field_specs
from personals_sync.common.constants import MIRROR_TABLE, SUBMISSIONS_TABLE
from personals_sync.common.errors import NoDataError, ValidationError
from personals_sync.common.http import RetryConfig, TimeoutConfig
from personals_sync.common.logging import log_event
from personals_sync.common.models import EntryOutcome, Invalid, MirrorRow, PersonalRecord, Skipped, UnmatchedRow
from personals_sync.pipeline.columns import parse_mirror_table, parse_submission_table
from personals_sync.pipeline.matcher import match_entries
from personals_sync.pipeline.merge import MergeResult, load_existing, merge_records, save_records
from personals_sync.pipeline.records import build_records
from personals_sync.pipeline.validate import validate_entries, validate_entry
from personals_sync.sheets.client import SheetsClient, fetch_table
from personals_sync.sheets.credentials import load_credentials
from personals_sync.sheets.structure import StructureReport, validate_structure

LOGGER = logging.getLogger("personals_sync")


@dataclass(frozen=True)
class RunContext:
    """Everything one pipeline execution needs; nothing outlives the run."""

    run_id: str
    cfg: dict
    output_path: Path
    logger: logging.Logger = LOGGER
    now: datetime | None = None

    @property
    def strategy(self) -> str:
        return self.cfg["matching"]["strategy"]

    @property
    def aliases(self) -> dict[str, str]:
        return {str(k).strip().lower(): str(v) for k, v in self.cfg["locations"]["aliases"].items()}

    def stage(self, stage: str, event: str, message: str, **fields) -> None:
        log_event(self.logger, message, run_id=self.run_id, stage=stage, event=event, status="ok", **fields)


@dataclass(frozen=True)
class ProcessedBatch:
    records: list[PersonalRecord]
    unmatched: list[UnmatchedRow]
    invalid: list[Invalid]


@dataclass(frozen=True)
class SyncResult:
    structure: StructureReport
    records: list[PersonalRecord]
    unmatched: list[UnmatchedRow] = field(default_factory=list)
    invalid: list[Invalid] = field(default_factory=list)
    merge: MergeResult | None = None
    dry_run: bool = False


@dataclass(frozen=True)
class RowInspection:
    mirror: MirrorRow
    outcome: EntryOutcome
    record: PersonalRecord | None = None


def connect(settings: SyncSettings, cfg: dict) -> SheetsClient:
    http_cfg = cfg.get("http") or {}
    return SheetsClient.from_credentials(
        settings.spreadsheet_id,
        load_credentials(settings),
        timeout=TimeoutConfig(
            connect=float(http_cfg.get("connect_timeout", 20)),
            read=float(http_cfg.get("read_timeout", 60)),
        ),
        retry=RetryConfig(max_attempts=int(http_cfg.get("max_attempts", 1))),
    )


def process_tables(
    ctx: RunContext,
    mirror_rows: list[list[str]],
    submission_rows: list[list[str]],
    existing: list[PersonalRecord],
) -> ProcessedBatch:
    mirror = parse_mirror_table(mirror_rows, field_specs(ctx.cfg, MIRROR_TABLE, ctx.strategy))
    submissions = parse_submission_table(submission_rows, field_specs(ctx.cfg, SUBMISSIONS_TABLE, ctx.strategy))
    ctx.stage(
        "parse",
        "STAGE_END",
        f"parsed {len(mirror.rows)} mirror rows and {len(submissions.rows)} submission rows",
        rows_in=len(mirror_rows) + len(submission_rows) - 2,
        rows_out=len(mirror.rows) + len(submissions.rows),
    )

    matched = match_entries(
        mirror.rows, submissions.rows, strategy=ctx.strategy, run_id=ctx.run_id, logger=ctx.logger
    )
    validated = validate_entries(matched.matched, ctx.aliases, run_id=ctx.run_id, logger=ctx.logger)
    records = build_records(
        validated.drafts,
        policy=ctx.cfg["ids"]["policy"],
        carry_over_by_title=bool(ctx.cfg["ids"].get("carry_over_by_title", True)),
        existing=existing,
        now=ctx.now,
        run_id=ctx.run_id,
        logger=ctx.logger,
    )
    return ProcessedBatch(records=records, unmatched=matched.unmatched, invalid=validated.invalid)


def _check_structure(client: SheetsClient, ctx: RunContext) -> StructureReport:
    ctx.stage("structure", "STAGE_START", "validating spreadsheet structure")
    report = validate_structure(client, ctx.cfg, ctx.strategy, run_id=ctx.run_id, logger=ctx.logger)
    if not report.ok:
        missing = "; ".join(f"{table}: {', '.join(fields)}" for table, fields in report.missing_required.items())
        raise ValidationError(f"Spreadsheet structure validation failed, missing {missing}", report=report)
    ctx.stage("structure", "STAGE_END", "spreadsheet structure is valid")
    return report


def _fetch_tables(client: SheetsClient, ctx: RunContext) -> tuple[list[list[str]], list[list[str]]]:
    fetched = []
    for table in (MIRROR_TABLE, SUBMISSIONS_TABLE):
        table_cfg = ctx.cfg["tables"][table]
        rows = fetch_table(client, table_cfg)
        ctx.stage(
            "fetch",
            "STAGE_END",
            f"fetched {len(rows)} rows from {table_cfg['name']} tab",
            table=table,
            rows_out=len(rows),
        )
        fetched.append(rows)
    return fetched[0], fetched[1]


def run_sync(client: SheetsClient, ctx: RunContext, *, dry_run: bool = False) -> SyncResult:
    structure = _check_structure(client, ctx)
    mirror_rows, submission_rows = _fetch_tables(client, ctx)

    existing = load_existing(ctx.output_path)
    ctx.stage("load", "STAGE_END", f"found {len(existing)} existing personals", rows_out=len(existing))

    batch = process_tables(ctx, mirror_rows, submission_rows, existing)
    if dry_run:
        ctx.stage("persist", "STAGE_SKIP", "test mode: results not written")
        return SyncResult(
            structure=structure,
            records=batch.records,
            unmatched=batch.unmatched,
            invalid=batch.invalid,
            dry_run=True,
        )

    merged = merge_records(batch.records, existing, run_id=ctx.run_id, logger=ctx.logger)
    save_records(ctx.output_path, merged.records)
    ctx.stage("persist", "STAGE_END", f"saved {len(merged.records)} personals to {ctx.output_path}", rows_out=len(merged.records))
    return SyncResult(
        structure=structure,
        records=merged.records,
        unmatched=batch.unmatched,
        invalid=batch.invalid,
        merge=merged,
    )


def inspect_row(client: SheetsClient, ctx: RunContext, row_number: int) -> RowInspection:
    """Run one Mirror row (1-based sheet row number) through the pipeline without saving."""
    mirror_rows, submission_rows = _fetch_tables(client, ctx)
    mirror = parse_mirror_table(mirror_rows, field_specs(ctx.cfg, MIRROR_TABLE, ctx.strategy))
    submissions = parse_submission_table(submission_rows, field_specs(ctx.cfg, SUBMISSIONS_TABLE, ctx.strategy))

    target = next((row for row in mirror.rows if row.row_number == row_number), None)
    if target is None:
        raise NoDataError(f"Row {row_number} does not exist in {ctx.cfg['tables'][MIRROR_TABLE]['name']} tab")

    matched = match_entries([target], submissions.rows, strategy=ctx.strategy, run_id=ctx.run_id, logger=ctx.logger)
    if matched.unmatched:
        return RowInspection(mirror=target, outcome=Skipped(reason=matched.unmatched[0].reason))
    if not matched.matched:
        return RowInspection(mirror=target, outcome=Skipped(reason="not approved"))

    outcome = validate_entry(matched.matched[0], ctx.aliases)
    if isinstance(outcome, (Skipped, Invalid)):
        return RowInspection(mirror=target, outcome=outcome)

    records = build_records(
        [outcome.draft],
        policy=ctx.cfg["ids"]["policy"],
        carry_over_by_title=bool(ctx.cfg["ids"].get("carry_over_by_title", True)),
        existing=load_existing(ctx.output_path),
        now=ctx.now,
        run_id=ctx.run_id,
        logger=ctx.logger,
    )
    return RowInspection(mirror=target, outcome=outcome, record=records[0])
