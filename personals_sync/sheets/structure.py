"""Spreadsheet structure validation against the configured semantic fields."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from personals_sync.common.config_loader import field_specs
from personals_sync.common.constants import TABLES
from personals_sync.common.logging import log_event, log_warning
from personals_sync.common.models import FieldSpec
from personals_sync.pipeline.columns import find_column
from personals_sync.sheets.client import SheetsClient, fetch_headers

LOGGER = logging.getLogger("personals_sync")


@dataclass(frozen=True)
class TableReport:
    table: str
    headers: list[str]
    found_required: list[str] = field(default_factory=list)
    missing_required: list[str] = field(default_factory=list)
    found_optional: list[str] = field(default_factory=list)
    missing_optional: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing_required


@dataclass(frozen=True)
class StructureReport:
    title: str
    tables: dict[str, TableReport]

    @property
    def ok(self) -> bool:
        return all(report.ok for report in self.tables.values())

    @property
    def missing_required(self) -> dict[str, list[str]]:
        return {name: report.missing_required for name, report in self.tables.items() if report.missing_required}


def check_headers(table: str, headers: list[str], specs: list[FieldSpec]) -> TableReport:
    found_required: list[str] = []
    missing_required: list[str] = []
    found_optional: list[str] = []
    missing_optional: list[str] = []
    for spec in specs:
        found = find_column(headers, spec, bidirectional=True) is not None
        if spec.required:
            (found_required if found else missing_required).append(spec.name)
        else:
            (found_optional if found else missing_optional).append(spec.name)
    return TableReport(
        table=table,
        headers=list(headers),
        found_required=found_required,
        missing_required=missing_required,
        found_optional=found_optional,
        missing_optional=missing_optional,
    )


def validate_structure(
    client: SheetsClient,
    cfg: dict,
    strategy: str,
    *,
    run_id: str | None = None,
    logger: logging.Logger | None = None,
) -> StructureReport:
    logger = logger or LOGGER
    title = client.get_title()
    log_event(logger, f'Connected to spreadsheet: "{title}"', run_id=run_id, stage="structure", status="ok")

    reports: dict[str, TableReport] = {}
    for table in TABLES:
        headers = fetch_headers(client, cfg["tables"][table])
        report = check_headers(table, headers, field_specs(cfg, table, strategy))
        reports[table] = report
        if report.missing_optional:
            log_event(
                logger,
                f"optional columns not found: {', '.join(report.missing_optional)}",
                run_id=run_id,
                stage="structure",
                table=table,
                status="ok",
            )
        if report.missing_required:
            log_warning(
                logger,
                f"missing required columns: {', '.join(report.missing_required)}",
                run_id=run_id,
                stage="structure",
                table=table,
                status="error",
                error_code="MISSING_COLUMN",
            )

    return StructureReport(title=title, tables=reports)
