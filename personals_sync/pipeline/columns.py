"""Fuzzy header matching, column maps and typed row parsing."""

from __future__ import annotations

from personals_sync.common.constants import MIRROR_TABLE, SUBMISSIONS_TABLE
from personals_sync.common.errors import InsufficientDataError, MissingColumnError
from personals_sync.common.models import ColumnMap, FieldSpec, MirrorRow, ParsedTable, SubmissionRow

# Header row is sheet row 1, so the first data row is sheet row 2.
FIRST_DATA_ROW = 2


def header_matches(header: str, spec: FieldSpec, *, bidirectional: bool = False) -> bool:
    text = (header or "").strip().lower()
    if not text:
        return False
    if any(pattern in text for pattern in spec.patterns):
        return True
    if bidirectional or spec.reverse:
        return any(text in pattern for pattern in spec.patterns)
    return False


def find_column(headers: list[str], spec: FieldSpec, *, bidirectional: bool = False) -> int | None:
    for index, header in enumerate(headers):
        if header_matches(header, spec, bidirectional=bidirectional):
            return index
    return None


def build_column_map(table: str, headers: list[str], specs: list[FieldSpec]) -> ColumnMap:
    indices: dict[str, int] = {}
    missing: list[str] = []
    for spec in specs:
        index = find_column(headers, spec)
        if index is not None:
            indices[spec.name] = index
        elif spec.required:
            missing.append(spec.name)
    if missing:
        raise MissingColumnError(table, missing)
    return ColumnMap(table=table, indices=indices)


def _split_table(table: str, rows: list[list[str]]) -> tuple[list[str], list[list[str]]]:
    if len(rows) < 2:
        raise InsufficientDataError(f"Insufficient data in {table} table")
    return [str(h) for h in rows[0]], rows[1:]


def parse_mirror_table(rows: list[list[str]], specs: list[FieldSpec]) -> ParsedTable:
    headers, data_rows = _split_table(MIRROR_TABLE, rows)
    column_map = build_column_map(MIRROR_TABLE, headers, specs)
    parsed = [
        MirrorRow(
            row_number=offset + FIRST_DATA_ROW,
            approved=column_map.cell(row, "approved"),
            form_response_url=column_map.cell(row, "formResponseUrl"),
            title=column_map.cell(row, "title"),
            location=column_map.cell(row, "location"),
            personal_id=column_map.cell(row, "id"),
        )
        for offset, row in enumerate(data_rows)
    ]
    return ParsedTable(table=MIRROR_TABLE, headers=headers, column_map=column_map, rows=parsed)


def parse_submission_table(rows: list[list[str]], specs: list[FieldSpec]) -> ParsedTable:
    headers, data_rows = _split_table(SUBMISSIONS_TABLE, rows)
    column_map = build_column_map(SUBMISSIONS_TABLE, headers, specs)
    parsed = [
        SubmissionRow(
            row_number=offset + FIRST_DATA_ROW,
            timestamp=column_map.cell(row, "timestamp"),
            title=column_map.cell(row, "title"),
            body=column_map.cell(row, "body"),
            location=column_map.cell(row, "location"),
            category=column_map.cell(row, "category"),
            form_response_url=column_map.cell(row, "formResponseUrl"),
        )
        for offset, row in enumerate(data_rows)
    ]
    return ParsedTable(table=SUBMISSIONS_TABLE, headers=headers, column_map=column_map, rows=parsed)
