"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class FieldSpec:
    name: str
    patterns: tuple[str, ...]
    required: bool = False
    # Also accept headers contained in a pattern (short headers like "Approved?").
    reverse: bool = False


@dataclass(frozen=True)
class ColumnMap:
    """Semantic field name -> zero-based column index for one table."""

    table: str
    indices: dict[str, int]

    def index_of(self, field_name: str) -> int | None:
        return self.indices.get(field_name)

    def cell(self, row: list[str], field_name: str) -> str:
        index = self.indices.get(field_name)
        if index is None or index >= len(row):
            return ""
        value = row[index]
        return "" if value is None else str(value).strip()


@dataclass(frozen=True)
class MirrorRow:
    row_number: int
    approved: str
    form_response_url: str
    title: str = ""
    location: str = ""
    personal_id: str = ""


@dataclass(frozen=True)
class SubmissionRow:
    row_number: int
    timestamp: str
    title: str
    body: str
    location: str = ""
    category: str = ""
    form_response_url: str = ""


@dataclass(frozen=True)
class ParsedTable:
    table: str
    headers: list[str]
    column_map: ColumnMap
    rows: list[Any]


@dataclass(frozen=True)
class MatchedEntry:
    mirror: MirrorRow
    submission: SubmissionRow


@dataclass(frozen=True)
class UnmatchedRow:
    row_number: int
    reason: str


@dataclass(frozen=True)
class MatchResult:
    matched: list[MatchedEntry]
    unmatched: list[UnmatchedRow]


@dataclass(frozen=True)
class PersonalDraft:
    """Validated, normalised content of one entry, before an id is assigned."""

    mirror_row: int
    submission_row: int
    title: str
    body: str
    contact: str
    timestamp: str
    categories: list[str]
    locations: list[str]
    explicit_id: str = ""


@dataclass(frozen=True)
class Approved:
    draft: PersonalDraft


@dataclass(frozen=True)
class Skipped:
    reason: str


@dataclass(frozen=True)
class Invalid:
    mirror_row: int
    submission_row: int
    errors: list[str]

    def describe(self) -> str:
        return f"Mirror row {self.mirror_row}/Form row {self.submission_row}: {', '.join(self.errors)}"


EntryOutcome = Union[Approved, Skipped, Invalid]


@dataclass(frozen=True)
class PersonalRecord:
    id: str
    title: str
    personal: str
    contact: str
    date_posted: str
    categories: list[str] = field(default_factory=list)
    locations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "PersonalRecord":
        return cls(
            id=str(payload.get("id", "")),
            title=str(payload.get("title", "")),
            personal=str(payload.get("personal", "")),
            contact=str(payload.get("contact", "")),
            date_posted=str(payload.get("date_posted", "")),
            categories=list(payload.get("categories") or []),
            locations=list(payload.get("locations") or []),
        )
