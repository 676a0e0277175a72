"""In-memory stand-ins for the Sheets data source used across test suites."""

from __future__ import annotations

import re

_HEADER_RANGE_RE = re.compile(r"^[A-Z]+1:[A-Z]+1$")

MIRROR_ROWS = [
    ["Title", "Body", "Approved?", "Form Response URL", "Location"],
    ["Looking for community in NYC", "Hi!", "Yes", "https://forms.gle/example1", "New York City"],
    ["Seeking romance in LA", "Hello", " YES ", "https://forms.gle/example2", "Los Angeles"],
    ["Not approved personal", "Nope", "No", "https://forms.gle/example3", "Chicago"],
    ["Missing url", "", "Yes", "", ""],
    ["Orphan", "", "Yes", "https://forms.gle/missing", ""],
]

SUBMISSION_ROWS = [
    [
        "Timestamp",
        "Email Address",
        "What's your full name?",
        "How old are you?",
        "Where are you seeking connections?",
        "What's your email?",
        "What kind of connections are you seeking?",
        "What's the title of your personal?",
        "What's the body of your personal?",
        "Form Response URL",
    ],
    [
        "2024-01-15 10:30:00",
        "user1@example.com",
        "Alex Cohen",
        "28",
        "nyc, brooklyn",
        "alex@example.com",
        "Community; Book Club|Friendship",
        "Looking for community in NYC",
        "I love reading, hiking and cooking.",
        "https://forms.gle/example1",
    ],
    [
        "1/16/2024 14:00:00",
        "user2@example.com",
        "Jordan Levy",
        "32",
        "la",
        "jordan@example.com",
        "Dating, Friendship",
        "Seeking romance in LA",
        "Looking for a meaningful connection.",
        "https://forms.gle/example2",
    ],
    [
        "2024-01-17 09:00:00",
        "user3@example.com",
        "Sam",
        "40",
        "chicago",
        "sam@example.com",
        "Friendship",
        "Not approved personal",
        "This should not appear.",
        "https://forms.gle/example3",
    ],
]


class FakeSheetsClient:
    def __init__(self, tables: dict[str, list[list[str]]], title: str = "Personals") -> None:
        self.tables = tables
        self.title = title
        self.requested: list[str] = []
        self.closed = False

    def get_title(self) -> str:
        return self.title

    def get_values(self, range_a1: str) -> list[list[str]]:
        self.requested.append(range_a1)
        sheet, _, cells = range_a1.rpartition("!")
        name = sheet[1:-1].replace("''", "'") if sheet.startswith("'") else sheet
        rows = self.tables.get(name, [])
        if _HEADER_RANGE_RE.match(cells):
            return [list(rows[0])] if rows else []
        return [list(row) for row in rows]

    def close(self) -> None:
        self.closed = True


def default_client(**overrides) -> FakeSheetsClient:
    tables = {"Mirror": MIRROR_ROWS, "Form Responses 1": SUBMISSION_ROWS}
    tables.update(overrides)
    return FakeSheetsClient(tables)
