"""Free-text normalisation for approval flags, categories and locations."""

from __future__ import annotations

import re
from typing import Mapping

from personals_sync.common.constants import CATEGORY_SEPARATORS, TRUTHY_TOKENS

_CATEGORY_SPLIT_RE = re.compile(f"[{re.escape(CATEGORY_SEPARATORS)}]")

DEFAULT_LOCATION_ALIASES: dict[str, str] = {
    "nyc": "New York City",
    "new york city": "New York City",
    "new york": "New York City",
    "la": "Los Angeles",
    "los angeles": "Los Angeles",
    "sf": "San Francisco",
    "san francisco": "San Francisco",
    "dc": "Washington DC",
    "washington dc": "Washington DC",
    "washington d.c.": "Washington DC",
    "chicago": "Chicago",
    "atlanta": "Atlanta",
    "boston": "Boston",
    "seattle": "Seattle",
    "portland": "Portland",
    "denver": "Denver",
    "austin": "Austin",
    "miami": "Miami",
    "philadelphia": "Philadelphia",
    "philly": "Philadelphia",
}


def is_truthy(value: str | None) -> bool:
    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY_TOKENS


def parse_categories(raw: str | None) -> list[str]:
    if not raw:
        return []
    pieces = (piece.strip() for piece in _CATEGORY_SPLIT_RE.split(raw))
    return [piece for piece in pieces if piece]


def _title_case_words(value: str) -> str:
    return " ".join(word[:1].upper() + word[1:].lower() for word in value.split(" "))


def normalize_location(raw: str | None, aliases: Mapping[str, str] | None = None) -> str:
    if not raw:
        return ""
    table = DEFAULT_LOCATION_ALIASES if aliases is None else aliases
    key = raw.strip().lower()
    if not key:
        return ""

    if key in table:
        return table[key]
    # Partial match takes the first alias key found inside the input, in table order.
    for alias, canonical in table.items():
        if alias in key:
            return canonical

    return _title_case_words(raw.strip())


def parse_locations(raw: str | None, aliases: Mapping[str, str] | None = None) -> list[str]:
    if not raw:
        return []
    normalised = (normalize_location(part.strip(), aliases) for part in raw.split(","))
    return [location for location in normalised if location]
