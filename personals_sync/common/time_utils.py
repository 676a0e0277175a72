"""UTC-focused helpers for run metadata and submission timestamps."""

from __future__ import annotations

from datetime import datetime, timezone

# Formatted-value renderings seen in form response sheets.
TIMESTAMP_FORMATS = (
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%d/%m/%Y %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%B %d, %Y %H:%M:%S",
    "%B %d, %Y",
)


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def utc_today_iso() -> str:
    return utc_now().date().isoformat()


def utc_timestamp_iso() -> str:
    return utc_now().isoformat(timespec="milliseconds")


def epoch_millis(moment: datetime | None = None) -> int:
    moment = moment or utc_now()
    return int(moment.timestamp() * 1000)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a sheet timestamp cell into an aware UTC datetime.

    Naive values are taken as UTC. Returns None for blank or unparseable input.
    """
    if not value or not value.strip():
        return None
    text = value.strip()

    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        for fmt in TIMESTAMP_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def timestamp_to_date_iso(value: str | None) -> str | None:
    parsed = parse_timestamp(value)
    if parsed is None:
        return None
    return parsed.date().isoformat()
