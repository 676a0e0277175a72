import re
from datetime import datetime, timezone

from personals_sync.common.models import PersonalDraft, PersonalRecord
from personals_sync.pipeline.records import build_records

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
NOW_MS = int(NOW.timestamp() * 1000)


def _draft(title="Hello", timestamp="2024-01-15 10:30:00", explicit_id=""):
    return PersonalDraft(
        mirror_row=2,
        submission_row=2,
        title=title,
        body="World",
        contact="https://forms.gle/x",
        timestamp=timestamp,
        categories=["Dating"],
        locations=["New York City"],
        explicit_id=explicit_id,
    )


def _existing(record_id, title):
    return PersonalRecord(id=record_id, title=title, personal="old", contact="c", date_posted="2024-01-01")


def test_synthesized_ids_use_batch_millis_and_ordinal():
    records = build_records([_draft("A"), _draft("B")], now=NOW)

    assert [r.id for r in records] == [f"personal-{NOW_MS}-0", f"personal-{NOW_MS}-1"]
    assert all(re.match(r"^personal-\d+-\d+$", r.id) for r in records)


def test_record_fields_are_copied_from_draft():
    record = build_records([_draft()], now=NOW)[0]

    assert record.to_dict() == {
        "id": f"personal-{NOW_MS}-0",
        "title": "Hello",
        "personal": "World",
        "contact": "https://forms.gle/x",
        "date_posted": "2024-01-15",
        "categories": ["Dating"],
        "locations": ["New York City"],
    }


def test_ids_carry_over_by_title():
    records = build_records([_draft("Hello"), _draft("New")], existing=[_existing("personal-1-0", "Hello")], now=NOW)

    assert records[0].id == "personal-1-0"
    assert records[1].id == f"personal-{NOW_MS}-1"


def test_carry_over_can_be_disabled():
    records = build_records(
        [_draft("Hello")],
        existing=[_existing("personal-1-0", "Hello")],
        carry_over_by_title=False,
        now=NOW,
    )
    assert records[0].id == f"personal-{NOW_MS}-0"


def test_explicit_column_policy_prefers_sheet_id():
    records = build_records(
        [_draft("Hello", explicit_id="abc-123"), _draft("Other")],
        policy="explicit_column",
        existing=[_existing("personal-1-0", "Hello")],
        now=NOW,
    )
    assert records[0].id == "abc-123"
    assert records[1].id == f"personal-{NOW_MS}-1"


def test_repeated_ids_fall_back_to_synthesized():
    records = build_records(
        [_draft("Twin"), _draft("Twin")],
        existing=[_existing("personal-1-0", "Twin")],
        now=NOW,
    )
    assert records[0].id == "personal-1-0"
    assert records[1].id == f"personal-{NOW_MS}-1"


def test_date_posted_parses_common_timestamp_formats():
    drafts = [
        _draft(timestamp="1/16/2024 14:00:00"),
        _draft(timestamp="2024-03-01T23:30:00-05:00"),
        _draft(timestamp="2024-02-02"),
    ]
    records = build_records(drafts, now=NOW)
    assert [r.date_posted for r in records] == ["2024-01-16", "2024-03-02", "2024-02-02"]


def test_missing_or_bad_timestamp_defaults_to_run_date(caplog):
    records = build_records([_draft(timestamp=""), _draft(timestamp="not a date")], now=NOW)

    assert [r.date_posted for r in records] == ["2026-10-19", "2026-10-19"]
    assert "Invalid or missing timestamp" in caplog.text
