from personals_sync.cli import format_record, parse_args
from personals_sync.common.models import PersonalRecord


def test_parse_args_defaults():
    args = parse_args([])
    assert args.command == "sync"
    assert args.dry_run is False
    assert args.config == "./config/sync.yml"
    assert args.output is None


def test_parse_args_test_mode_and_row():
    args = parse_args(["inspect-row", "--row", "6", "--test"])
    assert args.command == "inspect-row"
    assert args.row == 6
    assert args.dry_run is True


def test_format_record_lists_values():
    record = PersonalRecord(
        id="personal-1-0",
        title="Hello",
        personal="World",
        contact="https://forms.gle/x",
        date_posted="2024-01-15",
        categories=["Dating", "Friendship"],
        locations=["New York City"],
    )
    text = format_record(record)
    assert "ID: personal-1-0" in text
    assert "Categories: Dating, Friendship" in text
    assert "Locations: New York City" in text
