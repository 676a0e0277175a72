from pathlib import Path

from personals_sync.common.config_loader import field_specs, load_sync_config
from personals_sync.sheets.structure import check_headers, validate_structure
from tests.fakes import MIRROR_ROWS, default_client

CFG = load_sync_config(Path("config/sync.yml"))


def test_check_headers_reports_found_and_missing():
    report = check_headers("mirror", ["Approved?", "Notes"], field_specs(CFG, "mirror", "url"))

    assert report.found_required == ["approved"]
    assert report.missing_required == ["formResponseUrl"]
    assert report.found_optional == []
    assert report.missing_optional == ["title", "location", "id"]
    assert not report.ok


def test_check_headers_accepts_reverse_containment():
    report = check_headers("mirror", ["Approve", "Response URL"], field_specs(CFG, "mirror", "url"))
    assert report.ok


def test_validate_structure_passes_for_expected_tabs():
    client = default_client()

    report = validate_structure(client, CFG, "url")

    assert report.ok
    assert report.title == "Personals"
    assert report.tables["submissions"].missing_optional == []
    assert report.tables["mirror"].missing_optional == ["id"]
    assert client.requested == ["'Mirror'!A1:O1", "'Form Responses 1'!A1:Z1"]


def test_validate_structure_flags_missing_required_without_raising():
    client = default_client(**{"Form Responses 1": [["Timestamp", "Email Address"], ["x", "y"]]})

    report = validate_structure(client, CFG, "url")

    assert not report.ok
    assert report.missing_required == {"submissions": ["title", "body", "formResponseUrl"]}
    assert report.tables["mirror"].headers == MIRROR_ROWS[0]
