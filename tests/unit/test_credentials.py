from pathlib import Path

import pytest

from personals_sync.common.config_loader import SyncSettings
from personals_sync.common.errors import CredentialsError
from personals_sync.sheets import credentials as credentials_module
from personals_sync.sheets.credentials import credentials_from_info, load_credentials, read_credentials_info


def _settings(tmp_path: Path, inline=None, filename="google_credentials.json"):
    return SyncSettings(spreadsheet_id="sheet", credentials_json=inline, credentials_file=tmp_path / filename)


def test_inline_json_wins_over_file(tmp_path: Path):
    (tmp_path / "google_credentials.json").write_text('{"type": "file"}', encoding="utf-8")
    info = read_credentials_info(_settings(tmp_path, inline='{"type": "inline"}'))
    assert info == {"type": "inline"}


def test_credentials_file_is_read(tmp_path: Path):
    (tmp_path / "google_credentials.json").write_text('{"type": "file"}', encoding="utf-8")
    assert read_credentials_info(_settings(tmp_path)) == {"type": "file"}


@pytest.mark.parametrize("inline", ["{broken", "[1, 2]"])
def test_malformed_inline_json_is_credentials_error(tmp_path: Path, inline):
    with pytest.raises(CredentialsError) as excinfo:
        read_credentials_info(_settings(tmp_path, inline=inline))
    assert excinfo.value.error_code == "CREDENTIALS_ERROR"


def test_missing_credentials_file_is_credentials_error(tmp_path: Path):
    with pytest.raises(CredentialsError):
        load_credentials(_settings(tmp_path, filename="absent.json"))


def test_unknown_credentials_type_is_rejected():
    with pytest.raises(CredentialsError):
        credentials_from_info({"type": "api_key"})


def test_service_account_credentials_use_readonly_scope(monkeypatch):
    captured = {}

    def fake_from_info(info, scopes):
        captured["info"] = info
        captured["scopes"] = scopes
        return "sa-creds"

    monkeypatch.setattr(credentials_module.service_account.Credentials, "from_service_account_info", fake_from_info)

    assert credentials_from_info({"type": "service_account", "client_email": "x"}) == "sa-creds"
    assert captured["scopes"] == ["https://www.googleapis.com/auth/spreadsheets.readonly"]


def test_malformed_service_account_is_credentials_error():
    with pytest.raises(CredentialsError):
        credentials_from_info({"type": "service_account"})


def test_oauth_client_file_uses_application_default(monkeypatch):
    monkeypatch.setattr(credentials_module.google.auth, "default", lambda scopes: ("adc-creds", "project"))
    assert credentials_from_info({"installed": {"client_id": "abc"}}) == "adc-creds"
