import json
from pathlib import Path

import pytest

from personals_sync import cli
from tests.fakes import default_client


@pytest.fixture
def fake_client(monkeypatch):
    client = default_client()
    monkeypatch.setattr(cli, "connect", lambda _settings, _cfg: client)
    monkeypatch.setenv("GOOGLE_SPREADSHEET_ID", "sheet-123")
    return client


def _argv(tmp_path: Path, *extra: str) -> list[str]:
    return [
        *extra,
        "--config",
        "config/sync.yml",
        "--env-file",
        str(tmp_path / "missing.env"),
        "--output",
        str(tmp_path / "personals.json"),
    ]


@pytest.mark.integration
def test_cli_sync_writes_output(tmp_path: Path, fake_client):
    exit_code = cli.main(_argv(tmp_path, "sync"))

    assert exit_code == 0
    written = json.loads((tmp_path / "personals.json").read_text(encoding="utf-8"))
    assert len(written) == 2
    assert fake_client.closed


@pytest.mark.integration
def test_cli_test_mode_prints_sample_without_writing(tmp_path: Path, fake_client, capsys):
    exit_code = cli.main(_argv(tmp_path, "sync", "--test", "--sample-size", "1"))

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "--- Personal 1 ---" in out
    assert "--- Personal 2 ---" not in out
    assert "Locations: New York City, Brooklyn" in out
    assert not (tmp_path / "personals.json").exists()


@pytest.mark.integration
def test_cli_validate_command(tmp_path: Path, fake_client, capsys):
    assert cli.main(_argv(tmp_path, "validate")) == 0
    assert "Structure is valid." in capsys.readouterr().out


@pytest.mark.integration
def test_cli_inspect_row_requires_data_row(tmp_path: Path, fake_client, capsys):
    assert cli.main(_argv(tmp_path, "inspect-row", "--row", "1")) == 1
    assert cli.main(_argv(tmp_path, "inspect-row", "--row", "2")) == 0
    assert "Title: Looking for community in NYC" in capsys.readouterr().out


@pytest.mark.integration
def test_cli_missing_spreadsheet_id_exits_with_code(tmp_path: Path, monkeypatch, capsys):
    monkeypatch.delenv("GOOGLE_SPREADSHEET_ID", raising=False)

    exit_code = cli.main(_argv(tmp_path, "sync"))

    err = capsys.readouterr().err
    assert exit_code == 1
    assert "GOOGLE_SPREADSHEET_ID environment variable is required" in err
    assert "Error code: MISSING_CONFIG" in err


@pytest.mark.integration
def test_cli_fatal_pipeline_error_exits_with_code(tmp_path: Path, monkeypatch, capsys):
    client = default_client(Mirror=[])
    monkeypatch.setattr(cli, "connect", lambda _settings, _cfg: client)
    monkeypatch.setenv("GOOGLE_SPREADSHEET_ID", "sheet-123")

    assert cli.main(_argv(tmp_path, "sync")) == 1
    assert "Error code: NO_DATA" in capsys.readouterr().err
    assert client.closed
