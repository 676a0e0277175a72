import re
from datetime import datetime, timezone
from pathlib import Path

import pytest

from personals_sync.common.config_loader import load_sync_config
from personals_sync.pipeline.sync import RunContext, run_sync
from tests.fakes import default_client

_ID_TIMESTAMP_RE = re.compile(r'"personal-\d+-(\d+)"')


def _run_once(output_path: Path, now: datetime) -> bytes:
    ctx = RunContext(
        run_id="run-regression",
        cfg=load_sync_config(Path("config/sync.yml")),
        output_path=output_path,
        now=now,
    )
    run_sync(default_client(), ctx)
    return output_path.read_bytes()


@pytest.mark.regression
def test_output_is_byte_stable_for_same_inputs(tmp_path: Path):
    now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

    first = _run_once(tmp_path / "first.json", now)
    second = _run_once(tmp_path / "second.json", now)

    assert first == second


@pytest.mark.regression
def test_output_differs_only_in_synthesized_id_timestamps(tmp_path: Path):
    first = _run_once(tmp_path / "first.json", datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc))
    second = _run_once(tmp_path / "second.json", datetime(2026, 10, 20, 8, 30, tzinfo=timezone.utc))

    assert first != second
    normalise = lambda raw: _ID_TIMESTAMP_RE.sub(r'"personal-N-\1"', raw.decode("utf-8"))
    assert normalise(first) == normalise(second)


@pytest.mark.regression
def test_rerun_against_own_output_keeps_ids(tmp_path: Path):
    output = tmp_path / "personals.json"
    first = _run_once(output, datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc))
    second = _run_once(output, datetime(2026, 10, 20, 8, 30, tzinfo=timezone.utc))

    assert first == second
