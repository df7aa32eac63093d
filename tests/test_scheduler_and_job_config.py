from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from types import SimpleNamespace
from zoneinfo import ZoneInfo

import pytest

from psicoapp.domain.models import ReportResult
from psicoapp.jobs import scheduler, tasks
from psicoapp.utils.dates import normalize_period
from psicoapp.utils.logging import JsonFormatter, get_structured_logger


def test_previous_month_handles_year_boundary() -> None:
    assert tasks.previous_month(date(2024, 1, 1)) == (date(2023, 12, 1), date(2023, 12, 31))
    assert tasks.previous_month(date(2024, 3, 15)) == (date(2024, 2, 1), date(2024, 2, 29))


def test_resolve_config_reads_environment(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PSICOAPP_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("PSICOAPP_ARTIFACT_ROOT", str(tmp_path / "artifacts"))
    monkeypatch.setenv("PSICOAPP_TIMEZONE", "UTC")

    config = tasks._resolve_config(run_date=date(2024, 2, 1))

    assert config.run_date == date(2024, 2, 1)
    assert config.data_dir == tmp_path / "data"
    assert config.artifacts_dir == tmp_path / "artifacts"
    assert config.timezone == "UTC"


def test_resolve_config_defaults(monkeypatch) -> None:
    for name in ("PSICOAPP_DATA_DIR", "PSICOAPP_ARTIFACT_ROOT", "PSICOAPP_TIMEZONE"):
        monkeypatch.delenv(name, raising=False)

    config = tasks._resolve_config(run_date=date(2024, 2, 1))

    assert config.data_dir == Path("data")
    assert config.artifacts_dir == Path("artifacts/reports")
    assert config.timezone == "America/Sao_Paulo"


def test_build_scheduler_registers_monthly_job() -> None:
    tz = ZoneInfo("America/Sao_Paulo")

    built = scheduler.build_scheduler(tz)

    job = built.get_job(scheduler.JOB_ID)
    assert job is not None
    assert job.func is tasks.monthly_report
    fields = {field.name: str(field) for field in job.trigger.fields}
    assert fields["day"] == "1"
    assert fields["hour"] == "8"
    assert fields["minute"] == "0"


class _RecordingHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def report_events():
    structured = get_structured_logger()
    handler = _RecordingHandler()
    structured.addHandler(handler)
    try:
        yield handler.records
    finally:
        structured.removeHandler(handler)


def _fake_scheduler(next_run: datetime | None) -> SimpleNamespace:
    return SimpleNamespace(get_job=lambda job_id: SimpleNamespace(next_run_time=next_run))


def test_job_state_reports_period_and_artifact_of_completed_run(report_events) -> None:
    tz = ZoneInfo("America/Sao_Paulo")
    report = ReportResult(
        period=normalize_period(date(2024, 5, 1), date(2024, 5, 31)),
        appointments=[],
        patients=[],
    )
    event = SimpleNamespace(
        job_id=scheduler.JOB_ID,
        scheduled_run_time=datetime(2024, 6, 1, 8, 0, tzinfo=tz),
        exception=None,
        retval={"report": report, "report_txt": "artifacts/relatorio_2024-05-01_2024-05-31.txt"},
    )

    scheduler._log_job_state(_fake_scheduler(datetime(2024, 7, 1, 8, 0, tzinfo=tz)), event, tz)

    [record] = report_events
    assert record.report_step == "monthly_report"
    assert record.status == "scheduled_run_completed"
    assert record.period == "2024-05-01..2024-05-31"
    assert "next run at 2024-07-01T08:00:00-03:00" in record.getMessage()
    payload = json.loads(JsonFormatter().format(record))
    assert payload["artifact"] == "artifacts/relatorio_2024-05-01_2024-05-31.txt"


def test_job_state_reports_target_month_of_failed_run(report_events) -> None:
    tz = ZoneInfo("America/Sao_Paulo")
    event = SimpleNamespace(
        job_id=scheduler.JOB_ID,
        scheduled_run_time=datetime(2024, 3, 1, 8, 0, tzinfo=tz),
        exception=RuntimeError("disk full"),
        retval=None,
    )

    scheduler._log_job_state(_fake_scheduler(None), event, tz)

    [record] = report_events
    assert record.status == "failed"
    assert record.error_code == "JOB_FAILED"
    assert record.period == "2024-02-01..2024-02-29"
    assert "artifact" not in json.loads(JsonFormatter().format(record))
    assert record.error_message == "disk full"
    assert "Run scheduled for 2024-03-01T08:00:00-03:00 failed" in record.getMessage()
