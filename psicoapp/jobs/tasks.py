"""Task functions executed by the scheduler."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

from psicoapp.storage.appointments import AppointmentRepository
from psicoapp.storage.patients import PatientRepository
from psicoapp.storage.store import JsonCollectionStore
from psicoapp.workflows.report import run_report_workflow

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/Sao_Paulo"


@dataclass(slots=True)
class ReportJobConfig:
    run_date: date
    data_dir: Path
    artifacts_dir: Path
    timezone: str


def previous_month(run_date: date) -> tuple[date, date]:
    """First and last day of the calendar month before ``run_date``."""
    last_day = run_date.replace(day=1) - timedelta(days=1)
    return last_day.replace(day=1), last_day


def build_repositories(data_dir: Path) -> tuple[AppointmentRepository, PatientRepository]:
    return (
        AppointmentRepository(JsonCollectionStore(data_dir / "appointments.json")),
        PatientRepository(JsonCollectionStore(data_dir / "patients.json")),
    )


def _resolve_config(*, run_date: date | None = None) -> ReportJobConfig:
    tz = os.getenv("PSICOAPP_TIMEZONE", DEFAULT_TIMEZONE)
    data_dir = Path(os.getenv("PSICOAPP_DATA_DIR", "data"))
    artifacts_dir = Path(os.getenv("PSICOAPP_ARTIFACT_ROOT", "artifacts/reports"))

    resolved_date = run_date or datetime.now(tz=ZoneInfo(tz)).date()
    logger.info(
        "Resolved job config (timezone=%s, run_date=%s, data_dir=%s)",
        tz,
        resolved_date.isoformat(),
        data_dir,
    )
    return ReportJobConfig(
        run_date=resolved_date,
        data_dir=data_dir,
        artifacts_dir=artifacts_dir,
        timezone=tz,
    )


def monthly_report(*, run_date: date | None = None) -> dict[str, Any]:
    """Generate and export the report for the month before ``run_date``."""
    config = _resolve_config(run_date=run_date)
    start, end = previous_month(config.run_date)
    appointments, patients = build_repositories(config.data_dir)

    result = run_report_workflow(
        start=start,
        end=end,
        appointments=appointments,
        patients=patients,
        artifacts_dir=config.artifacts_dir,
        report_step="monthly_report",
    )

    report = result["report"]
    logger.info(
        "Monthly report completed: period=%s..%s appointments=%s patients=%s report_txt=%s",
        start.isoformat(),
        end.isoformat(),
        len(report.appointments),
        len(report.patients),
        result["report_txt"],
    )
    return result
