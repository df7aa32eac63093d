"""Report generation workflow: load, validate period, aggregate, render, export."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Any

from psicoapp.reporting.export import write_report_outputs
from psicoapp.reporting.render import render_report_text
from psicoapp.reporting.summary import build_report
from psicoapp.storage.appointments import AppointmentRepository
from psicoapp.storage.patients import PatientRepository
from psicoapp.utils.dates import normalize_period
from psicoapp.utils.logging import format_period_label, get_structured_logger, log_report_event


class ReportError(RuntimeError):
    """Raised when a report cannot be generated."""


class InvalidPeriodError(ReportError, ValueError):
    """Raised when the period starts after it ends."""


def run_report_workflow(
    *,
    start: date | datetime,
    end: date | datetime,
    appointments: AppointmentRepository,
    patients: PatientRepository,
    include_totals: bool = True,
    include_price_types: bool = True,
    artifacts_dir: str | Path | None = None,
    report_step: str = "report_generation",
) -> dict[str, Any]:
    """Generate the report for ``[start, end]`` and optionally write artifacts."""
    logger = get_structured_logger()
    period = normalize_period(start, end)
    period_label = format_period_label(period.start.date(), period.end.date())

    if period.start > period.end:
        log_report_event(
            logger,
            report_step=report_step,
            period=period_label,
            status="failed",
            error_code="INVALID_PERIOD",
            error_message="Start date is after end date",
            message="Report rejected",
        )
        raise InvalidPeriodError(
            f"Start date {period.start.date().isoformat()} is after end date "
            f"{period.end.date().isoformat()}"
        )

    loaded = appointments.list_between(period.start.date(), period.end.date())
    directory = patients.list_all()
    log_report_event(
        logger,
        report_step=report_step,
        period=period_label,
        status="loaded",
        message=f"Loaded {len(loaded)} appointments and {len(directory)} patients",
    )

    report = build_report(
        loaded,
        directory,
        period,
        include_totals=include_totals,
        include_price_types=include_price_types,
    )
    for aggregate in report.patients:
        log_report_event(
            logger,
            report_step=report_step,
            period=period_label,
            patient_name=aggregate.name,
            status="aggregated",
            message=f"{aggregate.total_sessions} sessions",
        )

    text = render_report_text(
        report.basic_kpis,
        report.revenue_by_price_type,
        report.patients,
        period,
    )

    result: dict[str, Any] = {
        "report": report,
        "text": text,
        "report_json": None,
        "report_txt": None,
    }
    if artifacts_dir is not None:
        json_path, txt_path = write_report_outputs(
            artifacts_dir=artifacts_dir,
            report=report,
            text=text,
        )
        result["report_json"] = str(json_path)
        result["report_txt"] = str(txt_path)

    log_report_event(
        logger,
        report_step=report_step,
        period=period_label,
        status="completed",
        message="Report generated",
        artifact=result["report_txt"],
    )
    return result
