"""Scheduler process for the recurring monthly report.

Run separately from CLI/manual flows using:
    python -m psicoapp.jobs.scheduler
"""

from __future__ import annotations

import argparse
import logging
import os
from datetime import date, datetime
from zoneinfo import ZoneInfo

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from psicoapp.jobs.tasks import DEFAULT_TIMEZONE, monthly_report, previous_month
from psicoapp.utils.logging import format_period_label, get_structured_logger, log_report_event

JOB_ID = "monthly_report"

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Configure process-wide logging for scheduler mode."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def resolve_timezone() -> ZoneInfo:
    return ZoneInfo(os.getenv("PSICOAPP_TIMEZONE", DEFAULT_TIMEZONE))


def _covered_period(event: JobExecutionEvent, ran_on: date) -> str:
    """Period label of the report a run produced, or the month it was meant to cover."""
    report = event.retval.get("report") if isinstance(event.retval, dict) else None
    if report is not None:
        return format_period_label(report.period.start.date(), report.period.end.date())
    return format_period_label(*previous_month(ran_on))


def _log_job_state(scheduler: BlockingScheduler, event: JobExecutionEvent, tz: ZoneInfo) -> None:
    """Log the month a run covered, the artifact it wrote and the next run."""
    job = scheduler.get_job(event.job_id)
    job_next_run = getattr(job, "next_run_time", None) if job else None
    next_run = job_next_run.isoformat() if job_next_run else "none"
    ran_at = (event.scheduled_run_time or datetime.now(tz=tz)).astimezone(tz)
    period = _covered_period(event, ran_at.date())

    if event.exception:
        log_report_event(
            get_structured_logger(),
            report_step=event.job_id,
            period=period,
            status="failed",
            error_code="JOB_FAILED",
            error_message=str(event.exception),
            message=f"Run scheduled for {ran_at.isoformat()} failed; next run at {next_run}",
        )
        return

    artifact = event.retval.get("report_txt") if isinstance(event.retval, dict) else None
    log_report_event(
        get_structured_logger(),
        report_step=event.job_id,
        period=period,
        status="scheduled_run_completed",
        message=f"Ran at {ran_at.isoformat()}; next run at {next_run}",
        artifact=artifact,
    )


def build_scheduler(tz: ZoneInfo | None = None) -> BlockingScheduler:
    """Build the scheduler with the monthly report on day 1 at 08:00."""
    tz = tz or resolve_timezone()
    scheduler = BlockingScheduler(timezone=tz)

    trigger = CronTrigger(day=1, hour=8, minute=0, timezone=tz)
    scheduler.add_job(
        monthly_report,
        trigger=trigger,
        id=JOB_ID,
        replace_existing=True,
        coalesce=True,
        misfire_grace_time=3600,
    )

    scheduler.add_listener(
        lambda event: _log_job_state(scheduler, event, tz),
        EVENT_JOB_EXECUTED | EVENT_JOB_ERROR,
    )

    next_run = trigger.get_next_fire_time(None, datetime.now(tz=tz))
    logger.info(
        "Registered %s for day 1 08:00 %s (next run: %s)",
        JOB_ID,
        tz.key,
        next_run.isoformat() if next_run else "none",
    )

    return scheduler


def main() -> None:
    """Entrypoint for a dedicated scheduler process."""
    parser = argparse.ArgumentParser(description="Run the monthly report scheduler")
    parser.add_argument(
        "--once",
        action="store_true",
        help="Generate last month's report immediately and exit (manual mode)",
    )
    args = parser.parse_args()

    configure_logging()

    if args.once:
        logger.info("Running in manual mode: executing %s once", JOB_ID)
        result = monthly_report()
        logger.info("Manual execution of %s completed; report at %s", JOB_ID, result["report_txt"])
        return

    scheduler = build_scheduler()
    logger.info("Starting scheduler process")
    scheduler.start()


if __name__ == "__main__":
    main()
