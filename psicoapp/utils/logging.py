"""Structured JSON logging helpers for report events."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from typing import Any


class JsonFormatter(logging.Formatter):
    """Format log records as JSON with the report event fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "report_step": getattr(record, "report_step", "unknown"),
            "patient_name": mask_patient_name(getattr(record, "patient_name", "")),
            "period": getattr(record, "period", None),
            "status": getattr(record, "status", record.levelname.lower()),
        }

        error_code = getattr(record, "error_code", None)
        error_message = getattr(record, "error_message", None)
        if error_code is not None:
            payload["error_code"] = error_code
        if error_message is not None:
            payload["error_message"] = error_message

        artifact = getattr(record, "artifact", None)
        if artifact is not None:
            payload["artifact"] = artifact

        message = record.getMessage()
        if message:
            payload["message"] = message

        return json.dumps(payload, ensure_ascii=False)


def format_period_label(start: date, end: date) -> str:
    return f"{start.isoformat()}..{end.isoformat()}"


def mask_patient_name(name: str) -> str:
    """Mask a patient name, keeping only its first character."""
    if not name:
        return ""

    visible = 1
    if len(name) <= visible:
        return "*"
    return f"{name[:visible]}{'*' * (len(name) - visible)}"


def get_structured_logger(name: str = "psicoapp") -> logging.Logger:
    """Return a logger configured to emit JSON records."""
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def log_report_event(
    logger: logging.Logger,
    *,
    report_step: str,
    period: str,
    status: str,
    patient_name: str = "",
    message: str = "",
    error_code: str | None = None,
    error_message: str | None = None,
    artifact: str | None = None,
) -> None:
    """Emit a structured report event."""
    extra: dict[str, Any] = {
        "report_step": report_step,
        "patient_name": patient_name,
        "period": period,
        "status": status,
        "error_code": error_code,
        "error_message": error_message,
        "artifact": artifact,
    }
    level = logging.ERROR if error_code else logging.INFO
    logger.log(level, message, extra=extra)
