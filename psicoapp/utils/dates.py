"""Calendar date helpers for the storage and display formats.

Stored appointment dates use ``DD-MM-YYYY``. That format does not sort
lexically, so every comparison goes through :func:`parse_storage_date`.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time

from psicoapp.domain.models import Appointment, Period

STORAGE_DATE_RE = re.compile(r"^(\d{2})-(\d{2})-(\d{4})$")
CLOCK_RE = re.compile(r"^(\d{2}):(\d{2})$")


def parse_storage_date(value: str | None) -> date | None:
    """Return the calendar date for a ``DD-MM-YYYY`` string, else None."""
    if not value:
        return None

    match = STORAGE_DATE_RE.fullmatch(value.strip())
    if not match:
        return None

    day, month, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def format_storage_date(value: date) -> str:
    return value.strftime("%d-%m-%Y")


def format_display_date(value: date) -> str:
    return value.strftime("%d/%m/%Y")


def parse_clock(value: str | None) -> time | None:
    """Return the time of day for a zero-padded ``HH:MM`` string, else None."""
    if not value:
        return None

    match = CLOCK_RE.fullmatch(value.strip())
    if not match:
        return None

    hour, minute = (int(part) for part in match.groups())
    try:
        return time(hour, minute)
    except ValueError:
        return None


def appointment_datetime(appointment: Appointment) -> datetime:
    """Combine the appointment day with its start time (midnight if unset)."""
    start = parse_clock(appointment.start) or time.min
    return datetime.combine(appointment.date, start)


def normalize_period(start: date | datetime, end: date | datetime) -> Period:
    """Floor ``start`` to its day start and ceil ``end`` to its day end."""
    start_day = start.date() if isinstance(start, datetime) else start
    end_day = end.date() if isinstance(end, datetime) else end
    return Period(
        start=datetime.combine(start_day, time.min),
        end=datetime.combine(end_day, time.max),
    )
