"""Inclusive period filtering for report inputs."""

from __future__ import annotations

import math
from datetime import date, datetime, time
from typing import Callable, Iterable, TypeVar

from psicoapp.domain.models import Period
from psicoapp.utils.dates import parse_storage_date

T = TypeVar("T")

DateLike = date | datetime | str | int | float | None
GetDate = Callable[[T], DateLike]


def to_timestamp(value: DateLike) -> float | None:
    """Convert a date-like value to POSIX seconds, or None when it cannot be read.

    Naive values are read in local time, the same way on both sides of a
    comparison. Strings may be in the ``DD-MM-YYYY`` storage format or ISO-8601.
    """
    if isinstance(value, bool) or value is None:
        return None
    # Dates near year 1 or 9999 overflow once shifted to local time.
    try:
        if isinstance(value, datetime):
            return value.timestamp()
        if isinstance(value, date):
            return datetime.combine(value, time.min).timestamp()
        if isinstance(value, (int, float)):
            number = float(value)
            return number if math.isfinite(number) else None
        if isinstance(value, str):
            stored = parse_storage_date(value)
            if stored is not None:
                return datetime.combine(stored, time.min).timestamp()
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).timestamp()
    except (OverflowError, ValueError, OSError):
        return None
    return None


def filter_by_period(items: Iterable[T], get_date: GetDate[T], period: Period) -> list[T]:
    """Keep items whose date falls within ``period``, both ends inclusive.

    Input order is preserved. Items whose date cannot be read are dropped.
    Callers wanting whole-day semantics pass a period built with
    ``normalize_period``.
    """
    start = period.start.timestamp()
    end = period.end.timestamp()

    kept: list[T] = []
    for item in items:
        timestamp = to_timestamp(get_date(item))
        if timestamp is not None and start <= timestamp <= end:
            kept.append(item)
    return kept
