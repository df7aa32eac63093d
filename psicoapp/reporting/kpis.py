"""Session and revenue KPIs over an already filtered set of items."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, TypeVar

from psicoapp.domain.models import AppointmentStatus, BasicKpis, RevenueByPriceType
from psicoapp.reporting.status import StatusClassifier

T = TypeVar("T")

DEFAULT_STATUSES: tuple[str, ...] = (AppointmentStatus.CONFIRMED,)


@dataclass(slots=True)
class KpiOptions(Generic[T]):
    get_price: Callable[[T], Any]
    get_status: Callable[[T], Any]
    count_statuses: Iterable[str] = DEFAULT_STATUSES
    revenue_statuses: Iterable[str] = DEFAULT_STATUSES
    canceled_statuses: Iterable[str] = field(default_factory=tuple)


@dataclass(slots=True)
class RevenueOptions(Generic[T]):
    get_price: Callable[[T], Any]
    get_status: Callable[[T], Any]
    is_social: Callable[[T], Any]
    count_statuses: Iterable[str] = DEFAULT_STATUSES
    revenue_statuses: Iterable[str] = DEFAULT_STATUSES


def coerce_price(value: Any) -> float | None:
    """Read a price as a float; missing prices count as zero.

    Returns None for values that are not finite numbers (NaN, infinities,
    integers too large for a float), which the aggregators skip for the
    money totals only.
    """
    if value is None or value is False:
        return 0.0
    if isinstance(value, str):
        value = value.strip() or "0"
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _average(total: float, samples: int) -> float:
    return total / samples if samples > 0 else 0.0


def compute_basic_kpis(items: Iterable[T], options: KpiOptions[T]) -> BasicKpis:
    """Count sessions and cancellations and total the revenue in one pass."""
    classifier = StatusClassifier(
        options.count_statuses,
        options.revenue_statuses,
        options.canceled_statuses,
    )

    session_count = 0
    canceled_count = 0
    total_revenue = 0.0
    revenue_samples = 0

    for item in items:
        match = classifier.classify(options.get_status(item))

        if match.canceled:
            canceled_count += 1
        if match.counted:
            session_count += 1
        if match.revenue:
            price = coerce_price(options.get_price(item))
            if price is not None:
                total_revenue += price
                revenue_samples += 1

    return BasicKpis(
        session_count=session_count,
        total_revenue=total_revenue,
        avg_ticket=_average(total_revenue, revenue_samples),
        canceled_count=canceled_count,
    )


def compute_revenue_by_price_type(
    items: Iterable[T], options: RevenueOptions[T]
) -> RevenueByPriceType:
    """Split revenue between the social and the full price tiers."""
    classifier = StatusClassifier(options.count_statuses, options.revenue_statuses)
    result = RevenueByPriceType()

    for item in items:
        match = classifier.classify(options.get_status(item))

        if match.counted:
            result.total_patients += 1
        if not match.revenue:
            continue

        price = coerce_price(options.get_price(item))
        if price is None:
            continue

        result.total_revenue += price
        if options.is_social(item):
            result.social_count += 1
            result.social_revenue += price
        else:
            result.full_count += 1
            result.full_revenue += price

    result.social_avg_ticket = _average(result.social_revenue, result.social_count)
    result.full_avg_ticket = _average(result.full_revenue, result.full_count)
    return result
