"""Status normalization and status-set membership."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable


def normalize_status(value: Any) -> str:
    return str(value or "").strip().lower()


def normalize_statuses(values: Iterable[str] | None) -> frozenset[str]:
    return frozenset(normalize_status(value) for value in values or ())


@dataclass(frozen=True, slots=True)
class StatusMatch:
    counted: bool
    revenue: bool
    canceled: bool


class StatusClassifier:
    """Classify a raw status against the counted/revenue/canceled sets.

    The sets are independent: one status may belong to several of them, and a
    status in none of them is simply not tallied.
    """

    def __init__(
        self,
        count_statuses: Iterable[str] | None = None,
        revenue_statuses: Iterable[str] | None = None,
        canceled_statuses: Iterable[str] | None = None,
    ) -> None:
        self.count_statuses = normalize_statuses(count_statuses)
        self.revenue_statuses = normalize_statuses(revenue_statuses)
        self.canceled_statuses = normalize_statuses(canceled_statuses)

    def classify(self, raw_status: Any) -> StatusMatch:
        status = normalize_status(raw_status)
        return StatusMatch(
            counted=status in self.count_statuses,
            revenue=status in self.revenue_statuses,
            canceled=status in self.canceled_statuses,
        )
