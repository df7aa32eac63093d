from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any


class AppointmentStatus:
    CONFIRMED = "confirmado"
    PENDING = "pendente"
    CANCELED = "cancelado"
    NO_SHOW = "faltou"

    ALL = (CONFIRMED, PENDING, CANCELED, NO_SHOW)


@dataclass(slots=True)
class Appointment:
    appointment_id: str
    patient_id: str
    patient_name: str
    date: date
    start: str
    end: str
    status: str = AppointmentStatus.CONFIRMED
    price: float | None = None
    session_value: float | None = None
    is_social: bool | None = None
    notes: str | None = None


@dataclass(slots=True)
class Patient:
    patient_id: str
    name: str
    last_name: str
    phone: str
    session_value: float
    is_social: bool = False
    cpf: str | None = None
    email: str | None = None

    @property
    def display_name(self) -> str:
        return f"{self.name or ''} {self.last_name or ''}".strip()


@dataclass(slots=True)
class Period:
    """Inclusive reporting window."""

    start: datetime
    end: datetime


@dataclass(slots=True)
class BasicKpis:
    session_count: int = 0
    total_revenue: float = 0.0
    avg_ticket: float = 0.0
    canceled_count: int = 0


@dataclass(slots=True)
class RevenueByPriceType:
    # Counts matching appointments, not distinct patients.
    total_patients: int = 0
    total_revenue: float = 0.0
    social_count: int = 0
    social_revenue: float = 0.0
    social_avg_ticket: float = 0.0
    full_count: int = 0
    full_revenue: float = 0.0
    full_avg_ticket: float = 0.0


@dataclass(slots=True)
class PatientAggregate:
    patient_id: str
    name: str
    is_social: bool
    total_sessions: int = 0
    total_amount: float = 0.0


@dataclass(slots=True)
class ReportResult:
    period: Period
    appointments: list[Appointment]
    patients: list[PatientAggregate]
    basic_kpis: BasicKpis | None = None
    revenue_by_price_type: RevenueByPriceType | None = None


@dataclass(slots=True)
class UserSettings:
    name: str
    last_name: str
    email: str
    password: str
    full_price: float = 0.0
    theme: str = "light"
    fingerprint_enabled: bool = False


@dataclass(slots=True)
class ValidationIssue:
    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class RegistrationResult:
    saved: bool
    patient: Patient
    issues: list[ValidationIssue] = field(default_factory=list)
