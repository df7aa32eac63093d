"""Report assembly: period filter, patient joins and the three aggregates."""

from __future__ import annotations

from typing import Any, Iterable

from psicoapp.domain.models import Appointment, AppointmentStatus, Patient, Period, ReportResult
from psicoapp.reporting.by_patient import compute_by_patient
from psicoapp.reporting.kpis import (
    KpiOptions,
    RevenueOptions,
    compute_basic_kpis,
    compute_revenue_by_price_type,
)
from psicoapp.reporting.period import filter_by_period
from psicoapp.utils.dates import appointment_datetime

TOTALS_COUNT_STATUSES = AppointmentStatus.ALL
TOTALS_REVENUE_STATUSES = (AppointmentStatus.CONFIRMED,)
TOTALS_CANCELED_STATUSES = (AppointmentStatus.CANCELED, AppointmentStatus.NO_SHOW)
PRICE_TYPE_STATUSES = (AppointmentStatus.CONFIRMED,)


class PatientJoin:
    """Resolve patient-dependent appointment fields against a directory."""

    def __init__(self, patients: Iterable[Patient]) -> None:
        self._by_id = {patient.patient_id: patient for patient in patients}

    def patient_for(self, appointment: Appointment) -> Patient | None:
        return self._by_id.get(appointment.patient_id)

    def price(self, appointment: Appointment) -> Any:
        if appointment.price is not None:
            return appointment.price
        if appointment.session_value is not None:
            return appointment.session_value
        patient = self.patient_for(appointment)
        return patient.session_value if patient else 0

    def is_social(self, appointment: Appointment) -> bool:
        if appointment.is_social is not None:
            return appointment.is_social
        patient = self.patient_for(appointment)
        return bool(patient.is_social) if patient else False


def _status(appointment: Appointment) -> str:
    return appointment.status


def build_report(
    appointments: Iterable[Appointment],
    patients: Iterable[Patient],
    period: Period,
    *,
    include_totals: bool = True,
    include_price_types: bool = True,
) -> ReportResult:
    """Compute every report section for appointments inside ``period``."""
    patients = list(patients)
    join = PatientJoin(patients)
    filtered = filter_by_period(appointments, appointment_datetime, period)

    result = ReportResult(
        period=period,
        appointments=filtered,
        patients=compute_by_patient(filtered, patients),
    )

    if include_totals:
        result.basic_kpis = compute_basic_kpis(
            filtered,
            KpiOptions(
                get_price=join.price,
                get_status=_status,
                count_statuses=TOTALS_COUNT_STATUSES,
                revenue_statuses=TOTALS_REVENUE_STATUSES,
                canceled_statuses=TOTALS_CANCELED_STATUSES,
            ),
        )

    if include_price_types:
        result.revenue_by_price_type = compute_revenue_by_price_type(
            filtered,
            RevenueOptions(
                get_price=join.price,
                get_status=_status,
                is_social=join.is_social,
                count_statuses=PRICE_TYPE_STATUSES,
                revenue_statuses=PRICE_TYPE_STATUSES,
            ),
        )

    return result
