"""Per-patient session totals."""

from __future__ import annotations

import unicodedata
from typing import Iterable

from psicoapp.domain.models import Appointment, Patient, PatientAggregate
from psicoapp.reporting.kpis import coerce_price

UNKNOWN_PATIENT_NAME = "(Sem nome)"


def collation_key(name: str) -> tuple[str, str]:
    """Sort key ignoring case and accents, with the raw text as tie-breaker."""
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(char for char in decomposed if not unicodedata.combining(char))
    return base.casefold(), name


def compute_by_patient(
    appointments: Iterable[Appointment],
    patients: Iterable[Patient],
) -> list[PatientAggregate]:
    """Group appointments per patient, priced at each patient's current rate.

    Every appointment counts regardless of status; callers filter beforehand
    when canceled or no-show sessions should be left out. Snapshot prices on
    the appointment are ignored here.
    """
    directory = {patient.patient_id: patient for patient in patients}
    by_patient: dict[str, PatientAggregate] = {}

    for appointment in appointments:
        patient_id = appointment.patient_id
        if not patient_id:
            continue

        patient = directory.get(patient_id)
        aggregate = by_patient.get(patient_id)
        if aggregate is None:
            aggregate = PatientAggregate(
                patient_id=patient_id,
                name=patient.display_name if patient else UNKNOWN_PATIENT_NAME,
                is_social=bool(patient.is_social) if patient else False,
            )
            by_patient[patient_id] = aggregate

        aggregate.total_sessions += 1
        if patient is not None:
            aggregate.total_amount += coerce_price(patient.session_value) or 0.0

    return sorted(by_patient.values(), key=lambda aggregate: collation_key(aggregate.name))
