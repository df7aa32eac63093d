from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from psicoapp.domain.models import Appointment, Patient
from psicoapp.storage.appointments import AppointmentRepository
from psicoapp.storage.patients import PatientRepository
from psicoapp.storage.store import JsonCollectionStore


def make_appointment(
    appointment_id: str,
    *,
    patient_id: str = "p1",
    day: date = date(2024, 1, 15),
    start: str = "09:00",
    status: str = "confirmado",
    **extra,
) -> Appointment:
    return Appointment(
        appointment_id=appointment_id,
        patient_id=patient_id,
        patient_name=extra.pop("patient_name", ""),
        date=day,
        start=start,
        end=extra.pop("end", "09:50"),
        status=status,
        **extra,
    )


@pytest.fixture
def patients() -> list[Patient]:
    return [
        Patient(
            patient_id="p1",
            name="Ana",
            last_name="Souza",
            phone="11912345678",
            session_value=150.0,
        ),
        Patient(
            patient_id="p2",
            name="Bruno",
            last_name="Lima",
            phone="1134567890",
            session_value=80.0,
            is_social=True,
        ),
    ]


@pytest.fixture
def repositories(tmp_path: Path) -> tuple[AppointmentRepository, PatientRepository]:
    return (
        AppointmentRepository(JsonCollectionStore(tmp_path / "appointments.json")),
        PatientRepository(JsonCollectionStore(tmp_path / "patients.json")),
    )
