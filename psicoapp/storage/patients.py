"""Patient directory backed by a JSON collection."""

from __future__ import annotations

import logging
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Iterable

from psicoapp.domain.models import Patient
from psicoapp.storage.store import JsonCollectionStore

logger = logging.getLogger(__name__)

DEFAULT_PATIENTS_PATH = Path("data/patients.json")
PATIENT_FIELDS = {item.name for item in fields(Patient)}


def patient_from_record(record: dict[str, Any]) -> Patient:
    values = {key: value for key, value in record.items() if key in PATIENT_FIELDS}
    values.setdefault("patient_id", "")
    values.setdefault("name", "")
    values.setdefault("last_name", "")
    values.setdefault("phone", "")
    values.setdefault("session_value", 0)
    return Patient(**values)


class PatientRepository:
    def __init__(self, store: JsonCollectionStore | None = None) -> None:
        self.store = store or JsonCollectionStore(DEFAULT_PATIENTS_PATH)

    def list_all(self) -> list[Patient]:
        return [patient_from_record(record) for record in self.store.load()]

    def save_all(self, patients: Iterable[Patient]) -> None:
        self.store.save([asdict(patient) for patient in patients])

    def add(self, patient: Patient) -> None:
        patients = self.list_all()
        patients.append(patient)
        self.save_all(patients)
        logger.info("Added patient %s", patient.patient_id)

    def update(self, patient: Patient) -> bool:
        """Replace the stored patient with the same id; False when unknown."""
        patients = self.list_all()
        for index, current in enumerate(patients):
            if current.patient_id == patient.patient_id:
                patients[index] = patient
                self.save_all(patients)
                return True
        return False

    def remove(self, patient_id: str) -> None:
        self.save_all(patient for patient in self.list_all() if patient.patient_id != patient_id)

    def get(self, patient_id: str) -> Patient | None:
        return next(
            (patient for patient in self.list_all() if patient.patient_id == patient_id),
            None,
        )


def filter_social(patients: Iterable[Patient], is_social: bool) -> list[Patient]:
    return [patient for patient in patients if patient.is_social == is_social]


def sum_session_values(patients: Iterable[Patient]) -> float:
    total = 0.0
    for patient in patients:
        try:
            total += float(patient.session_value or 0)
        except (TypeError, ValueError):
            continue
    return total
