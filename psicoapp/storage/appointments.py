"""Appointment repository backed by a JSON collection."""

from __future__ import annotations

import logging
from dataclasses import asdict, fields, replace
from datetime import date
from pathlib import Path
from typing import Any

from psicoapp.domain.models import Appointment
from psicoapp.storage.store import JsonCollectionStore
from psicoapp.utils.dates import format_storage_date, parse_storage_date
from psicoapp.utils.identity import generate_id

logger = logging.getLogger(__name__)

DEFAULT_APPOINTMENTS_PATH = Path("data/appointments.json")
APPOINTMENT_FIELDS = {item.name for item in fields(Appointment)}


def appointment_to_record(appointment: Appointment) -> dict[str, Any]:
    record = asdict(appointment)
    record["date"] = format_storage_date(appointment.date)
    return record


def appointment_from_record(record: dict[str, Any]) -> Appointment | None:
    """Build an appointment from a stored record; None if its date is unreadable."""
    parsed_date = parse_storage_date(str(record.get("date") or ""))
    if parsed_date is None:
        return None

    values = {key: value for key, value in record.items() if key in APPOINTMENT_FIELDS}
    values["date"] = parsed_date
    values.setdefault("appointment_id", "")
    values.setdefault("patient_id", "")
    values.setdefault("patient_name", "")
    values.setdefault("start", "")
    values.setdefault("end", "")
    return Appointment(**values)


class AppointmentRepository:
    def __init__(self, store: JsonCollectionStore | None = None) -> None:
        self.store = store or JsonCollectionStore(DEFAULT_APPOINTMENTS_PATH)

    def list_all(self) -> list[Appointment]:
        appointments: list[Appointment] = []
        for record in self.store.load():
            appointment = appointment_from_record(record)
            if appointment is None:
                logger.warning(
                    "Skipping appointment %s with unreadable date %r",
                    record.get("appointment_id"),
                    record.get("date"),
                )
                continue
            appointments.append(appointment)
        return appointments

    def list_between(self, start: date, end: date) -> list[Appointment]:
        """Appointments whose day lies in ``[start, end]``, in calendar order."""
        selected = [item for item in self.list_all() if start <= item.date <= end]
        return sorted(selected, key=lambda item: (item.date, item.start))

    def get(self, appointment_id: str) -> Appointment | None:
        return next(
            (item for item in self.list_all() if item.appointment_id == appointment_id),
            None,
        )

    def create(self, appointment: Appointment) -> Appointment:
        if not appointment.appointment_id.strip():
            appointment = replace(appointment, appointment_id=generate_id("apt"))

        records = self.store.load()
        records.append(appointment_to_record(appointment))
        self.store.save(records)
        logger.info("Created appointment %s on %s", appointment.appointment_id, appointment.date)
        return appointment

    def update(self, appointment_id: str, /, **changes: Any) -> Appointment | None:
        """Apply ``changes`` to a stored appointment; the id never changes."""
        changes.pop("appointment_id", None)
        unknown = set(changes) - APPOINTMENT_FIELDS
        if unknown:
            raise TypeError(f"Unknown appointment fields: {', '.join(sorted(unknown))}")

        records = self.store.load()
        for index, record in enumerate(records):
            if record.get("appointment_id") != appointment_id:
                continue
            current = appointment_from_record(record)
            if current is None:
                return None
            updated = replace(current, **changes)
            records[index] = appointment_to_record(updated)
            self.store.save(records)
            return updated
        return None

    def delete(self, appointment_id: str) -> None:
        records = self.store.load()
        self.store.save(
            [record for record in records if record.get("appointment_id") != appointment_id]
        )
