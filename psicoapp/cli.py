"""Top-level psicoapp command line interface."""

from __future__ import annotations

import argparse
import os
from datetime import date as Date
from pathlib import Path
from typing import Sequence

from psicoapp.domain.models import Appointment, AppointmentStatus, Patient, UserSettings
from psicoapp.jobs.tasks import build_repositories
from psicoapp.orchestration.patients import register_patient
from psicoapp.storage.settings import SettingsStore
from psicoapp.storage.store import JsonDocumentStore
from psicoapp.utils.dates import format_storage_date, parse_clock
from psicoapp.utils.formatters import capitalize, format_phone
from psicoapp.workflows.report import InvalidPeriodError, run_report_workflow


def _default_data_dir() -> Path:
    return Path(os.getenv("PSICOAPP_DATA_DIR", "data"))


def _money(value: str) -> float:
    try:
        amount = float(value.replace(",", "."))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid amount: {value!r}") from exc
    if amount < 0:
        raise argparse.ArgumentTypeError("amount must not be negative")
    return amount


def _clock(value: str) -> str:
    parsed = parse_clock(value)
    if parsed is None:
        raise argparse.ArgumentTypeError(f"invalid time: {value!r}, expected HH:MM")
    return parsed.strftime("%H:%M")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="psicoapp", description="Practice management CLI")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory holding patients.json, appointments.json and settings.json",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    report_parser = subparsers.add_parser("report", help="Generate the appointments report")
    report_parser.add_argument("--start", type=Date.fromisoformat, required=True, help="YYYY-MM-DD")
    report_parser.add_argument("--end", type=Date.fromisoformat, required=True, help="YYYY-MM-DD")
    report_parser.add_argument("--no-totals", action="store_true", help="Omit the totals section")
    report_parser.add_argument(
        "--no-price-types",
        action="store_true",
        help="Omit the social vs full price section",
    )
    report_parser.add_argument("--out", type=Path, help="Optional directory for report artifacts")
    report_parser.set_defaults(handler=_handle_report)

    patients_parser = subparsers.add_parser("patients", help="Patient directory commands")
    patients_subparsers = patients_parser.add_subparsers(dest="patients_command", required=True)

    add_parser = patients_subparsers.add_parser("add", help="Register a patient")
    add_parser.add_argument("--name", required=True)
    add_parser.add_argument("--last-name", required=True)
    add_parser.add_argument("--phone", required=True)
    add_parser.add_argument("--session-value", type=_money, required=True)
    add_parser.add_argument("--social", action="store_true", help="Patient pays the social value")
    add_parser.add_argument("--cpf")
    add_parser.add_argument("--email")
    add_parser.set_defaults(handler=_handle_patients_add)

    list_parser = patients_subparsers.add_parser("list", help="List registered patients")
    list_parser.set_defaults(handler=_handle_patients_list)

    appointments_parser = subparsers.add_parser("appointments", help="Appointment agenda commands")
    appointments_subparsers = appointments_parser.add_subparsers(
        dest="appointments_command", required=True
    )

    apt_add_parser = appointments_subparsers.add_parser("add", help="Schedule an appointment")
    apt_add_parser.add_argument("--patient-id", required=True)
    apt_add_parser.add_argument("--date", type=Date.fromisoformat, required=True, help="YYYY-MM-DD")
    apt_add_parser.add_argument("--start", type=_clock, required=True, help="HH:MM")
    apt_add_parser.add_argument("--end", type=_clock, required=True, help="HH:MM")
    apt_add_parser.add_argument(
        "--status", choices=AppointmentStatus.ALL, default=AppointmentStatus.CONFIRMED
    )
    apt_add_parser.add_argument("--price", type=_money, help="Defaults to the patient's session value")
    apt_add_parser.add_argument("--notes")
    apt_add_parser.set_defaults(handler=_handle_appointments_add)

    apt_list_parser = appointments_subparsers.add_parser("list", help="List appointments")
    apt_list_parser.add_argument("--start", type=Date.fromisoformat, help="YYYY-MM-DD")
    apt_list_parser.add_argument("--end", type=Date.fromisoformat, help="YYYY-MM-DD")
    apt_list_parser.set_defaults(handler=_handle_appointments_list)

    apt_status_parser = appointments_subparsers.add_parser(
        "status", help="Change the status of an appointment"
    )
    apt_status_parser.add_argument("appointment_id")
    apt_status_parser.add_argument("status", choices=AppointmentStatus.ALL)
    apt_status_parser.set_defaults(handler=_handle_appointments_status)

    apt_delete_parser = appointments_subparsers.add_parser("delete", help="Delete an appointment")
    apt_delete_parser.add_argument("appointment_id")
    apt_delete_parser.set_defaults(handler=_handle_appointments_delete)

    auth_parser = subparsers.add_parser("auth", help="Local authentication commands")
    auth_subparsers = auth_parser.add_subparsers(dest="auth_command", required=True)
    login_parser = auth_subparsers.add_parser("login", help="Check the local credentials")
    login_parser.add_argument("--email", required=True)
    login_parser.add_argument("--password", required=True)
    login_parser.set_defaults(handler=_handle_auth_login)

    settings_parser = subparsers.add_parser("settings", help="Practitioner settings")
    settings_subparsers = settings_parser.add_subparsers(dest="settings_command", required=True)
    init_parser = settings_subparsers.add_parser("init", help="Store practitioner settings")
    init_parser.add_argument("--name", required=True)
    init_parser.add_argument("--last-name", required=True)
    init_parser.add_argument("--email", required=True)
    init_parser.add_argument("--password", required=True)
    init_parser.add_argument("--full-price", type=_money, default=0.0)
    init_parser.add_argument("--theme", choices=("light", "dark"), default="light")
    init_parser.set_defaults(handler=_handle_settings_init)

    return parser


def _data_dir(args: argparse.Namespace) -> Path:
    return args.data_dir or _default_data_dir()


def _settings_store(args: argparse.Namespace) -> SettingsStore:
    return SettingsStore(JsonDocumentStore(_data_dir(args) / "settings.json"))


def _handle_report(args: argparse.Namespace) -> int:
    appointments, patients = build_repositories(_data_dir(args))
    try:
        result = run_report_workflow(
            start=args.start,
            end=args.end,
            appointments=appointments,
            patients=patients,
            include_totals=not args.no_totals,
            include_price_types=not args.no_price_types,
            artifacts_dir=args.out,
        )
    except InvalidPeriodError as exc:
        raise SystemExit(f"Invalid period: {exc}") from exc

    print(result["text"])
    if result["report_txt"]:
        print(f"\nSaved report at {result['report_txt']}")
    return 0


def _handle_patients_add(args: argparse.Namespace) -> int:
    _, patients = build_repositories(_data_dir(args))
    result = register_patient(
        Patient(
            patient_id="",
            name=args.name,
            last_name=args.last_name,
            phone=args.phone,
            session_value=args.session_value,
            is_social=args.social,
            cpf=args.cpf,
            email=args.email,
        ),
        repository=patients,
    )
    if not result.saved:
        for issue in result.issues:
            print(f"{issue.code}: {issue.message}")
        return 1

    print(f"Registered patient {result.patient.display_name} ({result.patient.patient_id})")
    return 0


def _handle_patients_list(args: argparse.Namespace) -> int:
    _, patients = build_repositories(_data_dir(args))
    for patient in sorted(patients.list_all(), key=lambda item: item.display_name.casefold()):
        tier = "Social" if patient.is_social else "Integral"
        print(
            f"{capitalize(patient.name)} {capitalize(patient.last_name)}"
            f" | {format_phone(patient.phone)} | {tier}"
        )
    return 0


def _format_appointment(appointment: Appointment) -> str:
    return (
        f"{format_storage_date(appointment.date)} {appointment.start}-{appointment.end}"
        f" | {appointment.patient_name} | {appointment.status} | {appointment.appointment_id}"
    )


def _handle_appointments_add(args: argparse.Namespace) -> int:
    appointments, patients = build_repositories(_data_dir(args))
    patient = patients.get(args.patient_id)
    if patient is None:
        print(f"Unknown patient: {args.patient_id}")
        return 1
    if args.end <= args.start:
        print("End time must be after the start time")
        return 1

    appointment = appointments.create(
        Appointment(
            appointment_id="",
            patient_id=patient.patient_id,
            patient_name=patient.display_name,
            date=args.date,
            start=args.start,
            end=args.end,
            status=args.status,
            price=args.price if args.price is not None else patient.session_value,
            is_social=patient.is_social,
            notes=args.notes,
        )
    )
    print(f"Scheduled appointment {appointment.appointment_id}")
    return 0


def _handle_appointments_list(args: argparse.Namespace) -> int:
    appointments, _ = build_repositories(_data_dir(args))
    if args.start or args.end:
        selected = appointments.list_between(args.start or Date.min, args.end or Date.max)
    else:
        selected = sorted(appointments.list_all(), key=lambda item: (item.date, item.start))
    for appointment in selected:
        print(_format_appointment(appointment))
    return 0


def _handle_appointments_status(args: argparse.Namespace) -> int:
    appointments, _ = build_repositories(_data_dir(args))
    updated = appointments.update(args.appointment_id, status=args.status)
    if updated is None:
        print(f"Unknown appointment: {args.appointment_id}")
        return 1
    print(f"Appointment {updated.appointment_id} is now {updated.status}")
    return 0


def _handle_appointments_delete(args: argparse.Namespace) -> int:
    appointments, _ = build_repositories(_data_dir(args))
    if appointments.get(args.appointment_id) is None:
        print(f"Unknown appointment: {args.appointment_id}")
        return 1
    appointments.delete(args.appointment_id)
    print(f"Deleted appointment {args.appointment_id}")
    return 0


def _handle_auth_login(args: argparse.Namespace) -> int:
    if not _settings_store(args).authenticate(args.email, args.password):
        raise SystemExit("Invalid email or password")
    print("Login successful")
    return 0


def _handle_settings_init(args: argparse.Namespace) -> int:
    store = _settings_store(args)
    store.save(
        UserSettings(
            name=args.name,
            last_name=args.last_name,
            email=args.email.strip(),
            password=args.password,
            full_price=args.full_price,
            theme=args.theme,
        )
    )
    print(f"Saved settings at {store.store.path}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return args.handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
