from __future__ import annotations

from dataclasses import replace

from psicoapp.domain.models import Patient, RegistrationResult, ValidationIssue
from psicoapp.storage.patients import PatientRepository
from psicoapp.utils.formatters import (
    is_valid_cpf,
    is_valid_email,
    is_valid_phone,
)
from psicoapp.utils.identity import generate_id


def validate_patient(patient: Patient) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []

    missing = [
        field_name
        for field_name, value in (
            ("name", patient.name),
            ("last_name", patient.last_name),
            ("phone", patient.phone),
            ("session_value", patient.session_value),
        )
        if value in (None, "")
    ]
    if missing:
        issues.append(
            ValidationIssue(
                code="missing_fields",
                message="Name, last name, phone and session value are required.",
                details={"fields": missing},
            )
        )

    email = (patient.email or "").strip()
    if email and not is_valid_email(email):
        issues.append(
            ValidationIssue(
                code="invalid_email",
                message="Email address is not valid.",
                details={"email": email},
            )
        )

    if patient.cpf and not is_valid_cpf(patient.cpf):
        issues.append(
            ValidationIssue(
                code="invalid_cpf",
                message="CPF check digits do not match.",
                details={"cpf": patient.cpf},
            )
        )

    if patient.phone and not is_valid_phone(patient.phone):
        issues.append(
            ValidationIssue(
                code="invalid_phone",
                message="Phone must include area code and full number (10 or 11 digits).",
                details={"phone": patient.phone},
            )
        )

    if patient.session_value not in (None, ""):
        try:
            value = float(patient.session_value)
        except (TypeError, ValueError):
            value = -1.0
        if value < 0:
            issues.append(
                ValidationIssue(
                    code="invalid_session_value",
                    message="Session value must be a non-negative number.",
                    details={"session_value": patient.session_value},
                )
            )

    return issues


def register_patient(
    patient: Patient,
    repository: PatientRepository | None = None,
) -> RegistrationResult:
    """Validate and store a new patient, or update an existing one with the same id."""
    repo = repository or PatientRepository()
    issues = validate_patient(patient)
    if issues:
        return RegistrationResult(saved=False, patient=patient, issues=issues)

    normalized = replace(
        patient,
        patient_id=patient.patient_id or generate_id("pat"),
        name=patient.name.strip(),
        last_name=patient.last_name.strip(),
        phone=patient.phone.strip(),
        cpf=(patient.cpf or "").strip() or None,
        email=(patient.email or "").strip() or None,
        session_value=float(patient.session_value),
    )

    if not repo.update(normalized):
        repo.add(normalized)
    return RegistrationResult(saved=True, patient=normalized)
