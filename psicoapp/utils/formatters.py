from __future__ import annotations

import re

EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def _digits(value: str | None) -> str:
    return re.sub(r"\D", "", value or "")


def format_cpf(cpf: str | None) -> str:
    """Format a CPF as ``000.000.000-00``, leaving partial input partially formatted."""
    if not cpf:
        return ""

    formatted = _digits(cpf)
    formatted = re.sub(r"(\d{3})(\d)", r"\1.\2", formatted, count=1)
    formatted = re.sub(r"(\d{3})(\d)", r"\1.\2", formatted, count=1)
    return re.sub(r"(\d{3})(\d{1,2})$", r"\1-\2", formatted, count=1)


def _cpf_check_digit(digits: str) -> int:
    weight = len(digits) + 1
    total = sum(int(digit) * (weight - index) for index, digit in enumerate(digits))
    rest = (total * 10) % 11
    return 0 if rest == 10 else rest


def is_valid_cpf(cpf: str | None) -> bool:
    """Validate a CPF including both check digits.

    Rules:
    - punctuation is ignored
    - exactly 11 digits
    - all-equal digit sequences are rejected
    """
    digits = _digits(cpf)
    if len(digits) != 11:
        return False
    if re.fullmatch(r"(\d)\1+", digits):
        return False

    if _cpf_check_digit(digits[:9]) != int(digits[9]):
        return False
    return _cpf_check_digit(digits[:10]) == int(digits[10])


def format_phone(phone: str | None) -> str:
    """Format a Brazilian phone: ``(11) 91234-5678`` or ``(11) 1234-5678``."""
    if not phone:
        return ""

    cleaned = _digits(phone)
    if len(cleaned) == 11:
        return re.sub(r"(\d{2})(\d{5})(\d{4})", r"(\1) \2-\3", cleaned)
    if len(cleaned) == 10:
        return re.sub(r"(\d{2})(\d{4})(\d{4})", r"(\1) \2-\3", cleaned)
    return phone


def is_valid_phone(phone: str | None) -> bool:
    return len(_digits(phone)) in (10, 11)


def is_valid_email(email: str | None) -> bool:
    """Empty emails are accepted; the field is optional."""
    if not email:
        return True
    return EMAIL_RE.fullmatch(email) is not None


def capitalize(value: str | None) -> str:
    if not value:
        return ""
    return value[:1].upper() + value[1:].lower()
