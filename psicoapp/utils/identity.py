from __future__ import annotations

import secrets
import string
import time

BASE36_DIGITS = string.digits + string.ascii_lowercase


def to_base36(number: int) -> str:
    if number <= 0:
        return "0"

    digits: list[str] = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def generate_id(prefix: str) -> str:
    """Build a record id such as ``apt_lz3k9q1c_4f0a2b``.

    Rules:
    - prefix identifies the collection
    - middle part is the creation time in base36 milliseconds
    - suffix is six random base36 characters
    """
    stamp = to_base36(time.time_ns() // 1_000_000)
    suffix = "".join(secrets.choice(BASE36_DIGITS) for _ in range(6))
    return f"{prefix}_{stamp}_{suffix}"
