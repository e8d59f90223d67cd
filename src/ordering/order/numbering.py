"""Human-facing order numbers.

Format: ``ORD`` + four-digit year + last eight digits of the epoch
millisecond clock + three random uppercase alphanumerics, for example
``ORD202612345678X7Q``.
"""

import secrets
import string
from datetime import UTC, datetime

_ALPHABET = string.ascii_uppercase + string.digits


def generate_order_number(now: datetime | None = None) -> str:
    now = now or datetime.now(UTC)
    millis = str(int(now.timestamp() * 1000))[-8:]
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(3))
    return f"ORD{now.year:04d}{millis}{suffix}"


def unique_order_number(is_taken, attempts: int = 5) -> str:
    """Generate numbers until ``is_taken(number)`` is False, at most ``attempts`` times."""
    for _ in range(attempts):
        number = generate_order_number()
        if not is_taken(number):
            return number
    raise RuntimeError(f"Could not generate a unique order number after {attempts} attempts")
