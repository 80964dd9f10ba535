import re
import secrets
import string

from errors import InvalidTransition

INSURANCE_FEE = 150

REFERENCE_PREFIX = "BK-"
REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
REFERENCE_LENGTH = 8
REFERENCE_PATTERN = re.compile(r"^BK-[A-Z0-9]{8}$")

# payment_status lifecycle; "failed" is declared but the booking flow never assigns it
PAYMENT_TRANSITIONS = {
    "pending": {"completed", "failed"},
    "completed": set(),
    "failed": set(),
}


def generate_booking_reference() -> str:
    """
    Human-readable reference, e.g. BK-7Q2M0ZKD. ~4.1e12 values; uniqueness is
    enforced only by the database constraint on insert.
    """
    return REFERENCE_PREFIX + "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(REFERENCE_LENGTH))


def is_booking_reference(value: str) -> bool:
    return bool(REFERENCE_PATTERN.match(value or ""))


def calculate_total_price(trip_price: float, travel_insurance: bool) -> float:
    total = trip_price
    if travel_insurance:
        total += INSURANCE_FEE
    return total


def validate_payment_transition(current: str, target: str) -> None:
    if target not in PAYMENT_TRANSITIONS.get(current, set()):
        raise InvalidTransition(current, target)
