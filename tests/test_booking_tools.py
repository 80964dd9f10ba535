import pytest

from booking_tools import (
    INSURANCE_FEE, REFERENCE_ALPHABET, calculate_total_price, generate_booking_reference,
    is_booking_reference, validate_payment_transition,
)
from errors import InvalidTransition


def test_reference_format():
    for _ in range(500):
        ref = generate_booking_reference()
        assert is_booking_reference(ref)
        assert len(ref) == 11
        assert all(c in REFERENCE_ALPHABET for c in ref[3:])


def test_references_differ():
    refs = {generate_booking_reference() for _ in range(1000)}
    assert len(refs) == 1000


@pytest.mark.parametrize("value", ["bk-ABCDEFGH", "BK-ABCDEFG", "BK-ABCDEFGHI", "BK-abcdefgh", "XX-ABCDEFGH", "", None])
def test_is_booking_reference_rejects(value):
    assert not is_booking_reference(value)


@pytest.mark.parametrize("price,insured,expected", [
    (3000, False, 3000),
    (3000, True, 3150),
    (0, True, INSURANCE_FEE),
    (1999.5, True, 2149.5),
])
def test_total_price(price, insured, expected):
    assert calculate_total_price(price, insured) == expected
    # pure: same inputs, same output
    assert calculate_total_price(price, insured) == calculate_total_price(price, insured)


def test_pending_can_complete():
    validate_payment_transition("pending", "completed")
    validate_payment_transition("pending", "failed")


@pytest.mark.parametrize("current,target", [
    ("completed", "pending"),
    ("completed", "failed"),
    ("failed", "completed"),
    ("pending", "pending"),
])
def test_invalid_payment_transitions(current, target):
    with pytest.raises(InvalidTransition):
        validate_payment_transition(current, target)
