import pytest
from sqlalchemy.exc import IntegrityError

from booking_schemas import TravelOptions
from booking_tools import is_booking_reference
from booking_writer import BookingWriter
from customers import CustomerResolver
from persistence import crud


@pytest.fixture
def customer_id(db, contact):
    customer_id = CustomerResolver().resolve(db, contact)
    db.commit()
    return customer_id


def test_creates_pending_booking(db, trip, customer_id):
    options = TravelOptions(travel_insurance=True, meal_preference="vegetarian", special_requests="  Fauteuil roulant ")
    reference, booking_id = BookingWriter().create_pending_booking(db, trip, customer_id, options, payment_id="PAY-1")
    db.commit()

    assert is_booking_reference(reference)
    booking = crud.booking_to_pydantic(crud.get_booking_by_reference(db, reference))
    assert booking.id == booking_id
    assert booking.payment_status == "pending"
    assert booking.payment_id == "PAY-1"
    assert booking.total_price == 3150
    assert booking.meal_preference == "vegetarian"
    assert booking.special_requests == "Fauteuil roulant"
    assert booking.customer_id == customer_id
    assert booking.trip_id == trip.id


def test_blank_special_requests_stored_as_null(db, trip, customer_id):
    reference, _ = BookingWriter().create_pending_booking(db, trip, customer_id, TravelOptions())
    db.commit()
    booking = crud.get_booking_by_reference(db, reference)
    assert booking.special_requests is None
    assert booking.total_price == 3000


def test_total_follows_trip_price(db, trip, customer_id):
    cheap = trip.model_copy(update={"price": 2500})
    reference, _ = BookingWriter().create_pending_booking(db, cheap, customer_id, TravelOptions())
    assert crud.get_booking_by_reference(db, reference).total_price == 2500


def test_reference_collision_fails_insert(db, trip, customer_id):
    writer = BookingWriter(reference_factory=lambda: "BK-SAMEREF1")
    writer.create_pending_booking(db, trip, customer_id, TravelOptions())
    db.commit()
    with pytest.raises(IntegrityError):
        writer.create_pending_booking(db, trip, customer_id, TravelOptions())
    db.rollback()
