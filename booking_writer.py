import logging
from typing import Tuple

from booking_schemas import Trip, TravelOptions
from booking_tools import calculate_total_price, generate_booking_reference
from persistence import crud

logger = logging.getLogger(__name__)


class BookingWriter:
    def __init__(self, reference_factory=generate_booking_reference):
        self.reference_factory = reference_factory

    def create_pending_booking(self, db, trip: Trip, customer_id: str, options: TravelOptions,
                               payment_id: str = None) -> Tuple[str, str]:
        """
        Insert a `pending` booking and return (booking_reference, booking_id).
        The total is recomputed from the stored trip price. A reference
        collision shows up as an IntegrityError from the unique constraint.
        """
        reference = self.reference_factory()
        booking = crud.insert_booking(
            db,
            booking_reference=reference,
            customer_id=customer_id,
            trip_id=trip.id,
            travel_insurance=options.travel_insurance,
            meal_preference=options.meal_preference,
            special_requests=options.special_requests.strip() or None,
            total_price=calculate_total_price(trip.price, options.travel_insurance),
            payment_status="pending",
            payment_id=payment_id,
        )
        logger.info("Booking %s created (pending) for trip %s", reference, trip.id)
        return reference, booking.id
