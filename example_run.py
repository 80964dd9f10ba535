"""
Run this script to see a full mocked booking flow:
 - create an in-memory database and seed one trip
 - walk the wizard through its four steps
 - submit: customer upsert -> pending booking -> confirmation -> completed
 - the first confirmation attempt fails, the outbox retry delivers it
 - print the receipt the confirmation service would send
"""

from datetime import date, datetime, timedelta, timezone

from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import settings
from booking_schemas import ConfirmationPayload
from booking_wizard import BookingWizard
from notifications.dispatcher import ConfirmationDispatcher
from notifications.rendering import render_receipt
from persistence import crud
from persistence.db import init_db, make_engine
from txn_manager import BookingOrchestrator


class _Reply:
    def __init__(self, body, status_code=200):
        self._body = body
        self.status_code = status_code

    def json(self):
        return self._body


class MockNotificationSession:
    """Answers like the confirmation service without any network call.

    The first `failures` calls get a 503, as if the mail relay were down.
    """

    def __init__(self, failures: int = 0):
        self.failures = failures

    def post(self, url, json=None, headers=None, timeout=None):
        if self.failures > 0:
            self.failures -= 1
            return _Reply({"success": False, "error": "mail relay unavailable"}, status_code=503)
        data = ConfirmationPayload.model_validate(json)
        print(render_receipt(data))
        return _Reply({
            "success": True,
            "message": "Confirmation email sent successfully",
            "bookingReference": data.booking_reference,
        })


def main(database_url: str = "sqlite://"):
    settings.configure_logging()
    engine = make_engine(database_url, poolclass=StaticPool)
    init_db(bind=engine)
    Session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    with Session() as db:
        trip = crud.create_trip(
            db,
            name="Omra Ramadan 15 jours",
            agency_name="Al-Barakah Voyages",
            price=3000,
            departure_date=date(2026, 3, 1),
            return_date=date(2026, 3, 15),
            available_spots=12,
            includes=["Vol", "Hôtel", "Visa"],
        )
        db.commit()
        trip_id = trip.id

    orchestrator = BookingOrchestrator(
        session_factory=Session,
        dispatcher=ConfirmationDispatcher(url="http://confirmation.local", session=MockNotificationSession(failures=1)),
    )

    wizard = BookingWizard(trip_id)
    wizard.update_contact(first_name="Amina", last_name="Benali", email="amina@example.com",
                          phone="+33 6 12 34 56 78", address="12 rue de la Paix, Paris",
                          passport_number="19AB12345")
    wizard.next()
    wizard.update_options(travel_insurance=True, meal_preference="halal")
    wizard.next()
    wizard.next()
    wizard.update_payment(card_number="4242 4242 4242 4242", card_expiry="1227", card_cvc="123",
                          card_name="AMINA BENALI")

    print("=== Submit ===")
    reference = wizard.submit(orchestrator)

    print("\n=== Outbox retry ===")
    with Session() as db:
        stats = orchestrator.dispatcher.retry_pending(db, now=datetime.now(timezone.utc) + timedelta(minutes=5))
        entry = crud.get_notification_by_reference(db, reference)
    print("Retry:", stats)
    print("Confirmation:", entry.status, "after", entry.attempts, "attempts")

    print("\n=== Final booking result ===")
    with Session() as db:
        booking = crud.booking_to_pydantic(crud.get_booking_by_reference(db, reference))
    print("Wizard state:", wizard.state)
    print("Booking:", booking.booking_reference, booking.payment_status, booking.total_price)
    return booking


if __name__ == "__main__":
    main()
