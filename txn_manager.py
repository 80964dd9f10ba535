import logging

from sqlalchemy.exc import SQLAlchemyError

from booking_schemas import Trip, WizardData
from booking_tools import calculate_total_price, validate_payment_transition
from booking_wizard import STEP_GATES
from booking_writer import BookingWriter
from customers import CustomerResolver
from errors import NotFound, NotificationFailure, PersistenceFailure, WizardIncomplete
from notifications.dispatcher import ConfirmationDispatcher
from payments.checkout import simulate_charge
from persistence import crud
from persistence.db import SessionLocal

logger = logging.getLogger(__name__)


def _load_trip(db, trip_id: str) -> Trip:
    try:
        db_trip = crud.get_trip_by_id(db, trip_id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Error loading trip %s", trip_id)
        raise PersistenceFailure(str(exc)) from exc
    if db_trip is None:
        logger.warning("Trip %s not found", trip_id)
        raise NotFound(trip_id)
    return crud.model_to_pydantic(db_trip)


class BookingOrchestrator:
    """
    Runs one booking submission, in a fixed order and without automatic retries:

      1. re-read the trip (NotFound if it disappeared since the listing)
      2. simulated charge -> placeholder payment id
      3. customer upsert + pending booking + outbox row, one transaction
      4. confirmation dispatch (failure is logged, never fatal)
      5. payment_status pending -> completed
    """

    def __init__(self, session_factory=SessionLocal, resolver: CustomerResolver = None,
                 writer: BookingWriter = None, dispatcher: ConfirmationDispatcher = None):
        self.session_factory = session_factory
        self.resolver = resolver or CustomerResolver()
        self.writer = writer or BookingWriter()
        self.dispatcher = dispatcher or ConfirmationDispatcher()

    def submit_booking(self, trip_id: str, data: WizardData) -> str:
        db = self.session_factory()
        try:
            return self._submit(db, trip_id, data)
        finally:
            db.close()

    def _submit(self, db, trip_id: str, data: WizardData) -> str:
        trip = _load_trip(db, trip_id)

        for step, gate in STEP_GATES.items():
            if not gate(data):
                raise WizardIncomplete(step)

        total = calculate_total_price(trip.price, data.options.travel_insurance)
        payment_id = simulate_charge(data.payment, total)

        try:
            customer_id = self.resolver.resolve(db, data.contact)
            reference, booking_id = self.writer.create_pending_booking(
                db, trip, customer_id, data.options, payment_id=payment_id
            )
            payload = self.dispatcher.build_payload(reference, data.contact, trip, data.options, total)
            outbox_entry = crud.enqueue_notification(db, reference, payload.to_wire())
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Error creating booking for trip %s", trip_id)
            raise PersistenceFailure(str(exc)) from exc

        self._notify(db, outbox_entry)
        self._complete(db, reference)
        return reference

    def _notify(self, db, outbox_entry):
        try:
            self.dispatcher.deliver(db, outbox_entry)
        except NotificationFailure as exc:
            # booking still completes; the outbox row stays pending for retry_pending()
            logger.warning("Confirmation for %s not delivered: %s", outbox_entry.booking_reference, exc)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Could not record confirmation outcome for %s", outbox_entry.booking_reference)

    def _complete(self, db, reference: str):
        try:
            booking = crud.get_booking_by_reference(db, reference)
            validate_payment_transition(booking.payment_status, "completed")
            crud.set_payment_status(db, reference, "completed")
            db.commit()
        except SQLAlchemyError:
            # the booking exists; resubmitting would only create a duplicate
            db.rollback()
            logger.exception("Booking %s left pending, status update failed", reference)
            return
        logger.info("Booking %s completed", reference)


def get_trip(trip_id: str, session_factory=SessionLocal) -> Trip:
    """Catalog read used by the presentation layer before opening the wizard."""
    db = session_factory()
    try:
        return _load_trip(db, trip_id)
    finally:
        db.close()
