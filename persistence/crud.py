"""
Query helpers over the booking tables.

None of these commit: the caller owns the transaction, so several helpers can
be combined into one unit of work (customer upsert + booking insert).
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.dialects import postgresql, sqlite

from booking_schemas import Booking, CustomerContact, Trip
from .models import BookingModel, CustomerModel, NotificationOutboxModel, TripModel, _uuid

CONTACT_FIELDS = ("first_name", "last_name", "email", "phone", "address", "passport_number")

_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


# --- trips (catalog, read side) ---

def get_trip_by_id(db, trip_id: str) -> Optional[TripModel]:
    return db.get(TripModel, trip_id)


def create_trip(db, **fields) -> TripModel:
    trip = TripModel(**fields)
    db.add(trip)
    db.flush()
    return trip


def model_to_pydantic(db_trip: TripModel) -> Trip:
    return Trip.model_validate(db_trip)


# --- customers ---

def get_customer_by_email(db, email: str) -> Optional[CustomerModel]:
    return db.execute(select(CustomerModel).where(CustomerModel.email == email)).scalar_one_or_none()


def upsert_customer(db, contact: CustomerContact) -> str:
    """
    Insert the customer or overwrite every contact field of the row holding
    the same email, in a single statement. Returns the customer id.
    """
    values = contact.model_dump(include=set(CONTACT_FIELDS))
    insert = _UPSERT_DIALECTS.get(db.get_bind().dialect.name)
    if insert is None:
        return _locked_upsert_customer(db, values)

    stmt = insert(CustomerModel.__table__).values(id=_uuid(), **values)
    stmt = stmt.on_conflict_do_update(
        index_elements=["email"],
        set_={**{k: stmt.excluded[k] for k in CONTACT_FIELDS if k != "email"}, "updated_at": func.now()},
    ).returning(CustomerModel.id)
    customer_id = db.execute(stmt).scalar_one()
    # the ORM identity map may hold a stale copy of this row
    db.expire_all()
    return customer_id


def _locked_upsert_customer(db, values: dict) -> str:
    # backends without INSERT .. ON CONFLICT: row lock, then write
    existing = db.execute(
        select(CustomerModel).where(CustomerModel.email == values["email"]).with_for_update()
    ).scalar_one_or_none()
    if existing is None:
        existing = CustomerModel(**values)
        db.add(existing)
    else:
        for key, value in values.items():
            setattr(existing, key, value)
    db.flush()
    return existing.id


# --- bookings ---

def insert_booking(db, **fields) -> BookingModel:
    booking = BookingModel(**fields)
    db.add(booking)
    db.flush()
    return booking


def get_booking_by_reference(db, reference: str) -> Optional[BookingModel]:
    return db.execute(
        select(BookingModel).where(BookingModel.booking_reference == reference)
    ).scalar_one_or_none()


def list_bookings_for_customer(db, customer_id: str) -> List[BookingModel]:
    return list(db.execute(
        select(BookingModel).where(BookingModel.customer_id == customer_id).order_by(BookingModel.created_at)
    ).scalars())


def set_payment_status(db, reference: str, status: str) -> int:
    result = db.execute(
        update(BookingModel)
        .where(BookingModel.booking_reference == reference)
        .values(payment_status=status, updated_at=func.now())
    )
    return result.rowcount


def booking_to_pydantic(db_booking: BookingModel) -> Booking:
    return Booking.model_validate(db_booking)


# --- notification outbox ---

def enqueue_notification(db, reference: str, payload: dict) -> NotificationOutboxModel:
    entry = NotificationOutboxModel(booking_reference=reference, payload=payload, status="pending", attempts=0)
    db.add(entry)
    db.flush()
    return entry


def mark_notification_sent(db, entry: NotificationOutboxModel, now: datetime):
    entry.status = "sent"
    entry.attempts = (entry.attempts or 0) + 1
    entry.sent_at = now
    entry.last_error = None
    entry.next_attempt_at = None
    db.flush()


def mark_notification_failed(db, entry: NotificationOutboxModel, error: str, next_attempt_at, dead: bool = False):
    entry.attempts = (entry.attempts or 0) + 1
    entry.last_error = error
    entry.next_attempt_at = next_attempt_at
    entry.status = "dead" if dead else "pending"
    db.flush()


def due_notifications(db, now: datetime, limit: int = 50) -> List[NotificationOutboxModel]:
    stmt = (
        select(NotificationOutboxModel)
        .where(NotificationOutboxModel.status == "pending")
        .where((NotificationOutboxModel.next_attempt_at.is_(None)) | (NotificationOutboxModel.next_attempt_at <= now))
        .order_by(NotificationOutboxModel.id)
        .limit(limit)
    )
    return list(db.execute(stmt).scalars())


def get_notification_by_reference(db, reference: str) -> Optional[NotificationOutboxModel]:
    stmt = select(NotificationOutboxModel).where(NotificationOutboxModel.booking_reference == reference)
    return db.execute(stmt).scalars().first()
