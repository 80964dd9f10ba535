import uuid

from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, Integer, JSON, Numeric, String, Text, func,
)
from sqlalchemy.orm import relationship
from .db import Base


def _uuid():
    return str(uuid.uuid4())


class TripModel(Base):
    __tablename__ = "trips"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    agency_name = Column(String(255), default="")
    description = Column(Text, default="")
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    departure_date = Column(Date, nullable=False)
    return_date = Column(Date, nullable=False)
    # read-only for the booking flow, nothing decrements it
    available_spots = Column(Integer, default=0)
    image_url = Column(String, nullable=True)
    includes = Column(JSON, default=list)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    bookings = relationship("BookingModel", back_populates="trip")


class CustomerModel(Base):
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=_uuid)
    first_name = Column(String(128), nullable=False)
    last_name = Column(String(128), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(64), nullable=False)
    address = Column(Text, nullable=False)
    passport_number = Column(String(64), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    bookings = relationship("BookingModel", back_populates="customer")


class BookingModel(Base):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=_uuid)
    booking_reference = Column(String(16), unique=True, index=True, nullable=False)
    customer_id = Column(String(36), ForeignKey("customers.id"), index=True, nullable=False)
    trip_id = Column(String(36), ForeignKey("trips.id"), index=True, nullable=False)
    travel_insurance = Column(Boolean, default=False)
    meal_preference = Column(String(32), nullable=False)
    special_requests = Column(Text, nullable=True)
    total_price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    payment_status = Column(String(32), default="pending")
    payment_id = Column(String(64), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    customer = relationship("CustomerModel", back_populates="bookings")
    trip = relationship("TripModel", back_populates="bookings")


class NotificationOutboxModel(Base):
    __tablename__ = "notification_outbox"

    id = Column(Integer, primary_key=True, index=True)
    booking_reference = Column(String(16), index=True, nullable=False)
    # wire payload, exactly what gets POSTed to the collaborator
    payload = Column(JSON, nullable=False)
    status = Column(String(16), default="pending", index=True)  # pending | sent | dead
    attempts = Column(Integer, default=0)
    last_error = Column(Text, nullable=True)
    next_attempt_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    sent_at = Column(DateTime(timezone=True), nullable=True)
