from datetime import date

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from booking_schemas import CustomerContact, PaymentDetails, TravelOptions, WizardData
from notifications.dispatcher import ConfirmationDispatcher
from persistence import crud
from persistence.db import init_db, make_engine
from txn_manager import BookingOrchestrator

from fakes import FakeHttpSession


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def Session(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(Session):
    session = Session()
    yield session
    session.close()


@pytest.fixture
def trip(db):
    trip = crud.create_trip(
        db,
        name="Omra Ramadan 15 jours",
        agency_name="Al-Barakah Voyages",
        price=3000,
        departure_date=date(2026, 3, 1),
        return_date=date(2026, 3, 15),
        available_spots=10,
    )
    db.commit()
    return crud.model_to_pydantic(trip)


@pytest.fixture
def contact():
    return CustomerContact(
        first_name="Amina",
        last_name="Benali",
        email="amina@example.com",
        phone="+33612345678",
        address="12 rue de la Paix, Paris",
        passport_number="19AB12345",
    )


@pytest.fixture
def wizard_data(contact):
    return WizardData(
        contact=contact,
        options=TravelOptions(travel_insurance=False, meal_preference="halal"),
        payment=PaymentDetails(card_number="4242424242424242", card_expiry="12/27",
                               card_cvc="123", card_name="AMINA BENALI"),
    )


@pytest.fixture
def http():
    return FakeHttpSession()


@pytest.fixture
def dispatcher(http):
    return ConfirmationDispatcher(url="http://confirmation.test/send", api_key="anon-key",
                                  timeout=5, max_attempts=3, session=http)


@pytest.fixture
def orchestrator(Session, dispatcher):
    return BookingOrchestrator(session_factory=Session, dispatcher=dispatcher)
