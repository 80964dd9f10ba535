from sqlalchemy import func, select

from customers import CustomerResolver
from persistence import crud
from persistence.models import CustomerModel


def test_creates_customer_on_first_booking(db, contact):
    customer_id = CustomerResolver().resolve(db, contact)
    db.commit()

    stored = crud.get_customer_by_email(db, contact.email)
    assert stored.id == customer_id
    assert stored.first_name == "Amina"
    assert stored.passport_number == "19AB12345"


def test_same_email_overwrites_contact_fields(db, contact):
    resolver = CustomerResolver()
    first_id = resolver.resolve(db, contact)
    db.commit()

    updated = contact.model_copy(update={
        "first_name": "Aminata",
        "phone": "+33700000000",
        "address": "1 place Bellecour, Lyon",
        "passport_number": "20CD67890",
    })
    second_id = resolver.resolve(db, updated)
    db.commit()

    assert second_id == first_id
    assert db.scalar(select(func.count()).select_from(CustomerModel)) == 1
    stored = crud.get_customer_by_email(db, contact.email)
    assert stored.first_name == "Aminata"
    assert stored.last_name == "Benali"
    assert stored.phone == "+33700000000"
    assert stored.address == "1 place Bellecour, Lyon"
    assert stored.passport_number == "20CD67890"


def test_different_email_is_a_different_customer(db, contact):
    resolver = CustomerResolver()
    a = resolver.resolve(db, contact)
    b = resolver.resolve(db, contact.model_copy(update={"email": "other@example.com"}))
    db.commit()
    assert a != b
