import logging

from booking_schemas import CustomerContact
from persistence import crud

logger = logging.getLogger(__name__)


class CustomerResolver:
    """
    Finds or creates the single customer identity for an email address.
    Email is the only deduplication key: a later booking with the same email
    overwrites name, phone, address and passport number (last submission wins).
    """

    def resolve(self, db, contact: CustomerContact) -> str:
        customer_id = crud.upsert_customer(db, contact)
        logger.info("Resolved customer %s for %s", customer_id, contact.email)
        return customer_id
