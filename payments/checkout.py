import logging
import time

from booking_schemas import PaymentDetails

logger = logging.getLogger(__name__)


def simulate_charge(payment: PaymentDetails, amount: float) -> str:
    """
    Stand-in for a payment gateway: nothing is sent anywhere and the card is
    not charged. Returns a placeholder transaction id (PAY-<epoch millis>)
    stored on the booking where a gateway correlation id would go.
    """
    payment_id = f"PAY-{int(time.time() * 1000)}"
    logger.info("Simulated charge of %.2f on card ending %s -> %s", amount, payment.card_number[-4:], payment_id)
    return payment_id
