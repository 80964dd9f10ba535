import logging
from datetime import datetime, timedelta, timezone

import requests
from pydantic import ValidationError

import settings
from booking_schemas import ConfirmationPayload, CustomerContact, NotificationAck, TravelOptions, Trip
from errors import NotificationFailure
from persistence import crud

logger = logging.getLogger(__name__)

BACKOFF_BASE = timedelta(seconds=30)
BACKOFF_MAX = timedelta(hours=1)


def backoff_delay(attempts: int) -> timedelta:
    """30s, 60s, 120s, ... capped at one hour."""
    return min(BACKOFF_BASE * (2 ** max(attempts - 1, 0)), BACKOFF_MAX)


class ConfirmationDispatcher:
    """
    Client for the confirmation collaborator. One POST per attempt; the
    collaborator renders and delivers the email.

    `deliver` and `retry_pending` work on notification_outbox rows so a
    failed send is kept and retried out of band (at-least-once delivery).
    """

    def __init__(self, url: str = None, api_key: str = None, timeout: float = None,
                 max_attempts: int = None, session=None):
        self.url = url or settings.NOTIFICATION_URL
        self.api_key = settings.NOTIFICATION_API_KEY if api_key is None else api_key
        self.timeout = timeout or settings.NOTIFICATION_TIMEOUT
        self.max_attempts = max_attempts or settings.NOTIFICATION_MAX_ATTEMPTS
        self.session = session or requests.Session()

    @staticmethod
    def build_payload(reference: str, contact: CustomerContact, trip: Trip, options: TravelOptions,
                      total_price: float) -> ConfirmationPayload:
        return ConfirmationPayload(
            booking_reference=reference,
            customer_email=contact.email,
            customer_name=contact.full_name,
            trip_name=trip.name,
            departure_date=trip.departure_date,
            return_date=trip.return_date,
            total_price=total_price,
            travel_insurance=options.travel_insurance,
            meal_preference=options.meal_preference,
        )

    def send(self, payload: dict) -> NotificationAck:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            resp = self.session.post(self.url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise NotificationFailure(f"confirmation request failed: {exc}") from exc

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if resp.status_code >= 400 or not body.get("success"):
            error = body.get("error") or f"HTTP {resp.status_code}"
            raise NotificationFailure(error, status_code=resp.status_code)
        try:
            return NotificationAck.model_validate(body)
        except ValidationError as exc:
            raise NotificationFailure(f"unexpected confirmation reply: {exc}", status_code=resp.status_code) from exc

    def dispatch(self, reference: str, contact: CustomerContact, trip: Trip, options: TravelOptions,
                 total_price: float) -> NotificationAck:
        payload = self.build_payload(reference, contact, trip, options, total_price)
        return self.send(payload.to_wire())

    # --- outbox ---

    def deliver(self, db, entry, now: datetime = None) -> NotificationAck:
        """Send one outbox row and record the outcome. Re-raises NotificationFailure."""
        now = now or datetime.now(timezone.utc)
        try:
            ack = self.send(entry.payload)
        except NotificationFailure as exc:
            attempts = (entry.attempts or 0) + 1
            dead = attempts >= self.max_attempts
            crud.mark_notification_failed(db, entry, str(exc), now + backoff_delay(attempts), dead=dead)
            db.commit()
            if dead:
                logger.error("Confirmation %s abandoned after %d attempts: %s",
                             entry.booking_reference, attempts, exc)
            raise
        crud.mark_notification_sent(db, entry, now)
        db.commit()
        logger.info("Confirmation %s delivered", entry.booking_reference)
        return ack

    def retry_pending(self, db, now: datetime = None, limit: int = 50) -> dict:
        now = now or datetime.now(timezone.utc)
        stats = {"sent": 0, "failed": 0, "dead": 0}
        for entry in crud.due_notifications(db, now, limit=limit):
            try:
                self.deliver(db, entry, now=now)
            except NotificationFailure as exc:
                logger.warning("Retry of confirmation %s failed: %s", entry.booking_reference, exc)
                stats["dead" if entry.status == "dead" else "failed"] += 1
            else:
                stats["sent"] += 1
        return stats
