"""
Four-step reservation wizard as an explicit state machine.

    1 personal info -> 2 travel options -> 3 review -> 4 payment
    -> submitting -> complete

"next" is guarded by the gate of the current step, "back" never is, and
"back" on step 1 leaves the flow (abandoned). Nothing is persisted until
submission, so abandoning leaves no residue.
"""
import logging
import re
from typing import Optional, get_args

from booking_schemas import MealPreference, WizardData
from errors import RETRY_MESSAGE, BookingError, InvalidTransition, WizardIncomplete

logger = logging.getLogger(__name__)

PERSONAL, OPTIONS, REVIEW, PAYMENT = 1, 2, 3, 4
SUBMITTING = "submitting"
COMPLETE = "complete"
ABANDONED = "abandoned"

TERMINAL_STATES = {COMPLETE, ABANDONED}

# (state, event) -> next state
TRANSITIONS = {
    (PERSONAL, "next"): OPTIONS,
    (PERSONAL, "back"): ABANDONED,
    (OPTIONS, "next"): REVIEW,
    (OPTIONS, "back"): PERSONAL,
    (REVIEW, "next"): PAYMENT,
    (REVIEW, "back"): OPTIONS,
    (PAYMENT, "back"): REVIEW,
    (PAYMENT, "submit"): SUBMITTING,
    (SUBMITTING, "succeeded"): COMPLETE,
    (SUBMITTING, "failed"): PAYMENT,
}

# events that require the current step to be valid
GUARDED_EVENTS = {"next", "submit"}

MEAL_PREFERENCES = get_args(MealPreference)


def _filled(*values) -> bool:
    return all(bool(v and str(v).strip()) for v in values)


def personal_info_valid(data: WizardData) -> bool:
    c = data.contact
    return _filled(c.first_name, c.last_name, c.email, c.phone, c.address, c.passport_number)


def travel_options_valid(data: WizardData) -> bool:
    o = data.options
    return o.meal_preference in MEAL_PREFERENCES and isinstance(o.travel_insurance, bool)


def review_valid(data: WizardData) -> bool:
    return True


def payment_valid(data: WizardData) -> bool:
    p = data.payment
    return (
        len(p.card_number) == 16 and p.card_number.isdigit()
        and _filled(p.card_expiry)
        and len(p.card_cvc) == 3 and p.card_cvc.isdigit()
        and _filled(p.card_name)
    )


STEP_GATES = {
    PERSONAL: personal_info_valid,
    OPTIONS: travel_options_valid,
    REVIEW: review_valid,
    PAYMENT: payment_valid,
}


def digits_only(value: str) -> str:
    return re.sub(r"\D", "", value or "")


def format_expiry(value: str) -> str:
    """'1227' -> '12/27', partial input is kept as typed digits."""
    digits = digits_only(value)[:4]
    if len(digits) >= 2:
        return digits[:2] + "/" + digits[2:]
    return digits


class BookingWizard:
    def __init__(self, trip_id: str, data: Optional[WizardData] = None):
        self.trip_id = trip_id
        self.data = data or WizardData()
        self.state = PERSONAL
        self.booking_reference = None
        self.last_error = None

    # --- form input ---

    @staticmethod
    def _merge(model, fields):
        # model_copy(update=) skips validation
        return type(model).model_validate({**model.model_dump(), **fields})

    def update_contact(self, **fields):
        self.data.contact = self._merge(self.data.contact, fields)

    def update_options(self, **fields):
        self.data.options = self._merge(self.data.options, fields)

    def update_payment(self, **fields):
        if "card_number" in fields:
            fields["card_number"] = digits_only(fields["card_number"])[:16]
        if "card_cvc" in fields:
            fields["card_cvc"] = digits_only(fields["card_cvc"])[:3]
        if "card_expiry" in fields:
            fields["card_expiry"] = format_expiry(fields["card_expiry"])
        self.data.payment = self._merge(self.data.payment, fields)

    # --- navigation ---

    def can_advance(self, step=None) -> bool:
        gate = STEP_GATES.get(self.state if step is None else step)
        return bool(gate and gate(self.data))

    def allowed(self, event: str) -> bool:
        if (self.state, event) not in TRANSITIONS:
            return False
        if event in GUARDED_EVENTS:
            return self.can_advance()
        return True

    def fire(self, event: str):
        target = TRANSITIONS.get((self.state, event))
        if target is None:
            raise InvalidTransition(self.state, event)
        if event in GUARDED_EVENTS and not self.can_advance():
            raise WizardIncomplete(self.state)
        logger.debug("wizard %s: %s --%s--> %s", self.trip_id, self.state, event, target)
        self.state = target
        return self.state

    def next(self):
        return self.fire("next")

    def back(self):
        return self.fire("back")

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    # --- submission ---

    def submit(self, orchestrator) -> str:
        """
        Hand the collected data to the orchestrator. On failure the wizard
        returns to the payment step and the error is re-raised for display.
        """
        self.fire("submit")
        try:
            reference = orchestrator.submit_booking(self.trip_id, self.data)
        except BookingError as exc:
            self.last_error = exc.user_message
            self.fire("failed")
            raise
        except Exception:
            logger.exception("Unexpected error submitting booking for trip %s", self.trip_id)
            self.last_error = RETRY_MESSAGE
            self.fire("failed")
            raise
        self.booking_reference = reference
        self.last_error = None
        self.fire("succeeded")
        return reference
