RETRY_MESSAGE = "Erreur lors de la réservation. Veuillez réessayer."
TRIP_MISSING_MESSAGE = "Voyage introuvable"


class BookingError(Exception):
    """Base class for every failure of the booking flow.

    `user_message` is what the presentation layer shows; it never leaks
    which internal step failed.
    """

    user_message = RETRY_MESSAGE


class NotFound(BookingError):
    """The trip referenced by the wizard no longer exists."""

    user_message = TRIP_MISSING_MESSAGE

    def __init__(self, trip_id):
        super().__init__(f"Trip {trip_id} not found")
        self.trip_id = trip_id


class PersistenceFailure(BookingError):
    """Customer or booking write failed (connectivity, constraint, reference collision)."""


class NotificationFailure(BookingError):
    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class WizardIncomplete(BookingError):
    def __init__(self, step: int):
        super().__init__(f"Wizard step {step} is not valid")
        self.step = step


class InvalidTransition(BookingError, ValueError):
    def __init__(self, current, target):
        super().__init__(f"Invalid transition: {current} -> {target}")
        self.current = current
        self.target = target
