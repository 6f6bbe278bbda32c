"""
This module contains the exceptions raised by the reservation service.
"""


class ReservationError(Exception):
    """Base class for reservation service errors."""
    pass


class ValidationError(ReservationError):
    """
    Raised when input is malformed or missing.

    Attributes:
        errors (list[dict]): Field level details, each with a ``field`` and a ``message``.
    """

    def __init__(self, errors, message="Validation failed"):
        super().__init__(message)
        self.errors = errors


class ReservationNotFound(ReservationError):
    """Raised when no reservation exists for the given identifier."""

    def __init__(self, reservation_id):
        super().__init__(f"Reservation {reservation_id} not found")
        self.reservation_id = reservation_id


class NotificationFailure(ReservationError):
    """A notification could not be delivered or queued. Logged, never surfaced to the caller."""
    pass


class UnsupportedChannel(NotificationFailure):
    """Raised when a notification channel key is unknown."""
    pass


class PersistenceFailure(ReservationError):
    """Unexpected error from the underlying store."""
    pass
