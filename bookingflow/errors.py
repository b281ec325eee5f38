"""Error taxonomy shared by the pricing engine, the workflow and the API layer."""

from typing import Optional


class BookingFlowError(Exception):
    """Base class for all domain errors raised by this package."""


class ValidationError(BookingFlowError):
    """Malformed or out-of-policy input. Never retried automatically."""


class NotFoundError(BookingFlowError):
    """A booking or modification request does not exist."""


class PermissionDeniedError(BookingFlowError):
    """The acting user is not a party to the booking."""


class InvalidTransitionError(BookingFlowError):
    """Raised when a modification request cannot move to the attempted state."""

    def __init__(self, current_state: str, target_state: Optional[str], message: str = "") -> None:
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(
            message
            or f"Cannot move modification request from '{current_state}' to '{target_state}'"
        )


class ConcurrencyConflictError(BookingFlowError):
    """Optimistic guard failed: another actor already changed the record."""

    def __init__(self, message: str = "This request was already processed") -> None:
        super().__init__(message)


class ActiveModificationExistsError(ConcurrencyConflictError):
    """A booking already has a modification request awaiting a decision."""

    def __init__(self, booking_id: str, modification_id: str) -> None:
        self.booking_id = booking_id
        self.modification_id = modification_id
        super().__init__(
            f"Booking {booking_id} already has an open modification request ({modification_id})"
        )
