"""
In-memory booking and modification store.

In production this sits on the managed database; every method here maps
onto one conditional update there. Callers only ever receive copies, so
a failed transition can never leave a half-edited record behind.
"""

import logging
import threading
from typing import Optional

from bookingflow.errors import ActiveModificationExistsError, ConcurrencyConflictError, NotFoundError
from bookingflow.schemas.booking_schema import Booking
from bookingflow.schemas.modification_schema import ModificationRequest, ModificationStatus

logger = logging.getLogger(__name__)


class BookingStore:
    """Thread-safe store with compare-and-swap semantics on request status."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._bookings: dict[str, Booking] = {}
        self._modifications: dict[str, ModificationRequest] = {}

    # --- Bookings ---

    def add_booking(self, booking: Booking) -> Booking:
        with self._lock:
            self._bookings[booking.booking_id] = booking.model_copy(deep=True)
        logger.info("Booking stored: %s (%s)", booking.booking_id, booking.category.value)
        return booking.model_copy(deep=True)

    def get_booking(self, booking_id: str) -> Booking:
        with self._lock:
            booking = self._bookings.get(booking_id)
            if booking is None:
                raise NotFoundError(f"Booking {booking_id} not found")
            return booking.model_copy(deep=True)

    # --- Modification requests ---

    def get_modification(self, modification_id: str) -> ModificationRequest:
        with self._lock:
            request = self._modifications.get(modification_id)
            if request is None:
                raise NotFoundError(f"Modification request {modification_id} not found")
            return request.model_copy(deep=True)

    def list_modifications(self, booking_id: str) -> list[ModificationRequest]:
        with self._lock:
            found = [m for m in self._modifications.values() if m.booking_id == booking_id]
            return [m.model_copy(deep=True) for m in sorted(found, key=lambda m: m.requested_at)]

    def find_active_modification(self, booking_id: str) -> Optional[ModificationRequest]:
        with self._lock:
            active = self._active_for(booking_id)
            return active.model_copy(deep=True) if active else None

    def _active_for(self, booking_id: str) -> Optional[ModificationRequest]:
        for request in self._modifications.values():
            if request.booking_id == booking_id and not request.is_terminal:
                return request
        return None

    def insert_modification(self, request: ModificationRequest) -> ModificationRequest:
        """Store a new request unless the booking already has an open one."""
        with self._lock:
            if request.booking_id not in self._bookings:
                raise NotFoundError(f"Booking {request.booking_id} not found")
            active = self._active_for(request.booking_id)
            if active is not None:
                raise ActiveModificationExistsError(request.booking_id, active.modification_id)
            self._modifications[request.modification_id] = request.model_copy(deep=True)
        logger.info(
            "Modification %s stored for booking %s", request.modification_id, request.booking_id,
        )
        return request.model_copy(deep=True)

    def commit_transition(
        self,
        request: ModificationRequest,
        expected_status: ModificationStatus,
        booking: Optional[Booking] = None,
    ) -> ModificationRequest:
        """
        Replace a request, and optionally its booking, in one atomic step.

        Raises:
            ConcurrencyConflictError: If the stored status no longer equals
                ``expected_status``. Nothing is written in that case.
        """
        with self._lock:
            stored = self._modifications.get(request.modification_id)
            if stored is None:
                raise NotFoundError(f"Modification request {request.modification_id} not found")
            if stored.status != expected_status:
                logger.warning(
                    "Stale transition on %s: expected %s, found %s",
                    request.modification_id, expected_status.value, stored.status.value,
                )
                raise ConcurrencyConflictError()
            if booking is not None:
                if booking.booking_id not in self._bookings:
                    raise NotFoundError(f"Booking {booking.booking_id} not found")
                self._bookings[booking.booking_id] = booking.model_copy(deep=True)
            self._modifications[request.modification_id] = request.model_copy(deep=True)
        return request.model_copy(deep=True)

    def reset(self) -> None:
        """Clear all records. Used by test fixtures for isolation."""
        with self._lock:
            self._bookings.clear()
            self._modifications.clear()
