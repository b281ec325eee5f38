"""Tests for the booking store's atomic updates."""

import threading
from decimal import Decimal

import pytest

from bookingflow.errors import (
    ActiveModificationExistsError,
    ConcurrencyConflictError,
    InvalidTransitionError,
    NotFoundError,
)
from bookingflow.modifications.notifications import NotificationEvent
from bookingflow.schemas.booking_schema import ServiceSelection
from bookingflow.schemas.modification_schema import (
    ModificationRequest,
    ModificationStatus,
    ModificationType,
)

from tests.conftest import ADMIN_ID, CLIENT_ID, NANNY_ID


def _request(booking_id: str) -> ModificationRequest:
    return ModificationRequest(
        booking_id=booking_id,
        client_id=CLIENT_ID,
        modification_type=ModificationType.CANCELLATION,
    )


class TestCopies:
    def test_returned_booking_is_a_copy(self, store, long_term_booking):
        copy = store.get_booking(long_term_booking.booking_id)
        copy.total_monthly_cost = Decimal(1)
        assert store.get_booking(long_term_booking.booking_id).total_monthly_cost == Decimal(6800)

    def test_returned_request_is_a_copy(self, store, long_term_booking):
        stored = store.insert_modification(_request(long_term_booking.booking_id))
        stored.status = ModificationStatus.NANNY_ACCEPTED
        fetched = store.get_modification(stored.modification_id)
        assert fetched.status == ModificationStatus.PENDING_ADMIN_REVIEW

    def test_missing_records(self, store):
        with pytest.raises(NotFoundError):
            store.get_booking("BK-MISSING")
        with pytest.raises(NotFoundError):
            store.get_modification("MOD-MISSING")

    def test_insert_for_unknown_booking(self, store):
        with pytest.raises(NotFoundError):
            store.insert_modification(_request("BK-MISSING"))

    def test_reset(self, store, long_term_booking):
        store.reset()
        with pytest.raises(NotFoundError):
            store.get_booking(long_term_booking.booking_id)


class TestCompareAndSwap:
    def test_commit_with_expected_status(self, store, long_term_booking):
        stored = store.insert_modification(_request(long_term_booking.booking_id))
        stored.status = ModificationStatus.ADMIN_REJECTED
        store.commit_transition(stored, ModificationStatus.PENDING_ADMIN_REVIEW)
        assert store.get_modification(stored.modification_id).is_terminal

    def test_stale_commit_rejected(self, store, long_term_booking):
        stored = store.insert_modification(_request(long_term_booking.booking_id))
        first = stored.model_copy(deep=True)
        first.status = ModificationStatus.ADMIN_REJECTED
        store.commit_transition(first, ModificationStatus.PENDING_ADMIN_REVIEW)

        second = stored.model_copy(deep=True)
        second.status = ModificationStatus.ADMIN_APPROVED
        with pytest.raises(ConcurrencyConflictError, match="already processed"):
            store.commit_transition(second, ModificationStatus.PENDING_ADMIN_REVIEW)
        assert store.get_modification(stored.modification_id).status == (
            ModificationStatus.ADMIN_REJECTED
        )

    def test_failed_commit_leaves_booking_untouched(self, store, long_term_booking):
        stored = store.insert_modification(_request(long_term_booking.booking_id))
        booking = store.get_booking(long_term_booking.booking_id)
        booking.services = ServiceSelection(cooking=True)
        with pytest.raises(ConcurrencyConflictError):
            store.commit_transition(stored, ModificationStatus.PENDING_NANNY_RESPONSE, booking=booking)
        assert store.get_booking(long_term_booking.booking_id).services == ServiceSelection()

    def test_one_active_request_per_booking(self, store, long_term_booking):
        store.insert_modification(_request(long_term_booking.booking_id))
        with pytest.raises(ActiveModificationExistsError):
            store.insert_modification(_request(long_term_booking.booking_id))


class TestConcurrentActors:
    THREADS = 8

    def _race(self, action):
        barrier = threading.Barrier(self.THREADS)
        outcomes = []
        lock = threading.Lock()

        def worker():
            barrier.wait()
            try:
                action()
                result = "ok"
            except (ConcurrencyConflictError, InvalidTransitionError) as exc:
                result = type(exc).__name__
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=worker) for _ in range(self.THREADS)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        return outcomes

    def test_double_approval(self, coordinator, store, notifier, long_term_booking):
        request = coordinator.submit(
            long_term_booking.booking_id, CLIENT_ID, "service_addition", ["cooking"],
        )
        outcomes = self._race(lambda: coordinator.approve(request.modification_id, ADMIN_ID))
        assert outcomes.count("ok") == 1
        assert len(outcomes) == self.THREADS

        stored = store.get_modification(request.modification_id)
        assert stored.status == ModificationStatus.PENDING_NANNY_RESPONSE
        assert len(stored.history) == 3
        assert notifier.events_for(NANNY_ID) == [NotificationEvent.MODIFICATION_APPROVED]

    def test_double_acceptance_applies_once(self, coordinator, store, long_term_booking):
        request = coordinator.submit(
            long_term_booking.booking_id, CLIENT_ID, "service_addition", ["cooking"],
        )
        coordinator.approve(request.modification_id, ADMIN_ID)
        outcomes = self._race(
            lambda: coordinator.nanny_respond(request.modification_id, NANNY_ID, accept=True)
        )
        assert outcomes.count("ok") == 1
        assert store.get_booking(long_term_booking.booking_id).total_monthly_cost == Decimal(8300)

    def test_parallel_submissions(self, coordinator, store, long_term_booking):
        outcomes = self._race(
            lambda: coordinator.submit(long_term_booking.booking_id, CLIENT_ID, "cancellation")
        )
        assert outcomes.count("ok") == 1
        assert outcomes.count("ActiveModificationExistsError") == self.THREADS - 1
        assert len(store.list_modifications(long_term_booking.booking_id)) == 1
