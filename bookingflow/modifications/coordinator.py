"""
Two-hop approval workflow for booking modifications.

A client proposes a change, an admin approves or rejects it, and on
approval the assigned nanny accepts or declines. Only nanny acceptance
touches the booking: the services snapshot becomes the requested one and
the price adjustment is added to the recurring cost, in the same atomic
store update that records the acceptance.

Usage:
    coordinator = ModificationApprovalCoordinator(store)
    request = coordinator.submit(booking_id, client_id, "service_addition", ["cooking"])
    coordinator.admin_review(request.modification_id, "admin-1", approve=True)
    coordinator.nanny_respond(request.modification_id, nanny_id, accept=True)
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional, Union

from bookingflow.errors import PermissionDeniedError, ValidationError
from bookingflow.logging_context import get_request_logger
from bookingflow.modifications.notifications import (
    ADMIN_RECIPIENT,
    LoggingNotifier,
    Notification,
    NotificationEvent,
    Notifier,
)
from bookingflow.modifications.state_machine import ModificationStateMachine, ModificationTrigger
from bookingflow.modifications.store import BookingStore
from bookingflow.pricing.delta import service_change_delta
from bookingflow.pricing.engine import PricingRuleEngine
from bookingflow.schemas.booking_schema import Booking, BookingStatus, ServiceSelection
from bookingflow.schemas.modification_schema import (
    ModificationRequest,
    ModificationType,
    StatusChange,
)

logger = get_request_logger(__name__)

MODIFIABLE_BOOKING_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.ACTIVE})
SERVICE_NAMES = frozenset(ServiceSelection.model_fields)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ModificationApprovalCoordinator:
    """Drives modification requests through admin review and nanny response."""

    def __init__(
        self,
        store: BookingStore,
        engine: Optional[PricingRuleEngine] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.store = store
        self.engine = engine or PricingRuleEngine()
        self.notifier = notifier or LoggingNotifier()

    # ------------------------------------------------------------------
    # Client
    # ------------------------------------------------------------------

    def submit(
        self,
        booking_id: str,
        client_id: str,
        modification_type: Union[ModificationType, str],
        services: Iterable[str] = (),
        client_notes: Optional[str] = None,
    ) -> ModificationRequest:
        """
        Create a request in ``pending_admin_review`` and notify the admins.

        Raises:
            ValidationError: Bad modification type, unknown or inapplicable
                services, or a booking that can no longer be modified.
            PermissionDeniedError: The client does not own the booking.
            ActiveModificationExistsError: The booking already has an open request.
        """
        booking = self.store.get_booking(booking_id)
        if booking.client_id != client_id:
            raise PermissionDeniedError(f"Client {client_id} cannot modify booking {booking_id}")
        if booking.status not in MODIFIABLE_BOOKING_STATUSES:
            raise ValidationError(
                f"Booking {booking_id} cannot be modified because its status is "
                f"'{booking.status.value}'"
            )

        try:
            kind = ModificationType(modification_type)
        except ValueError:
            raise ValidationError(f"Unknown modification type: {modification_type!r}") from None

        old_values, new_values, adjustment = self._plan_change(booking, kind, tuple(services))
        request = ModificationRequest(
            booking_id=booking_id,
            client_id=client_id,
            modification_type=kind,
            old_values=old_values,
            new_values=new_values,
            price_adjustment=adjustment,
            client_notes=client_notes,
        )
        request.history.append(StatusChange(status=request.status, actor_id=client_id))
        stored = self.store.insert_modification(request)

        logger.info(
            "Modification %s submitted for booking %s (%s, adjustment %s)",
            stored.modification_id, booking_id, kind.value, adjustment,
        )
        self._notify(
            ADMIN_RECIPIENT, NotificationEvent.MODIFICATION_SUBMITTED, stored,
            f"New {kind.value.replace('_', ' ')} request awaiting review",
        )
        return stored

    def _plan_change(
        self, booking: Booking, kind: ModificationType, services: tuple[str, ...],
    ) -> tuple[Optional[ServiceSelection], Optional[ServiceSelection], Decimal]:
        if kind == ModificationType.CANCELLATION:
            return None, None, Decimal("0")

        if not services:
            raise ValidationError("Select at least one service to modify")
        unknown = sorted(set(services) - SERVICE_NAMES)
        if unknown:
            raise ValidationError(f"Unknown services: {', '.join(unknown)}")

        current = booking.services
        enabled = set(current.enabled())
        if kind == ModificationType.SERVICE_ADDITION:
            already = sorted(set(services) & enabled)
            if already:
                raise ValidationError(f"Services already on the booking: {', '.join(already)}")
            updated = current.with_changes(add=services)
        else:
            missing = sorted(set(services) - enabled)
            if missing:
                raise ValidationError(f"Services not on the booking: {', '.join(missing)}")
            updated = current.with_changes(remove=services)

        adjustment = service_change_delta(booking, current, updated, self.engine)
        return current, updated, adjustment

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    def admin_review(
        self,
        modification_id: str,
        admin_id: str,
        approve: bool,
        admin_notes: Optional[str] = None,
    ) -> ModificationRequest:
        """
        Approve (and hand to the nanny) or reject a pending request.

        Raises:
            InvalidTransitionError: The request is not awaiting admin review.
            ValidationError: Rejection without admin notes.
            ConcurrencyConflictError: Another admin resolved it first.
        """
        request = self.store.get_modification(modification_id)
        expected = request.status
        sm = ModificationStateMachine(expected)
        trigger = ModificationTrigger.ADMIN_APPROVE if approve else ModificationTrigger.ADMIN_REJECT
        sm.transition(trigger)

        if not approve and not (admin_notes or "").strip():
            raise ValidationError("Admin notes are required when rejecting a modification request")

        now = _now()
        updated = request.model_copy(deep=True)
        updated.admin_notes = admin_notes
        updated.admin_reviewed_by = admin_id
        updated.admin_reviewed_at = now
        updated.status = sm.current_state
        updated.history.append(StatusChange(
            status=sm.current_state, entered_at=now, actor_id=admin_id, trigger=trigger.value,
        ))
        if approve:
            sm.transition(ModificationTrigger.FORWARD_TO_NANNY)
            updated.status = sm.current_state
            updated.history.append(StatusChange(
                status=sm.current_state, entered_at=now, actor_id=admin_id,
                trigger=ModificationTrigger.FORWARD_TO_NANNY.value,
            ))

        stored = self.store.commit_transition(updated, expected)
        logger.info(
            "Modification %s %s by admin %s",
            modification_id, "approved" if approve else "rejected", admin_id,
        )

        if approve:
            booking = self.store.get_booking(stored.booking_id)
            self._notify(
                booking.nanny_id, NotificationEvent.MODIFICATION_APPROVED, stored,
                "A booking change has been approved and needs your response",
            )
        else:
            self._notify(
                stored.client_id, NotificationEvent.MODIFICATION_REJECTED, stored,
                f"Your modification request was rejected: {admin_notes}",
            )
        return stored

    def approve(self, modification_id: str, admin_id: str, admin_notes: Optional[str] = None) -> ModificationRequest:
        return self.admin_review(modification_id, admin_id, approve=True, admin_notes=admin_notes)

    def reject(self, modification_id: str, admin_id: str, admin_notes: str) -> ModificationRequest:
        return self.admin_review(modification_id, admin_id, approve=False, admin_notes=admin_notes)

    # ------------------------------------------------------------------
    # Nanny
    # ------------------------------------------------------------------

    def nanny_respond(
        self,
        modification_id: str,
        nanny_id: str,
        accept: bool,
        nanny_notes: Optional[str] = None,
    ) -> ModificationRequest:
        """
        Accept or decline an approved request. Acceptance applies it to the booking.

        Raises:
            PermissionDeniedError: The nanny is not assigned to the booking.
            InvalidTransitionError: The request is not awaiting a nanny response.
            ConcurrencyConflictError: The request was resolved concurrently.
        """
        request = self.store.get_modification(modification_id)
        booking = self.store.get_booking(request.booking_id)
        if booking.nanny_id != nanny_id:
            raise PermissionDeniedError(
                f"Nanny {nanny_id} is not assigned to booking {booking.booking_id}"
            )

        expected = request.status
        sm = ModificationStateMachine(expected)
        trigger = ModificationTrigger.NANNY_ACCEPT if accept else ModificationTrigger.NANNY_DECLINE
        sm.transition(trigger)

        now = _now()
        updated = request.model_copy(deep=True)
        updated.nanny_notes = nanny_notes
        updated.nanny_responded_by = nanny_id
        updated.nanny_responded_at = now
        updated.status = sm.current_state
        updated.history.append(StatusChange(
            status=sm.current_state, entered_at=now, actor_id=nanny_id, trigger=trigger.value,
        ))

        changed_booking = self._apply(booking, updated, now) if accept else None
        stored = self.store.commit_transition(updated, expected, booking=changed_booking)

        if accept:
            logger.info(
                "Modification %s accepted; booking %s cost %s -> %s",
                modification_id, booking.booking_id,
                booking.total_monthly_cost, changed_booking.total_monthly_cost,
            )
            self._notify(
                stored.client_id, NotificationEvent.MODIFICATION_ACCEPTED, stored,
                "Your booking change has been accepted",
            )
        else:
            logger.info("Modification %s declined by nanny %s", modification_id, nanny_id)
            self._notify(
                stored.client_id, NotificationEvent.MODIFICATION_DECLINED, stored,
                "Your nanny declined the requested booking change",
            )
        return stored

    @staticmethod
    def _apply(booking: Booking, request: ModificationRequest, now: datetime) -> Booking:
        updated = booking.model_copy(deep=True)
        if request.new_values is not None:
            updated.services = request.new_values
        updated.total_monthly_cost = booking.total_monthly_cost + request.price_adjustment
        if request.modification_type == ModificationType.CANCELLATION:
            updated.status = BookingStatus.CANCELLED
        updated.updated_at = now
        return updated

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def active_request_for(self, booking_id: str) -> Optional[ModificationRequest]:
        return self.store.find_active_modification(booking_id)

    def history_for(self, booking_id: str) -> list[ModificationRequest]:
        self.store.get_booking(booking_id)
        return self.store.list_modifications(booking_id)

    def _notify(
        self,
        recipient_id: str,
        event: NotificationEvent,
        request: ModificationRequest,
        message: str,
    ) -> None:
        notification = Notification(
            recipient_id=recipient_id,
            event=event,
            booking_id=request.booking_id,
            modification_id=request.modification_id,
            message=message,
        )
        try:
            self.notifier.send(notification)
        except Exception:
            # The transition is already committed at this point.
            logger.exception("Failed to send %s notification to %s", event.value, recipient_id)
