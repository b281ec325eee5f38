"""
Finite state machine for booking modification requests.

A request moves from admin review to the nanny and ends in exactly one
terminal state. Every legal move is listed in ``TRANSITIONS``; anything
else, including any move out of a terminal state, is rejected.

Usage:
    sm = ModificationStateMachine()
    sm.transition(ModificationTrigger.ADMIN_APPROVE)
    sm.transition(ModificationTrigger.FORWARD_TO_NANNY)
    assert sm.current_state == ModificationStatus.PENDING_NANNY_RESPONSE
"""

import logging
from dataclasses import dataclass
from enum import Enum

from bookingflow.errors import InvalidTransitionError
from bookingflow.schemas.modification_schema import TERMINAL_STATUSES, ModificationStatus

logger = logging.getLogger(__name__)


class ModificationTrigger(str, Enum):
    """Events that cause status transitions."""
    ADMIN_APPROVE = "admin_approve"
    ADMIN_REJECT = "admin_reject"
    FORWARD_TO_NANNY = "forward_to_nanny"
    NANNY_ACCEPT = "nanny_accept"
    NANNY_DECLINE = "nanny_decline"


@dataclass(frozen=True)
class Transition:
    """A single valid status transition."""
    from_state: ModificationStatus
    to_state: ModificationStatus
    trigger: ModificationTrigger


class ModificationStateMachine:
    """
    Deterministic state machine for a single modification request.

    Rebuilt from the stored status for every action, so it holds no state
    beyond the request it is guarding.
    """

    TRANSITIONS: list[Transition] = [
        # --- Admin review ---
        Transition(ModificationStatus.PENDING_ADMIN_REVIEW, ModificationStatus.ADMIN_APPROVED,
                   ModificationTrigger.ADMIN_APPROVE),
        Transition(ModificationStatus.PENDING_ADMIN_REVIEW, ModificationStatus.ADMIN_REJECTED,
                   ModificationTrigger.ADMIN_REJECT),

        # --- Handoff ---
        Transition(ModificationStatus.ADMIN_APPROVED, ModificationStatus.PENDING_NANNY_RESPONSE,
                   ModificationTrigger.FORWARD_TO_NANNY),

        # --- Nanny response ---
        Transition(ModificationStatus.PENDING_NANNY_RESPONSE, ModificationStatus.NANNY_ACCEPTED,
                   ModificationTrigger.NANNY_ACCEPT),
        Transition(ModificationStatus.PENDING_NANNY_RESPONSE, ModificationStatus.NANNY_DECLINED,
                   ModificationTrigger.NANNY_DECLINE),
    ]

    TRIGGER_TARGETS: dict[ModificationTrigger, ModificationStatus] = {
        t.trigger: t.to_state for t in TRANSITIONS
    }

    def __init__(self, initial: ModificationStatus = ModificationStatus.PENDING_ADMIN_REVIEW) -> None:
        self._current_state = initial
        self._trace: list[ModificationStatus] = [initial]

    @property
    def current_state(self) -> ModificationStatus:
        return self._current_state

    def transition(self, trigger: ModificationTrigger) -> ModificationStatus:
        """
        Execute a status transition.

        Args:
            trigger: The event triggering the transition.

        Returns:
            The new status.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        target = self.TRIGGER_TARGETS[trigger]
        if self.is_terminal():
            raise InvalidTransitionError(
                self._current_state.value, target.value,
                f"Modification request is already '{self._current_state.value}'; "
                f"it cannot move to '{target.value}'",
            )

        for t in self.TRANSITIONS:
            if t.from_state == self._current_state and t.trigger == trigger:
                old_state = self._current_state
                self._current_state = t.to_state
                self._trace.append(self._current_state)
                logger.debug(
                    "Modification transition: %s -> %s (trigger: %s)",
                    old_state.value, self._current_state.value, trigger.value,
                )
                return self._current_state

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            self._current_state.value, target.value,
            f"No valid transition from '{self._current_state.value}' "
            f"to '{target.value}'. Valid triggers: {valid}",
        )

    def get_valid_triggers(self) -> list[ModificationTrigger]:
        """Return all triggers valid from the current state."""
        return [t.trigger for t in self.TRANSITIONS if t.from_state == self._current_state]

    def get_state_trace(self) -> list[str]:
        """Return ordered list of status names visited by this machine."""
        return [state.value for state in self._trace]

    def is_terminal(self) -> bool:
        return self._current_state in TERMINAL_STATUSES
