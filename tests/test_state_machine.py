"""Tests for the modification request state machine."""

import pytest

from bookingflow.errors import InvalidTransitionError
from bookingflow.modifications.state_machine import ModificationStateMachine, ModificationTrigger
from bookingflow.schemas.modification_schema import ModificationStatus


def _to_nanny(state_machine):
    state_machine.transition(ModificationTrigger.ADMIN_APPROVE)
    state_machine.transition(ModificationTrigger.FORWARD_TO_NANNY)


class TestInitialState:
    def test_starts_pending_admin_review(self, state_machine):
        assert state_machine.current_state == ModificationStatus.PENDING_ADMIN_REVIEW

    def test_initial_trace_has_one_entry(self, state_machine):
        assert state_machine.get_state_trace() == ["pending_admin_review"]

    def test_not_terminal_at_start(self, state_machine):
        assert not state_machine.is_terminal()

    def test_valid_triggers_from_start(self, state_machine):
        assert state_machine.get_valid_triggers() == [
            ModificationTrigger.ADMIN_APPROVE,
            ModificationTrigger.ADMIN_REJECT,
        ]


class TestAdminReview:
    def test_approve(self, state_machine):
        new = state_machine.transition(ModificationTrigger.ADMIN_APPROVE)
        assert new == ModificationStatus.ADMIN_APPROVED
        assert not state_machine.is_terminal()

    def test_reject_is_terminal(self, state_machine):
        new = state_machine.transition(ModificationTrigger.ADMIN_REJECT)
        assert new == ModificationStatus.ADMIN_REJECTED
        assert state_machine.is_terminal()

    def test_forward_requires_approval(self, state_machine):
        with pytest.raises(InvalidTransitionError):
            state_machine.transition(ModificationTrigger.FORWARD_TO_NANNY)

    def test_approved_can_only_forward(self, state_machine):
        state_machine.transition(ModificationTrigger.ADMIN_APPROVE)
        assert state_machine.get_valid_triggers() == [ModificationTrigger.FORWARD_TO_NANNY]


class TestNannyResponse:
    def test_accept(self, state_machine):
        _to_nanny(state_machine)
        new = state_machine.transition(ModificationTrigger.NANNY_ACCEPT)
        assert new == ModificationStatus.NANNY_ACCEPTED
        assert state_machine.is_terminal()

    def test_decline(self, state_machine):
        _to_nanny(state_machine)
        new = state_machine.transition(ModificationTrigger.NANNY_DECLINE)
        assert new == ModificationStatus.NANNY_DECLINED
        assert state_machine.is_terminal()

    def test_nanny_cannot_skip_admin(self, state_machine):
        with pytest.raises(InvalidTransitionError) as exc_info:
            state_machine.transition(ModificationTrigger.NANNY_ACCEPT)
        assert exc_info.value.current_state == "pending_admin_review"
        assert exc_info.value.target_state == "nanny_accepted"

    def test_nanny_cannot_act_before_forwarding(self, state_machine):
        state_machine.transition(ModificationTrigger.ADMIN_APPROVE)
        with pytest.raises(InvalidTransitionError):
            state_machine.transition(ModificationTrigger.NANNY_DECLINE)

    def test_failed_transition_keeps_state(self, state_machine):
        with pytest.raises(InvalidTransitionError):
            state_machine.transition(ModificationTrigger.NANNY_ACCEPT)
        assert state_machine.current_state == ModificationStatus.PENDING_ADMIN_REVIEW
        assert len(state_machine.get_state_trace()) == 1


class TestTerminalStates:
    @pytest.mark.parametrize("terminal", [
        ModificationStatus.ADMIN_REJECTED,
        ModificationStatus.NANNY_ACCEPTED,
        ModificationStatus.NANNY_DECLINED,
    ])
    @pytest.mark.parametrize("trigger", list(ModificationTrigger))
    def test_no_transition_out_of_terminal(self, terminal, trigger):
        machine = ModificationStateMachine(terminal)
        with pytest.raises(InvalidTransitionError, match="already"):
            machine.transition(trigger)
        assert machine.current_state == terminal

    def test_rejected_cannot_be_approved(self, state_machine):
        state_machine.transition(ModificationTrigger.ADMIN_REJECT)
        with pytest.raises(InvalidTransitionError) as exc_info:
            state_machine.transition(ModificationTrigger.ADMIN_APPROVE)
        assert exc_info.value.current_state == "admin_rejected"
        assert exc_info.value.target_state == "admin_approved"


class TestTrace:
    def test_full_path_trace(self, state_machine):
        _to_nanny(state_machine)
        state_machine.transition(ModificationTrigger.NANNY_ACCEPT)
        assert state_machine.get_state_trace() == [
            "pending_admin_review",
            "admin_approved",
            "pending_nanny_response",
            "nanny_accepted",
        ]

    def test_machine_rebuilt_from_stored_status(self):
        machine = ModificationStateMachine(ModificationStatus.PENDING_NANNY_RESPONSE)
        assert machine.get_valid_triggers() == [
            ModificationTrigger.NANNY_ACCEPT,
            ModificationTrigger.NANNY_DECLINE,
        ]
