from bookingflow.modifications.coordinator import ModificationApprovalCoordinator
from bookingflow.modifications.state_machine import ModificationStateMachine, ModificationTrigger
from bookingflow.modifications.store import BookingStore

__all__ = [
    "ModificationApprovalCoordinator",
    "ModificationStateMachine",
    "ModificationTrigger",
    "BookingStore",
]
