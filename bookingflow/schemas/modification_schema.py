"""Modification request data models."""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from bookingflow.schemas.booking_schema import ServiceSelection


class ModificationType(str, Enum):
    SERVICE_ADDITION = "service_addition"
    SERVICE_REMOVAL = "service_removal"
    CANCELLATION = "cancellation"


class ModificationStatus(str, Enum):
    """Lifecycle status of a modification request."""
    PENDING_ADMIN_REVIEW = "pending_admin_review"
    ADMIN_APPROVED = "admin_approved"
    PENDING_NANNY_RESPONSE = "pending_nanny_response"
    NANNY_ACCEPTED = "nanny_accepted"
    NANNY_DECLINED = "nanny_declined"
    ADMIN_REJECTED = "admin_rejected"


TERMINAL_STATUSES = frozenset({
    ModificationStatus.NANNY_ACCEPTED,
    ModificationStatus.NANNY_DECLINED,
    ModificationStatus.ADMIN_REJECTED,
})


def _now() -> datetime:
    return datetime.now(timezone.utc)


class StatusChange(BaseModel):
    """Recorded history entry for a status the request entered."""
    status: ModificationStatus
    entered_at: datetime = Field(default_factory=_now)
    actor_id: Optional[str] = None
    trigger: Optional[str] = None


class ModificationRequest(BaseModel):
    """A proposed change to a confirmed or active booking."""
    modification_id: str = Field(default_factory=lambda: f"MOD-{uuid.uuid4().hex[:8].upper()}")
    booking_id: str
    client_id: str
    modification_type: ModificationType
    old_values: Optional[ServiceSelection] = None
    new_values: Optional[ServiceSelection] = None
    price_adjustment: Decimal = Decimal("0")
    status: ModificationStatus = ModificationStatus.PENDING_ADMIN_REVIEW
    client_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    nanny_notes: Optional[str] = None
    admin_reviewed_by: Optional[str] = None
    admin_reviewed_at: Optional[datetime] = None
    nanny_responded_by: Optional[str] = None
    nanny_responded_at: Optional[datetime] = None
    requested_at: datetime = Field(default_factory=_now)
    history: list[StatusChange] = Field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


# --- API payloads ---

class ModificationCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client_id: str = Field(alias="clientId")
    modification_type: ModificationType = Field(alias="modificationType")
    services: list[str] = Field(default_factory=list)
    client_notes: Optional[str] = Field(None, alias="clientNotes")


class AdminReview(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    admin_id: str = Field(alias="adminId")
    decision: Literal["approve", "reject"]
    admin_notes: Optional[str] = Field(None, alias="adminNotes")


class NannyResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    nanny_id: str = Field(alias="nannyId")
    decision: Literal["accept", "decline"]
    nanny_notes: Optional[str] = Field(None, alias="nannyNotes")
