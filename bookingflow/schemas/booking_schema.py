"""Booking data models."""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from bookingflow.utils import normalize_key


class BookingCategory(str, Enum):
    """Billing class of a booking."""
    EMERGENCY = "emergency"
    DATE_NIGHT = "date_night"
    DATE_DAY = "date_day"
    GAP_COVERAGE = "gap_coverage"
    SCHOOL_HOLIDAY = "school_holiday"
    SHORT_TERM = "short_term"
    LONG_TERM = "long_term"

    @classmethod
    def from_value(cls, value: Union[str, "BookingCategory", None]) -> Optional["BookingCategory"]:
        """Resolve a category name, accepting the legacy ``temporary_support`` tag."""
        if value is None or isinstance(value, cls):
            return value
        key = normalize_key(value)
        if key == "temporary_support":
            return cls.GAP_COVERAGE
        try:
            return cls(key)
        except ValueError:
            return None


class HomeSizeTier(str, Enum):
    """Five ordinal home-size tiers, smallest first."""
    POCKET_PALACE = "pocket_palace"
    FAMILY_HUB = "family_hub"
    GRAND_ESTATE = "grand_estate"
    MONUMENTAL_MANOR = "monumental_manor"
    EPIC_ESTATES = "epic_estates"

    @classmethod
    def from_value(cls, value: Union[str, "HomeSizeTier", None]) -> Optional["HomeSizeTier"]:
        if value is None or isinstance(value, cls):
            return value
        try:
            return cls(normalize_key(value))
        except ValueError:
            return None


class LivingArrangement(str, Enum):
    LIVE_IN = "live_in"
    LIVE_OUT = "live_out"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ServiceSelection(BaseModel):
    """Add-on services requested for a booking.

    ``driving_support`` is only offered on long-term placements.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    cooking: bool = False
    special_needs: bool = Field(False, alias="specialNeeds")
    pet_care: bool = Field(False, alias="petCare")
    light_housekeeping: bool = Field(False, alias="lightHousekeeping")
    driving_support: bool = Field(False, alias="drivingSupport")

    def enabled(self) -> list[str]:
        """Names of the services switched on, in declaration order."""
        return [name for name, value in self if value]

    def with_changes(self, add: tuple[str, ...] = (), remove: tuple[str, ...] = ()) -> "ServiceSelection":
        updates = {name: True for name in add}
        updates.update({name: False for name in remove})
        return self.model_copy(update=updates)


class BookingDraft(BaseModel):
    """Unconfirmed booking as entered by the client."""
    model_config = ConfigDict(populate_by_name=True)

    client_id: str = Field(alias="clientId")
    nanny_id: str = Field(alias="nannyId")
    duration_type: Optional[str] = Field(None, alias="durationType")
    booking_sub_type: Optional[str] = Field(None, alias="bookingSubType")
    total_hours: Optional[float] = Field(None, alias="totalHours")
    selected_dates: list[str] = Field(default_factory=list, alias="selectedDates")
    services: ServiceSelection = Field(default_factory=ServiceSelection)
    home_size: Optional[str] = Field(None, alias="homeSize")
    living_arrangement: Optional[str] = Field(None, alias="livingArrangement")
    children_count: int = Field(0, alias="childrenCount", ge=0)
    other_dependents: int = Field(0, alias="otherDependents", ge=0)
    context_hints: dict[str, str] = Field(default_factory=dict, alias="contextHints")


class Booking(BaseModel):
    """Persisted booking shared by one client and one nanny."""
    booking_id: str = Field(default_factory=lambda: f"BK-{uuid.uuid4().hex[:8].upper()}")
    client_id: str
    nanny_id: str
    category: BookingCategory
    status: BookingStatus = BookingStatus.CONFIRMED
    base_rate: Decimal = Decimal("0")
    total_monthly_cost: Decimal = Decimal("0")
    services: ServiceSelection = Field(default_factory=ServiceSelection)
    home_size: Optional[HomeSizeTier] = None
    living_arrangement: Optional[LivingArrangement] = None
    total_hours: Optional[Decimal] = None
    selected_dates: list[Union[datetime, date]] = Field(default_factory=list)
    children_count: int = 0
    other_dependents: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None

    @property
    def is_long_term(self) -> bool:
        return self.category == BookingCategory.LONG_TERM
