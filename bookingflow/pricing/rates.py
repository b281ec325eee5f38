"""
Static tariff table for every billable unit on the platform.

Rates carry their unit explicitly so daily add-ons (cooking, light
housekeeping) can never be mistaken for hourly ones. All amounts are in
rand.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from bookingflow.schemas.booking_schema import BookingCategory, HomeSizeTier, LivingArrangement


class RateUnit(str, Enum):
    HOUR = "hour"
    DAY = "day"
    MONTH = "month"


@dataclass(frozen=True)
class Rate:
    """A price per unit, e.g. ``Rate(RateUnit.DAY, Decimal("100"))``."""
    unit: RateUnit
    amount: Decimal

    @classmethod
    def hourly(cls, amount: int) -> "Rate":
        return cls(RateUnit.HOUR, Decimal(amount))

    @classmethod
    def daily(cls, amount: int) -> "Rate":
        return cls(RateUnit.DAY, Decimal(amount))

    @classmethod
    def monthly(cls, amount: int) -> "Rate":
        return cls(RateUnit.MONTH, Decimal(amount))


HOURLY_CATEGORIES = frozenset({
    BookingCategory.EMERGENCY,
    BookingCategory.DATE_NIGHT,
    BookingCategory.DATE_DAY,
})
PRICED_SHORT_TERM_CATEGORIES = HOURLY_CATEGORIES | {BookingCategory.GAP_COVERAGE}

# --- Hourly categories ---
HOURLY_BASE_RATES: dict[BookingCategory, Rate] = {
    BookingCategory.EMERGENCY: Rate.hourly(80),
    BookingCategory.DATE_NIGHT: Rate.hourly(120),
    BookingCategory.DATE_DAY: Rate.hourly(40),
}
DATE_DAY_WEEKEND_RATE = Rate.hourly(55)

MINIMUM_HOURS: dict[BookingCategory, Decimal] = {
    BookingCategory.EMERGENCY: Decimal(5),
    BookingCategory.DATE_NIGHT: Decimal(3),
}
MAX_BILLABLE_HOURS = Decimal(720)  # 30 days x 24h
SERVICE_FEE = Decimal(35)

# Weekend detection for date_day reads the weekday in SAST.
LOCAL_UTC_OFFSET_HOURS = 2
WEEKEND_WEEKDAYS = frozenset({4, 5, 6})  # Friday, Saturday, Sunday

# --- Gap coverage (daily) ---
GAP_COVERAGE_WEEKDAY_RATE = Rate.daily(280)
GAP_COVERAGE_WEEKEND_RATE = Rate.daily(350)
GAP_COVERAGE_MIN_DAYS = 5

# --- Short-term add-ons ---
COOKING_RATE = Rate.daily(100)
SPECIAL_NEEDS_HOURLY = Decimal(0)
PET_CARE_HOURLY = Decimal(0)

HOUSEKEEPING_DAILY_RATES: dict[HomeSizeTier, Rate] = {
    HomeSizeTier.POCKET_PALACE: Rate.daily(80),
    HomeSizeTier.FAMILY_HUB: Rate.daily(100),
    HomeSizeTier.GRAND_ESTATE: Rate.daily(120),
    HomeSizeTier.MONUMENTAL_MANOR: Rate.daily(140),
    HomeSizeTier.EPIC_ESTATES: Rate.daily(300),
}
HOUSEKEEPING_FALLBACK_TIER = HomeSizeTier.FAMILY_HUB

LABEL_COOKING = "Cooking/Food-prep (daily)"
LABEL_SPECIAL_NEEDS = "Diverse Ability Support"
LABEL_PET_CARE = "Pet-Savvy (Free)"
LABEL_HOUSEKEEPING = "Light Housekeeping (cleaning, laundry, ironing)"

# --- Long-term (monthly) ---
LONG_TERM_BASE_RATES: dict[HomeSizeTier, dict[LivingArrangement, Rate]] = {
    HomeSizeTier.POCKET_PALACE: {
        LivingArrangement.LIVE_IN: Rate.monthly(4500),
        LivingArrangement.LIVE_OUT: Rate.monthly(4800),
    },
    HomeSizeTier.FAMILY_HUB: {
        LivingArrangement.LIVE_IN: Rate.monthly(6000),
        LivingArrangement.LIVE_OUT: Rate.monthly(6800),
    },
    HomeSizeTier.GRAND_ESTATE: {
        LivingArrangement.LIVE_IN: Rate.monthly(7000),
        LivingArrangement.LIVE_OUT: Rate.monthly(7800),
    },
    HomeSizeTier.MONUMENTAL_MANOR: {
        LivingArrangement.LIVE_IN: Rate.monthly(8000),
        LivingArrangement.LIVE_OUT: Rate.monthly(9000),
    },
    HomeSizeTier.EPIC_ESTATES: {
        LivingArrangement.LIVE_IN: Rate.monthly(10000),
        LivingArrangement.LIVE_OUT: Rate.monthly(11000),
    },
}
LONG_TERM_FALLBACK_TIER = HomeSizeTier.FAMILY_HUB

LONG_TERM_ADDON_RATES: dict[str, Rate] = {
    "special_needs": Rate.monthly(1500),
    "cooking": Rate.monthly(1500),
    "driving_support": Rate.monthly(1500),
}
LONG_TERM_ADDON_LABELS: dict[str, str] = {
    "special_needs": "Diverse Ability Support",
    "cooking": "Cooking",
    "driving_support": "Driving",
}
# Cooking and driving come bundled with the two largest homes.
LONG_TERM_INCLUDED_ADDONS = frozenset({"cooking", "driving_support"})
LARGEST_HOME_TIERS = frozenset({HomeSizeTier.MONUMENTAL_MANOR, HomeSizeTier.EPIC_ESTATES})

CHILD_SURCHARGE_THRESHOLD = 3
ADULT_OCCUPANT_SURCHARGE_THRESHOLD = 2
OCCUPANT_SURCHARGE = Rate.monthly(500)

# --- Placement fee ---
PLACEMENT_FEE_FLAT = Decimal(2500)
PLACEMENT_FEE_PREMIUM_SHARE = Decimal("0.5")
BOOKING_FEE = SERVICE_FEE
