"""Invoice line items and the long-term placement fee."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from bookingflow.pricing import rates
from bookingflow.schemas.booking_schema import Booking, BookingCategory, HomeSizeTier, LivingArrangement
from bookingflow.utils import round_currency

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvoiceLine:
    description: str
    amount: Decimal


def placement_fee(home_size: Union[HomeSizeTier, str, None], base_rate: Decimal) -> Decimal:
    """Half the monthly base rate for the two largest homes, a flat fee otherwise."""
    tier = HomeSizeTier.from_value(home_size) or HomeSizeTier.FAMILY_HUB
    if tier in rates.LARGEST_HOME_TIERS:
        return round_currency(base_rate * rates.PLACEMENT_FEE_PREMIUM_SHARE)
    return rates.PLACEMENT_FEE_FLAT


def _arrangement_label(arrangement: Optional[LivingArrangement]) -> str:
    return "Live-In" if arrangement == LivingArrangement.LIVE_IN else "Live-Out"


def invoice_lines(booking: Booking) -> list[InvoiceLine]:
    """Lines for the booking's first invoice."""
    if booking.is_long_term:
        fee = placement_fee(booking.home_size, booking.base_rate)
        logger.info("Placement fee for %s: %s", booking.booking_id, fee)
        return [InvoiceLine(f"{_arrangement_label(booking.living_arrangement)} Nanny Placement Fee", fee)]

    # Gap coverage is quoted without a service fee.
    if booking.category == BookingCategory.GAP_COVERAGE:
        return [InvoiceLine("Short-term Service Charges", booking.total_monthly_cost)]
    return [
        InvoiceLine("Short-term Service Charges", booking.total_monthly_cost - rates.BOOKING_FEE),
        InvoiceLine("Booking Fee", rates.BOOKING_FEE),
    ]
