"""Price difference between two service selections on an existing booking."""

import logging
from decimal import Decimal

from bookingflow.errors import ValidationError
from bookingflow.pricing import rates
from bookingflow.pricing.engine import PricingRuleEngine
from bookingflow.pricing.long_term import monthly_service_cost
from bookingflow.schemas.booking_schema import Booking, ServiceSelection

logger = logging.getLogger(__name__)


def service_change_delta(
    booking: Booking,
    old_services: ServiceSelection,
    new_services: ServiceSelection,
    engine: PricingRuleEngine,
) -> Decimal:
    """
    Signed change to the booking's recurring cost when its services change.

    Long-term bookings compare monthly add-on totals. Short-term bookings
    are re-priced with the booking's own hours, dates and home size, so the
    difference follows exactly the quote rules.
    """
    if booking.is_long_term:
        delta = (
            monthly_service_cost(new_services, booking.home_size)
            - monthly_service_cost(old_services, booking.home_size)
        )
    elif booking.category in rates.PRICED_SHORT_TERM_CATEGORIES:
        common = dict(
            total_hours=booking.total_hours,
            selected_dates=booking.selected_dates,
            home_size=booking.home_size,
        )
        new_total = engine.price(booking.category, services=new_services, **common).total
        old_total = engine.price(booking.category, services=old_services, **common).total
        delta = new_total - old_total
    else:
        raise ValidationError(
            f"Cannot price service changes for '{booking.category.value}' bookings"
        )

    logger.debug("Service change on %s priced at %s", booking.booking_id, delta)
    return delta
