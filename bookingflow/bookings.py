"""Turns a priced booking draft into a confirmed booking."""

from decimal import Decimal
from typing import Optional

from bookingflow.logging_context import get_request_logger
from bookingflow.modifications.store import BookingStore
from bookingflow.pricing.classifier import BookingTypeClassifier
from bookingflow.pricing.engine import PricingRuleEngine
from bookingflow.pricing.long_term import price_long_term
from bookingflow.schemas.booking_schema import (
    Booking,
    BookingCategory,
    BookingDraft,
    BookingStatus,
    HomeSizeTier,
)
from bookingflow.utils import parse_booking_date, to_decimal

logger = get_request_logger(__name__)


class BookingService:
    """Classifies, prices and stores new bookings."""

    def __init__(
        self,
        store: BookingStore,
        engine: Optional[PricingRuleEngine] = None,
        classifier: Optional[BookingTypeClassifier] = None,
    ) -> None:
        self.store = store
        self.engine = engine or PricingRuleEngine()
        self.classifier = classifier or BookingTypeClassifier()

    def confirm(self, draft: BookingDraft) -> Booking:
        """Price the draft and persist it as a confirmed booking.

        Raises:
            ValidationError: If the draft cannot be priced.
        """
        category = self.classifier.classify(
            duration_type=draft.duration_type,
            booking_sub_type=draft.booking_sub_type,
            living_arrangement=draft.living_arrangement,
            home_size=draft.home_size,
            context_hints=draft.context_hints,
        )

        if category == BookingCategory.LONG_TERM:
            quote = price_long_term(
                home_size=draft.home_size,
                living_arrangement=draft.living_arrangement,
                services=draft.services,
                children_count=draft.children_count,
                other_dependents=draft.other_dependents,
            )
            booking = Booking(
                client_id=draft.client_id,
                nanny_id=draft.nanny_id,
                category=category,
                status=BookingStatus.CONFIRMED,
                base_rate=quote.base_rate.amount,
                total_monthly_cost=quote.total_monthly,
                services=draft.services,
                home_size=quote.home_size,
                living_arrangement=quote.living_arrangement,
                children_count=draft.children_count,
                other_dependents=draft.other_dependents,
            )
        else:
            breakdown = self.engine.price(
                category,
                total_hours=draft.total_hours,
                selected_dates=draft.selected_dates,
                services=draft.services,
                home_size=draft.home_size,
            )
            booking = Booking(
                client_id=draft.client_id,
                nanny_id=draft.nanny_id,
                category=category,
                status=BookingStatus.CONFIRMED,
                base_rate=breakdown.base_unit_rate.amount,
                total_monthly_cost=breakdown.total,
                services=draft.services,
                home_size=HomeSizeTier.from_value(draft.home_size),
                total_hours=to_decimal(draft.total_hours) if draft.total_hours is not None else None,
                selected_dates=[parse_booking_date(d) for d in draft.selected_dates],
            )

        logger.info(
            "Confirmed %s booking for client %s at %s",
            category.value, draft.client_id, booking.total_monthly_cost,
        )
        return self.store.add_booking(booking)


def describe_cost(booking: Booking, currency_symbol: str = "R") -> str:
    suffix = "/month" if booking.is_long_term else ""
    return f"{currency_symbol}{booking.total_monthly_cost.quantize(Decimal('0.01'))}{suffix}"
