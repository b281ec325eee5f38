"""Translate between the pricing endpoint's JSON shape and the pure engine."""

from datetime import datetime

from bookingflow.pricing.engine import PriceBreakdown, PricingRuleEngine
from bookingflow.schemas.booking_schema import BookingCategory
from bookingflow.schemas.pricing_schema import (
    DailyBreakdownEntry,
    PricingRequest,
    PricingResponse,
    ServiceCharge,
)


def to_response(breakdown: PriceBreakdown) -> PricingResponse:
    """Render a breakdown in the response shape the booking UI expects."""
    daily = None
    if breakdown.category == BookingCategory.GAP_COVERAGE:
        daily = [
            DailyBreakdownEntry(
                date=d.day.isoformat().replace("+00:00", "Z") if isinstance(d.day, datetime) else d.day.isoformat(),
                rate=float(d.rate),
                is_weekend=d.is_weekend,
            )
            for d in breakdown.daily_breakdown
        ]
    return PricingResponse(
        base_hourly_rate=float(breakdown.base_unit_rate.amount),
        services=[
            ServiceCharge(
                name=item.label,
                unit=item.rate.unit.value,
                rate=float(item.rate.amount),
                total_cost=float(item.total_amount),
            )
            for item in breakdown.line_items
        ],
        subtotal=float(breakdown.subtotal),
        service_fee=float(breakdown.service_fee),
        emergency_surcharge=float(breakdown.surcharge) if breakdown.surcharge > 0 else None,
        total=float(breakdown.total),
        effective_hourly_rate=float(breakdown.effective_unit_rate),
        daily_breakdown=daily,
    )


def quote(request: PricingRequest, engine: PricingRuleEngine) -> PricingResponse:
    """Price a quote request. ``totalDays`` is informational; days come from ``selectedDates``."""
    breakdown = engine.price(
        request.booking_type,
        total_hours=request.total_hours,
        selected_dates=request.selected_dates,
        services=request.services,
        home_size=request.home_size,
    )
    return to_response(breakdown)
