"""Integration tests: classifier + pricing + store + approval workflow together."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from bookingflow.bookings import describe_cost
from bookingflow.errors import ValidationError
from bookingflow.pricing.invoice import invoice_lines
from bookingflow.schemas.booking_schema import (
    BookingCategory,
    BookingDraft,
    BookingStatus,
    HomeSizeTier,
    ServiceSelection,
)
from bookingflow.schemas.modification_schema import ModificationStatus

from tests.conftest import ADMIN_ID, CLIENT_ID, NANNY_ID, WEEK_OF_MARCH


def _draft(**fields) -> BookingDraft:
    return BookingDraft(client_id=CLIENT_ID, nanny_id=NANNY_ID, **fields)


class TestConfirmBooking:
    def test_long_term_from_structure(self, booking_service, store):
        booking = booking_service.confirm(_draft(
            living_arrangement="live_in", home_size="grand_estate",
            services=ServiceSelection(cooking=True), children_count=4,
        ))
        assert booking.category == BookingCategory.LONG_TERM
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.base_rate == Decimal(7000)
        assert booking.total_monthly_cost == Decimal(7000 + 1500 + 500)
        assert store.get_booking(booking.booking_id) == booking

    def test_short_term_from_sub_type(self, booking_service):
        booking = booking_service.confirm(_draft(
            booking_sub_type="date_day", total_hours=6,
            selected_dates=["2025-11-20T22:00:00.000Z"],
        ))
        assert booking.category == BookingCategory.DATE_DAY
        assert booking.base_rate == Decimal(55)
        assert booking.total_monthly_cost == Decimal("365.00")
        assert booking.total_hours == Decimal(6)
        assert booking.selected_dates == [datetime(2025, 11, 20, 22, tzinfo=timezone.utc)]

    def test_gap_coverage(self, booking_service):
        booking = booking_service.confirm(_draft(
            booking_sub_type="temporary_support", selected_dates=WEEK_OF_MARCH,
        ))
        assert booking.category == BookingCategory.GAP_COVERAGE
        assert booking.total_monthly_cost == Decimal("2170.00")
        assert booking.selected_dates[0] == date(2025, 3, 3)

    def test_unpriced_category_rejected(self, booking_service, store):
        with pytest.raises(ValidationError, match="not priced"):
            booking_service.confirm(_draft(duration_type="short_term", total_hours=4))

    def test_minimum_hours_enforced_on_confirm(self, booking_service):
        with pytest.raises(ValidationError, match="minimum of 5 hours"):
            booking_service.confirm(_draft(booking_sub_type="emergency", total_hours=2))

    def test_describe_cost(self, booking_service):
        long_term = booking_service.confirm(_draft(duration_type="long_term", home_size="family_hub"))
        short = booking_service.confirm(_draft(booking_sub_type="date_night", total_hours=3))
        assert describe_cost(long_term) == "R6800.00/month"
        assert describe_cost(short, "ZAR ") == "ZAR 395.00"


class TestEndToEnd:
    def test_quote_confirm_modify_invoice(self, booking_service, coordinator, store, notifier):
        booking = booking_service.confirm(_draft(
            duration_type="long_term", home_size="monumental_manor", living_arrangement="live_out",
        ))
        assert invoice_lines(booking)[0].amount == Decimal(4500)

        request = coordinator.submit(
            booking.booking_id, CLIENT_ID, "service_addition", ["special_needs", "driving_support"],
        )
        # Driving is bundled with the largest homes.
        assert request.price_adjustment == Decimal(1500)

        coordinator.approve(request.modification_id, ADMIN_ID, admin_notes="Fine")
        coordinator.nanny_respond(request.modification_id, NANNY_ID, accept=True)

        updated = store.get_booking(booking.booking_id)
        assert updated.total_monthly_cost == Decimal(10500)
        assert updated.services == ServiceSelection(special_needs=True, driving_support=True)
        assert updated.base_rate == Decimal(9000)
        assert [n.recipient_id for n in notifier.sent] == ["admins", NANNY_ID, CLIENT_ID]

    def test_short_term_removal(self, booking_service, coordinator, store):
        booking = booking_service.confirm(_draft(
            booking_sub_type="date_day", total_hours=16,
            selected_dates=["2025-03-03", "2025-03-04"],
            services=ServiceSelection(light_housekeeping=True), home_size="pocket_palace",
        ))
        assert booking.home_size == HomeSizeTier.POCKET_PALACE
        assert booking.total_monthly_cost == Decimal(40 * 16 + 160 + 35)

        request = coordinator.submit(
            booking.booking_id, CLIENT_ID, "service_removal", ["light_housekeeping"],
        )
        assert request.price_adjustment == Decimal("-160.00")
        coordinator.approve(request.modification_id, ADMIN_ID)
        coordinator.nanny_respond(request.modification_id, NANNY_ID, accept=True)
        assert store.get_booking(booking.booking_id).total_monthly_cost == Decimal(40 * 16 + 35)

    def test_declined_then_resubmitted(self, booking_service, coordinator, store):
        booking = booking_service.confirm(_draft(duration_type="long_term", home_size="family_hub"))
        first = coordinator.submit(booking.booking_id, CLIENT_ID, "service_addition", ["cooking"])
        coordinator.approve(first.modification_id, ADMIN_ID)
        coordinator.nanny_respond(first.modification_id, NANNY_ID, accept=False, nanny_notes="No")

        second = coordinator.submit(booking.booking_id, CLIENT_ID, "service_addition", ["cooking"])
        assert second.status == ModificationStatus.PENDING_ADMIN_REVIEW
        assert store.get_booking(booking.booking_id).total_monthly_cost == Decimal(6800)
        assert len(coordinator.history_for(booking.booking_id)) == 2
