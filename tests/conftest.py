"""Shared test fixtures and helpers."""

from decimal import Decimal
from typing import Optional

import pytest

from bookingflow.bookings import BookingService
from bookingflow.modifications.coordinator import ModificationApprovalCoordinator
from bookingflow.modifications.notifications import RecordingNotifier
from bookingflow.modifications.state_machine import ModificationStateMachine
from bookingflow.modifications.store import BookingStore
from bookingflow.pricing.classifier import BookingTypeClassifier
from bookingflow.pricing.engine import PricingRuleEngine
from bookingflow.schemas.booking_schema import (
    Booking,
    BookingCategory,
    BookingStatus,
    HomeSizeTier,
    LivingArrangement,
    ServiceSelection,
)

CLIENT_ID = "client-1"
NANNY_ID = "nanny-1"
ADMIN_ID = "admin-1"

# 2025-03-03 is a Monday.
WEEK_OF_MARCH = [f"2025-03-{day:02d}" for day in range(3, 10)]
WEEKDAYS_OF_MARCH = WEEK_OF_MARCH[:5]


@pytest.fixture
def engine():
    return PricingRuleEngine()


@pytest.fixture
def classifier():
    return BookingTypeClassifier()


@pytest.fixture
def state_machine():
    return ModificationStateMachine()


@pytest.fixture
def store():
    return BookingStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def coordinator(store, engine, notifier):
    return ModificationApprovalCoordinator(store, engine, notifier)


@pytest.fixture
def booking_service(store, engine, classifier):
    return BookingService(store, engine, classifier)


def make_long_term_booking(
    home_size: HomeSizeTier = HomeSizeTier.FAMILY_HUB,
    services: Optional[ServiceSelection] = None,
    status: BookingStatus = BookingStatus.ACTIVE,
    total: str = "6800",
) -> Booking:
    """Helper to create a long-term booking with sensible defaults."""
    return Booking(
        client_id=CLIENT_ID,
        nanny_id=NANNY_ID,
        category=BookingCategory.LONG_TERM,
        status=status,
        base_rate=Decimal(total),
        total_monthly_cost=Decimal(total),
        services=services or ServiceSelection(),
        home_size=home_size,
        living_arrangement=LivingArrangement.LIVE_OUT,
    )


@pytest.fixture
def long_term_booking(store):
    return store.add_booking(make_long_term_booking())
