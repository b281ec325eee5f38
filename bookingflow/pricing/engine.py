"""
Short-term pricing rule engine.

Prices emergency, date night, date day and gap coverage bookings from the
booking category, billable hours or selected dates, requested add-on
services and home size. The engine is a pure function of its inputs: the
only calendar logic is the weekend check, which reads the supplied dates
and never the clock.

Usage:
    engine = PricingRuleEngine()
    quote = engine.price("date_night", total_hours=4, services=ServiceSelection(cooking=True))
    assert quote.total == quote.subtotal + quote.service_fee + quote.surcharge
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from functools import lru_cache
from typing import Iterable, Optional, Union

from bookingflow.errors import ValidationError
from bookingflow.pricing import rates
from bookingflow.pricing.rates import Rate, RateUnit
from bookingflow.schemas.booking_schema import BookingCategory, HomeSizeTier, ServiceSelection
from bookingflow.utils import Number, parse_booking_date, round_currency, to_decimal

logger = logging.getLogger(__name__)

BookingDate = Union[date, datetime]
ZERO = Decimal("0")


@dataclass(frozen=True)
class LineItem:
    """One add-on charge. ``rate.unit`` says whether it was billed per hour or per day."""
    label: str
    rate: Rate
    total_amount: Decimal


@dataclass(frozen=True)
class DailyRate:
    """Per-day base charge for gap coverage."""
    day: BookingDate
    rate: Decimal
    is_weekend: bool


@dataclass(frozen=True)
class PriceBreakdown:
    """Itemized quote. ``total == subtotal + service_fee + surcharge``.

    ``line_items`` holds the add-on services only. The base charge is not a
    line item: for hourly categories it is ``base_unit_rate.amount *
    billable_units``, for gap coverage it is the sum of ``daily_breakdown``.
    ``subtotal`` is that base charge plus every line item total.
    """
    category: BookingCategory
    base_unit_rate: Rate
    line_items: tuple[LineItem, ...]
    subtotal: Decimal
    service_fee: Decimal
    surcharge: Decimal
    total: Decimal
    effective_unit_rate: Decimal
    billable_units: Decimal
    daily_breakdown: tuple[DailyRate, ...] = ()


@dataclass(frozen=True)
class PricingInput:
    """Normalized, hashable engine input. Built by ``PricingRuleEngine.price``."""
    category: Optional[BookingCategory]
    raw_category: Optional[str]
    total_hours: Optional[Decimal]
    selected_dates: tuple[BookingDate, ...]
    services: ServiceSelection
    home_size: Optional[str]
    # repr of hours that could not be read as a number
    invalid_hours: Optional[str] = None


def _as_utc(moment: datetime) -> datetime:
    return moment.astimezone(timezone.utc) if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


def calendar_weekday(day: BookingDate) -> int:
    """Weekday (Monday=0) of the calendar date; datetimes are read in UTC."""
    if isinstance(day, datetime):
        return _as_utc(day).weekday()
    return day.weekday()


def local_weekday(day: BookingDate) -> int:
    """Weekday (Monday=0) after shifting the UTC instant into SAST."""
    if isinstance(day, datetime):
        moment = _as_utc(day)
    else:
        moment = datetime.combine(day, time(), tzinfo=timezone.utc)
    return (moment + timedelta(hours=rates.LOCAL_UTC_OFFSET_HOURS)).weekday()


def housekeeping_rate(home_size: Optional[str]) -> Rate:
    """Daily light-housekeeping rate for a home tier.

    Unknown or missing tiers fall back to the mid-tier rate with a warning
    because callers expect a price rather than a rejection.
    """
    tier = HomeSizeTier.from_value(home_size)
    if tier is None:
        logger.warning(
            "Unknown home size %r, using %s housekeeping rate",
            home_size, rates.HOUSEKEEPING_FALLBACK_TIER.value,
        )
        # A missing tier is priced at the mid-tier rate rather than dropped.
        tier = rates.HOUSEKEEPING_FALLBACK_TIER
    return rates.HOUSEKEEPING_DAILY_RATES[tier]


class PricingRuleEngine:
    """
    Deterministic short-term quote calculator.

    Results are memoized per engine instance by input value, so repeated
    identical requests return the very same ``PriceBreakdown`` object.
    """

    def __init__(self, cache_size: int = 512) -> None:
        self._cached_compute = lru_cache(maxsize=cache_size)(self._compute)

    def price(
        self,
        category: Union[BookingCategory, str, None],
        total_hours: Optional[Number] = None,
        selected_dates: Iterable[Union[str, BookingDate]] = (),
        services: Optional[ServiceSelection] = None,
        home_size: Union[HomeSizeTier, str, None] = None,
    ) -> PriceBreakdown:
        """
        Price a short-term booking.

        Args:
            category: Booking category (``temporary_support`` is accepted for gap coverage).
            total_hours: Billable hours; required for every category except gap coverage.
            selected_dates: Booked dates, as ``date``/``datetime`` or ISO strings.
            services: Requested add-on services.
            home_size: Home size tier, needed to price light housekeeping.

        Returns:
            An immutable, itemized ``PriceBreakdown``.

        Raises:
            ValidationError: If the input breaks a pricing rule.
        """
        hours, invalid_hours = self._parse_hours(total_hours)
        request = PricingInput(
            category=BookingCategory.from_value(category) if category else None,
            raw_category=str(category.value if isinstance(category, BookingCategory) else category)
            if category else None,
            total_hours=hours,
            invalid_hours=invalid_hours,
            selected_dates=self._parse_dates(selected_dates),
            services=services or ServiceSelection(),
            home_size=home_size.value if isinstance(home_size, HomeSizeTier) else home_size,
        )
        return self._cached_compute(request)

    def cache_info(self):
        return self._cached_compute.cache_info()

    # ------------------------------------------------------------------
    # Input normalization
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_hours(total_hours: Optional[Number]) -> tuple[Optional[Decimal], Optional[str]]:
        """Split raw hours into a Decimal or the repr of an unreadable value.

        Rejection is deferred to validation so that gap coverage keeps
        ignoring hours, and the cache key never holds the raw value
        (``True`` would otherwise share a cache entry with ``1``).
        """
        if total_hours is None:
            return None, None
        try:
            return to_decimal(total_hours), None
        except ValueError:
            return None, repr(total_hours)

    @staticmethod
    def _parse_dates(selected_dates: Iterable[Union[str, BookingDate]]) -> tuple[BookingDate, ...]:
        parsed = []
        for value in selected_dates or ():
            try:
                parsed.append(parse_booking_date(value))
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid booking date: {value!r}") from None
        return tuple(parsed)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_category(request: PricingInput) -> BookingCategory:
        if request.raw_category is None:
            raise ValidationError("Invalid booking type")
        category = request.category
        if category is None:
            raise ValidationError(f"Unknown booking type: {request.raw_category!r}")
        if category not in rates.PRICED_SHORT_TERM_CATEGORIES:
            raise ValidationError(
                f"Booking type '{category.value}' is not priced by the short-term engine"
            )
        return category

    @staticmethod
    def _validate_hours(category: BookingCategory, request: PricingInput) -> Decimal:
        if request.invalid_hours is not None:
            raise ValidationError(f"Invalid hours for hourly booking: {request.invalid_hours}")
        total_hours = request.total_hours
        if total_hours is None or total_hours <= 0:
            raise ValidationError("Invalid hours for hourly booking")

        if total_hours > rates.MAX_BILLABLE_HOURS:
            logger.warning(
                "Total hours %s exceeds the billable limit, capping at %s",
                total_hours, rates.MAX_BILLABLE_HOURS,
            )
            total_hours = rates.MAX_BILLABLE_HOURS

        minimum = rates.MINIMUM_HOURS.get(category)
        if minimum is not None and total_hours < minimum:
            label = category.value.replace("_", " ").capitalize()
            raise ValidationError(f"{label} bookings require a minimum of {minimum} hours")
        return total_hours

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    def _compute(self, request: PricingInput) -> PriceBreakdown:
        category = self._validate_category(request)
        if category == BookingCategory.GAP_COVERAGE:
            if len(request.selected_dates) < rates.GAP_COVERAGE_MIN_DAYS:
                raise ValidationError(
                    "Gap Coverage requires a minimum of "
                    f"{rates.GAP_COVERAGE_MIN_DAYS} consecutive days"
                )
            return self._price_gap_coverage(request)

        hours = self._validate_hours(category, request)
        return self._price_hourly(category, hours, request)

    @staticmethod
    def _hourly_base_rate(category: BookingCategory, dates: tuple[BookingDate, ...]) -> Rate:
        if category != BookingCategory.DATE_DAY:
            return rates.HOURLY_BASE_RATES[category]
        is_weekend = any(local_weekday(day) in rates.WEEKEND_WEEKDAYS for day in dates)
        return rates.DATE_DAY_WEEKEND_RATE if is_weekend else rates.HOURLY_BASE_RATES[category]

    @staticmethod
    def _add_on_items(
        services: ServiceSelection,
        home_size: Optional[str],
        date_count: int,
        unit: RateUnit,
        units: Decimal,
    ) -> list[LineItem]:
        """Build add-on line items in display order.

        Free services are billed in the booking's own unit; cooking and
        housekeeping are always per day. Cooking bills at least one day,
        housekeeping is dropped when no dates were booked.
        """
        items: list[LineItem] = []
        if services.cooking:
            items.append(LineItem(
                rates.LABEL_COOKING,
                rates.COOKING_RATE,
                round_currency(rates.COOKING_RATE.amount * (date_count or 1)),
            ))
        if services.special_needs:
            rate = Rate(unit, rates.SPECIAL_NEEDS_HOURLY)
            items.append(LineItem(rates.LABEL_SPECIAL_NEEDS, rate, round_currency(rate.amount * units)))
        if services.pet_care:
            rate = Rate(unit, rates.PET_CARE_HOURLY)
            items.append(LineItem(rates.LABEL_PET_CARE, rate, round_currency(rate.amount * units)))
        if services.light_housekeeping and date_count:
            rate = housekeeping_rate(home_size)
            logger.debug(
                "Light housekeeping for %s: %s/day x %d days", home_size, rate.amount, date_count,
            )
            items.append(LineItem(
                rates.LABEL_HOUSEKEEPING, rate, round_currency(rate.amount * date_count),
            ))
        return items

    def _price_hourly(
        self, category: BookingCategory, hours: Decimal, request: PricingInput,
    ) -> PriceBreakdown:
        base = self._hourly_base_rate(category, request.selected_dates)
        items = self._add_on_items(
            request.services, request.home_size, len(request.selected_dates), RateUnit.HOUR, hours,
        )

        hourly_addons = sum((i.rate.amount for i in items if i.rate.unit == RateUnit.HOUR), ZERO)
        daily_addons = sum((i.total_amount for i in items if i.rate.unit == RateUnit.DAY), ZERO)

        effective_rate = base.amount + hourly_addons
        subtotal = round_currency(effective_rate * hours + daily_addons)
        service_fee = round_currency(rates.SERVICE_FEE)
        surcharge = round_currency(ZERO)
        total = subtotal + service_fee + surcharge

        logger.debug(
            "Priced %s: %s h x %s/h + %s daily add-ons = %s (total %s)",
            category.value, hours, effective_rate, daily_addons, subtotal, total,
        )
        return PriceBreakdown(
            category=category,
            base_unit_rate=base,
            line_items=tuple(items),
            subtotal=subtotal,
            service_fee=service_fee,
            surcharge=surcharge,
            total=total,
            effective_unit_rate=round_currency(total / hours),
            billable_units=hours,
        )

    def _price_gap_coverage(self, request: PricingInput) -> PriceBreakdown:
        daily: list[DailyRate] = []
        for day in request.selected_dates:
            is_weekend = calendar_weekday(day) in rates.WEEKEND_WEEKDAYS
            rate = rates.GAP_COVERAGE_WEEKEND_RATE if is_weekend else rates.GAP_COVERAGE_WEEKDAY_RATE
            daily.append(DailyRate(day=day, rate=rate.amount, is_weekend=is_weekend))

        day_count = len(daily)
        items = self._add_on_items(
            request.services, request.home_size, day_count, RateUnit.DAY, Decimal(day_count),
        )
        base_total = sum((d.rate for d in daily), ZERO)
        subtotal = round_currency(base_total + sum((i.total_amount for i in items), ZERO))
        # Service fee is waived for gap coverage.
        service_fee = round_currency(ZERO)
        surcharge = round_currency(ZERO)

        return PriceBreakdown(
            category=BookingCategory.GAP_COVERAGE,
            base_unit_rate=Rate(RateUnit.DAY, ZERO),
            line_items=tuple(items),
            subtotal=subtotal,
            service_fee=service_fee,
            surcharge=surcharge,
            total=subtotal + service_fee + surcharge,
            effective_unit_rate=round_currency(ZERO),
            billable_units=Decimal(day_count),
            daily_breakdown=tuple(daily),
        )
