"""Monthly pricing for long-term nanny placements."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from bookingflow.pricing import rates
from bookingflow.pricing.engine import LineItem
from bookingflow.pricing.rates import Rate, RateUnit
from bookingflow.schemas.booking_schema import HomeSizeTier, LivingArrangement, ServiceSelection
from bookingflow.utils import normalize_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LongTermQuote:
    home_size: HomeSizeTier
    living_arrangement: LivingArrangement
    base_rate: Rate
    add_ons: tuple[LineItem, ...]
    total_monthly: Decimal


def resolve_home_size(home_size: Union[HomeSizeTier, str, None]) -> HomeSizeTier:
    tier = HomeSizeTier.from_value(home_size)
    if tier is None:
        logger.warning(
            "Unknown home size %r for long-term pricing, using %s",
            home_size, rates.LONG_TERM_FALLBACK_TIER.value,
        )
        return rates.LONG_TERM_FALLBACK_TIER
    return tier


def resolve_living_arrangement(value: Union[LivingArrangement, str, None]) -> LivingArrangement:
    if isinstance(value, LivingArrangement):
        return value
    if value and normalize_key(value) == LivingArrangement.LIVE_IN.value:
        return LivingArrangement.LIVE_IN
    return LivingArrangement.LIVE_OUT


def service_add_ons(services: ServiceSelection, home_size: HomeSizeTier) -> list[LineItem]:
    """Monthly add-on lines for the long-term services that are switched on."""
    items = []
    for name, rate in rates.LONG_TERM_ADDON_RATES.items():
        if not getattr(services, name):
            continue
        label = rates.LONG_TERM_ADDON_LABELS[name]
        if name in rates.LONG_TERM_INCLUDED_ADDONS and home_size in rates.LARGEST_HOME_TIERS:
            items.append(LineItem(f"{label} (Included)", Rate(RateUnit.MONTH, Decimal(0)), Decimal(0)))
        else:
            items.append(LineItem(label, rate, rate.amount))
    return items


def monthly_service_cost(services: ServiceSelection, home_size: Union[HomeSizeTier, str, None]) -> Decimal:
    """Sum of monthly service add-ons, used to price service changes."""
    tier = resolve_home_size(home_size)
    return sum((item.total_amount for item in service_add_ons(services, tier)), Decimal(0))


def price_long_term(
    home_size: Union[HomeSizeTier, str, None] = None,
    living_arrangement: Union[LivingArrangement, str, None] = None,
    services: Optional[ServiceSelection] = None,
    children_count: int = 0,
    other_dependents: int = 0,
) -> LongTermQuote:
    """Monthly cost of a long-term placement: base rate plus add-ons and occupant surcharges."""
    tier = resolve_home_size(home_size)
    arrangement = resolve_living_arrangement(living_arrangement)
    base = rates.LONG_TERM_BASE_RATES[tier][arrangement]

    add_ons: list[LineItem] = []
    extra_children = children_count - rates.CHILD_SURCHARGE_THRESHOLD
    if extra_children > 0:
        amount = rates.OCCUPANT_SURCHARGE.amount * extra_children
        add_ons.append(LineItem(f"Additional Children ({extra_children})", rates.OCCUPANT_SURCHARGE, amount))

    extra_adults = other_dependents - rates.ADULT_OCCUPANT_SURCHARGE_THRESHOLD
    if extra_adults > 0:
        amount = rates.OCCUPANT_SURCHARGE.amount * extra_adults
        add_ons.append(LineItem(f"Additional Occupants ({extra_adults})", rates.OCCUPANT_SURCHARGE, amount))

    add_ons.extend(service_add_ons(services or ServiceSelection(), tier))
    total = base.amount + sum((item.total_amount for item in add_ons), Decimal(0))
    return LongTermQuote(
        home_size=tier,
        living_arrangement=arrangement,
        base_rate=base,
        add_ons=tuple(add_ons),
        total_monthly=total,
    )
