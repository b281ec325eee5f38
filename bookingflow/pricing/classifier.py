"""
Ordered-fallback booking type classifier.

Resolves partial or inconsistent booking input into one canonical
category. The rules form an explicit priority list: the first rule whose
predicate matches decides the category, and the order never changes.

Usage:
    classifier = BookingTypeClassifier()
    classifier.classify(booking_sub_type="emergency")  # BookingCategory.EMERGENCY
    classifier.explain(living_arrangement="live_in", home_size="family_hub")  # "structural_long_term"
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

from bookingflow.schemas.booking_schema import BookingCategory
from bookingflow.utils import normalize_key

logger = logging.getLogger(__name__)

SHORT_TERM_SUB_TYPES: dict[str, BookingCategory] = {
    "date_night": BookingCategory.DATE_NIGHT,
    "date_day": BookingCategory.DATE_DAY,
    "emergency": BookingCategory.EMERGENCY,
    "temporary_support": BookingCategory.GAP_COVERAGE,
    "gap_coverage": BookingCategory.GAP_COVERAGE,
    "school_holiday": BookingCategory.SCHOOL_HOLIDAY,
}

LONG_TERM_FLOW_MARKER = "long-term"
LONG_TERM_ROUTE_FRAGMENT = "living-arrangement"


@dataclass(frozen=True)
class ClassifierInput:
    duration_type: Optional[str] = None
    booking_sub_type: Optional[str] = None
    living_arrangement: Optional[str] = None
    home_size: Optional[str] = None
    context_hints: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ClassificationRule:
    """A single (predicate, result) row of the decision table."""
    name: str
    predicate: Callable[[ClassifierInput], bool]
    result: Callable[[ClassifierInput], BookingCategory]


def _key(value: Optional[str]) -> Optional[str]:
    return normalize_key(value) if value else None


def _has_long_term_context(data: ClassifierInput) -> bool:
    flow = data.context_hints.get("booking_flow")
    route = data.context_hints.get("route_path") or ""
    return flow == LONG_TERM_FLOW_MARKER or LONG_TERM_ROUTE_FRAGMENT in route


class BookingTypeClassifier:
    """Applies ``RULES`` in order; the final rule always matches."""

    RULES: list[ClassificationRule] = [
        ClassificationRule(
            "explicit_long_term",
            lambda d: _key(d.duration_type) == "long_term",
            lambda d: BookingCategory.LONG_TERM,
        ),
        ClassificationRule(
            "short_term_sub_type",
            lambda d: _key(d.booking_sub_type) in SHORT_TERM_SUB_TYPES,
            lambda d: SHORT_TERM_SUB_TYPES[_key(d.booking_sub_type)],
        ),
        ClassificationRule(
            "explicit_short_term",
            lambda d: _key(d.duration_type) == "short_term",
            lambda d: BookingCategory.SHORT_TERM,
        ),
        ClassificationRule(
            "structural_long_term",
            lambda d: bool(d.living_arrangement) and bool(d.home_size),
            lambda d: BookingCategory.LONG_TERM,
        ),
        ClassificationRule(
            "context_long_term",
            _has_long_term_context,
            lambda d: BookingCategory.LONG_TERM,
        ),
        ClassificationRule(
            "default_short_term",
            lambda d: True,
            lambda d: BookingCategory.SHORT_TERM,
        ),
    ]

    def resolve(self, data: ClassifierInput) -> tuple[BookingCategory, str]:
        """Return the category and the name of the rule that produced it."""
        for rule in self.RULES:
            if rule.predicate(data):
                category = rule.result(data)
                if rule.name == "default_short_term":
                    logger.warning(
                        "Could not determine booking type, defaulting to short-term "
                        "(duration_type=%r, booking_sub_type=%r)",
                        data.duration_type, data.booking_sub_type,
                    )
                else:
                    logger.debug("Classified booking as %s via %s", category.value, rule.name)
                return category, rule.name
        raise RuntimeError("Classifier rules are exhausted without a default")

    def classify(
        self,
        duration_type: Optional[str] = None,
        booking_sub_type: Optional[str] = None,
        living_arrangement: Optional[str] = None,
        home_size: Optional[str] = None,
        context_hints: Optional[Mapping[str, str]] = None,
    ) -> BookingCategory:
        data = ClassifierInput(
            duration_type, booking_sub_type, living_arrangement, home_size, context_hints or {},
        )
        return self.resolve(data)[0]

    def explain(
        self,
        duration_type: Optional[str] = None,
        booking_sub_type: Optional[str] = None,
        living_arrangement: Optional[str] = None,
        home_size: Optional[str] = None,
        context_hints: Optional[Mapping[str, str]] = None,
    ) -> str:
        data = ClassifierInput(
            duration_type, booking_sub_type, living_arrangement, home_size, context_hints or {},
        )
        return self.resolve(data)[1]
