"""Tests for the ordered booking type classifier."""

import logging

import pytest

from bookingflow.schemas.booking_schema import BookingCategory


class TestExplicitDuration:
    def test_long_term(self, classifier):
        assert classifier.classify(duration_type="long_term") == BookingCategory.LONG_TERM

    def test_long_term_hyphenated(self, classifier):
        assert classifier.classify(duration_type="Long-Term") == BookingCategory.LONG_TERM

    def test_long_term_beats_sub_type(self, classifier):
        category = classifier.classify(duration_type="long_term", booking_sub_type="emergency")
        assert category == BookingCategory.LONG_TERM
        assert classifier.explain(duration_type="long_term", booking_sub_type="emergency") == (
            "explicit_long_term"
        )

    def test_short_term_without_sub_type(self, classifier):
        assert classifier.classify(duration_type="short_term") == BookingCategory.SHORT_TERM
        assert classifier.explain(duration_type="short_term") == "explicit_short_term"


class TestSubTypes:
    @pytest.mark.parametrize("sub_type,expected", [
        ("date_night", BookingCategory.DATE_NIGHT),
        ("date_day", BookingCategory.DATE_DAY),
        ("emergency", BookingCategory.EMERGENCY),
        ("temporary_support", BookingCategory.GAP_COVERAGE),
        ("gap_coverage", BookingCategory.GAP_COVERAGE),
        ("school_holiday", BookingCategory.SCHOOL_HOLIDAY),
    ])
    def test_sub_type_mapping(self, classifier, sub_type, expected):
        assert classifier.classify(booking_sub_type=sub_type) == expected

    def test_sub_type_beats_long_term_signals(self, classifier):
        category = classifier.classify(
            booking_sub_type="emergency",
            living_arrangement="live_in",
            home_size="family_hub",
            context_hints={"booking_flow": "long-term"},
        )
        assert category == BookingCategory.EMERGENCY

    def test_unknown_sub_type_falls_through(self, classifier):
        assert classifier.explain(booking_sub_type="sleepover") == "default_short_term"

    def test_explicit_short_term_beats_structure(self, classifier):
        category = classifier.classify(
            duration_type="short_term", living_arrangement="live_out", home_size="grand_estate",
        )
        assert category == BookingCategory.SHORT_TERM


class TestInferredLongTerm:
    def test_structural_fields(self, classifier):
        assert classifier.explain(living_arrangement="live_in", home_size="family_hub") == (
            "structural_long_term"
        )

    def test_structure_needs_both_fields(self, classifier):
        assert classifier.classify(living_arrangement="live_in") == BookingCategory.SHORT_TERM
        assert classifier.classify(home_size="family_hub") == BookingCategory.SHORT_TERM

    def test_booking_flow_hint(self, classifier):
        category = classifier.classify(context_hints={"booking_flow": "long-term"})
        assert category == BookingCategory.LONG_TERM
        assert classifier.explain(context_hints={"booking_flow": "long-term"}) == (
            "context_long_term"
        )

    def test_route_hint(self, classifier):
        hints = {"route_path": "/booking/living-arrangement"}
        assert classifier.classify(context_hints=hints) == BookingCategory.LONG_TERM

    def test_unrelated_hints_ignored(self, classifier):
        hints = {"booking_flow": "short-term", "route_path": "/booking/dates"}
        assert classifier.classify(context_hints=hints) == BookingCategory.SHORT_TERM


class TestDefault:
    def test_empty_input_defaults_to_short_term(self, classifier, caplog):
        with caplog.at_level(logging.WARNING):
            assert classifier.classify() == BookingCategory.SHORT_TERM
        assert "defaulting to short-term" in caplog.text

    def test_rule_order_is_fixed(self, classifier):
        assert [rule.name for rule in classifier.RULES] == [
            "explicit_long_term",
            "short_term_sub_type",
            "explicit_short_term",
            "structural_long_term",
            "context_long_term",
            "default_short_term",
        ]

    def test_deterministic(self, classifier):
        kwargs = dict(duration_type=None, booking_sub_type="Date Night")
        assert classifier.classify(**kwargs) == classifier.classify(**kwargs)
        assert classifier.classify(**kwargs) == BookingCategory.DATE_NIGHT
