from bookingflow.pricing.classifier import BookingTypeClassifier
from bookingflow.pricing.engine import PriceBreakdown, PricingRuleEngine
from bookingflow.pricing.rates import Rate, RateUnit

__all__ = [
    "BookingTypeClassifier",
    "PricingRuleEngine",
    "PriceBreakdown",
    "Rate",
    "RateUnit",
]
