"""Booking pricing and modification workflow engine."""

__version__ = "1.0.0"
