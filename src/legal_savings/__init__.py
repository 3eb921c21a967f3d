"""Time-savings accounting and report aggregation for AI legal consultations."""

__version__ = "0.1.0"
