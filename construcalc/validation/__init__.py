"""Input validation for calculation templates."""

from construcalc.validation.validator import ValidationOutcome, validate

__all__ = ["ValidationOutcome", "validate"]
