"""Form validation package."""

from finfamily.validation.validator import RecordValidator, parse_amount

__all__ = ["RecordValidator", "parse_amount"]
