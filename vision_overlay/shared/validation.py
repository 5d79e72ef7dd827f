"""Parsing helpers for values typed by users on the command line or in requests."""

from __future__ import annotations

import math

from .errors import ContractViolationError


class ValidationError(ContractViolationError):
    """Raised when user input cannot be converted into a usable value."""


def parse_float(value: str, field_name: str, *, minimum: float | None = None) -> float:
    """Parse ``value`` into a finite ``float`` ensuring it meets ``minimum`` if provided."""

    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field_name} must be a number") from exc
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be finite")
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field_name} must be at least {minimum}")
    return number


def ensure_positive_float(value: str, field_name: str) -> float:
    """Parse ``value`` and ensure it is a positive ``float``."""

    number = parse_float(value, field_name)
    if number <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return number


def parse_view_size(value: str) -> tuple[float, float]:
    """Parse ``"WIDTHxHEIGHT"`` into a pair of positive floats."""

    parts = value.lower().replace(" ", "").split("x")
    if len(parts) != 2:
        raise ValidationError("View size must look like WIDTHxHEIGHT")
    return ensure_positive_float(parts[0], "View width"), ensure_positive_float(parts[1], "View height")
