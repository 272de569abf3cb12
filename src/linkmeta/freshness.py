"""Freshness policy for cached records."""

import math
from datetime import datetime, timedelta

from .errors import InvalidInput


def to_max_age(value: float | int | timedelta) -> timedelta:
    """Coerce seconds or a timedelta into a non-negative max-age."""
    if isinstance(value, timedelta):
        max_age = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            if not math.isfinite(value):
                raise InvalidInput(f"max_age must be finite: {value}")
            max_age = timedelta(seconds=value)
        except OverflowError as exc:
            raise InvalidInput(f"max_age out of range: {value}") from exc
    else:
        raise InvalidInput(f"max_age must be seconds or timedelta, got {type(value).__name__}")

    if max_age < timedelta(0):
        raise InvalidInput(f"max_age must not be negative: {max_age}")
    return max_age


def is_fresh(last_scraped: datetime, max_age: timedelta, now: datetime) -> bool:
    """Return True if a record scraped at last_scraped may be served at now.

    A zero max_age always forces a refresh. A negative max_age is rejected.
    """
    if max_age < timedelta(0):
        raise InvalidInput(f"max_age must not be negative: {max_age}")
    if max_age == timedelta(0):
        return False
    return now - last_scraped <= max_age
