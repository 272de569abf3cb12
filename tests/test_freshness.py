"""Tests for the freshness policy."""

from datetime import datetime, timedelta, timezone

import pytest

from linkmeta.errors import InvalidInput
from linkmeta.freshness import is_fresh, to_max_age

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestIsFresh:
    def test_within_max_age(self):
        """A record younger than max_age is fresh."""
        assert is_fresh(T0, timedelta(hours=1), T0 + timedelta(minutes=10)) is True

    def test_exactly_at_max_age(self):
        """The boundary is inclusive."""
        assert is_fresh(T0, timedelta(hours=1), T0 + timedelta(hours=1)) is True

    def test_older_than_max_age(self):
        """A record older than max_age is stale."""
        assert is_fresh(T0, timedelta(hours=1), T0 + timedelta(hours=1, seconds=1)) is False

    def test_zero_max_age_always_refreshes(self):
        """max_age=0 is never fresh, even for the same instant."""
        assert is_fresh(T0, timedelta(0), T0) is False

    def test_negative_max_age_rejected(self):
        """Negative max_age is an input error."""
        with pytest.raises(InvalidInput):
            is_fresh(T0, timedelta(seconds=-1), T0)

    def test_clock_behind_record_is_fresh(self):
        """A record from the future (clock skew) counts as fresh."""
        assert is_fresh(T0, timedelta(seconds=1), T0 - timedelta(minutes=5)) is True


class TestToMaxAge:
    def test_seconds(self):
        assert to_max_age(90) == timedelta(seconds=90)

    def test_float_seconds(self):
        assert to_max_age(1.5) == timedelta(seconds=1.5)

    def test_timedelta_passthrough(self):
        assert to_max_age(timedelta(hours=2)) == timedelta(hours=2)

    def test_zero_allowed(self):
        assert to_max_age(0) == timedelta(0)

    @pytest.mark.parametrize(
        "value",
        [-1, -0.5, timedelta(seconds=-1), float("nan"), float("inf"), float("-inf"), 1e20, 10**400],
    )
    def test_negative_or_unrepresentable_rejected(self, value):
        with pytest.raises(InvalidInput):
            to_max_age(value)

    @pytest.mark.parametrize("value", ["60", None, True])
    def test_wrong_type_rejected(self, value):
        with pytest.raises(InvalidInput):
            to_max_age(value)
