"""Tests for TTL normalisation."""

from datetime import timedelta

import pytest

from querycache import InvalidTTLError
from querycache.utils.ttl import to_timedelta

DEFAULT = timedelta(minutes=5)


class TestToTimedelta:
    """Tests for to_timedelta."""

    def test_none_uses_default(self) -> None:
        assert to_timedelta(None, DEFAULT) == DEFAULT

    def test_timedelta_passes_through(self) -> None:
        assert to_timedelta(timedelta(seconds=30), DEFAULT) == timedelta(seconds=30)

    def test_numbers_are_milliseconds(self) -> None:
        assert to_timedelta(1500, DEFAULT) == timedelta(seconds=1.5)
        assert to_timedelta(0.5, DEFAULT) == timedelta(microseconds=500)

    def test_zero_is_allowed(self) -> None:
        assert to_timedelta(0, DEFAULT) == timedelta(0)

    def test_negative_rejected(self) -> None:
        with pytest.raises(InvalidTTLError):
            to_timedelta(-1, DEFAULT)
        with pytest.raises(InvalidTTLError):
            to_timedelta(timedelta(seconds=-1), DEFAULT)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf"), 1e300])
    def test_non_finite_or_huge_rejected(self, value: float) -> None:
        with pytest.raises(InvalidTTLError):
            to_timedelta(value, DEFAULT)

    @pytest.mark.parametrize("value", [True, "300", [300]])
    def test_unsupported_types_rejected(self, value: object) -> None:
        with pytest.raises(InvalidTTLError):
            to_timedelta(value, DEFAULT)  # type: ignore[arg-type]

    def test_is_a_value_error(self) -> None:
        with pytest.raises(ValueError):
            to_timedelta(-5, DEFAULT)
