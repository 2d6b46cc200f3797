"""Tests for strategy numeric helpers."""

import math

import pytest

from signalengine.strategies.indicators import (
    clamp_confidence,
    moving_average,
    parse_price,
    position_size,
    price_change_percent,
)


class TestMovingAverage:
    """Tests for moving_average()."""

    def test_mean_of_last_period(self) -> None:
        assert moving_average([1.0, 2.0, 3.0, 4.0], 2) == 3.5

    def test_full_series(self) -> None:
        assert moving_average([10.0, 10.0, 11.0, 12.0], 4) == 10.75

    def test_insufficient_data_is_nan(self) -> None:
        """Series shorter than period yields NaN."""
        assert math.isnan(moving_average([1.0, 2.0], 3))

    def test_empty_series_is_nan(self) -> None:
        assert math.isnan(moving_average([], 1))

    def test_accepts_deque(self) -> None:
        from collections import deque

        assert moving_average(deque([2.0, 4.0, 6.0]), 2) == 5.0

    def test_huge_finite_prices_do_not_overflow(self) -> None:
        """Sum exceeds float range but the mean does not."""
        assert moving_average([1e308, 1e308], 2) == 1e308
        assert moving_average([1e308, 1e308, 1e307], 3) == pytest.approx(7e307)


class TestPriceChangePercent:
    """Tests for price_change_percent()."""

    def test_increase(self) -> None:
        assert price_change_percent(103.0, 100.0) == pytest.approx(3.0)

    def test_decrease(self) -> None:
        assert price_change_percent(98.5, 100.0) == pytest.approx(-1.5)

    def test_zero_previous_is_zero(self) -> None:
        """Degenerate previous price maps to 0 instead of failing."""
        assert price_change_percent(5.0, 0.0) == 0.0


class TestClampConfidence:
    """Tests for clamp_confidence()."""

    @pytest.mark.parametrize(
        ("score", "expected"),
        [(-0.5, 0.0), (0.0, 0.0), (0.42, 0.42), (1.0, 1.0), (7.3, 1.0)],
    )
    def test_clamps_to_unit_interval(self, score: float, expected: float) -> None:
        assert clamp_confidence(score) == expected

    def test_output_always_in_range(self) -> None:
        for score in (-1e9, -1.0, -1e-12, 0.25, 0.999, 1.0001, 1e9, math.inf, -math.inf):
            assert 0.0 <= clamp_confidence(score) <= 1.0

    def test_nan_maps_to_zero(self) -> None:
        assert clamp_confidence(math.nan) == 0.0


class TestPositionSize:
    """Tests for position_size()."""

    def test_scaled_by_confidence(self) -> None:
        assert position_size(100.0, 0.25) == 25.0

    def test_capped_at_max(self) -> None:
        assert position_size(50.0, 1.0) == 50.0


class TestParsePrice:
    """Tests for parse_price()."""

    def test_decimal_string(self) -> None:
        assert parse_price("1234.5") == 1234.5

    @pytest.mark.parametrize("raw", ["", "abc", "nan", "inf", "-inf", "1.2.3"])
    def test_unusable_input_is_none(self, raw: str) -> None:
        assert parse_price(raw) is None
