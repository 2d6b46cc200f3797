"""Numeric helpers shared by all strategies.

Plain functions over price series; no strategy state is involved.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


def moving_average(series: Sequence[float], period: int) -> float:
    """
    Mean of the last `period` elements of `series`.

    Args:
        series: Chronologically ordered prices.
        period: Number of trailing samples to average (>= 1).

    Returns:
        The trailing mean, or NaN when the series is shorter than `period`.
        Callers treat NaN as "not enough data". The mean of finite prices is
        always finite, even when their sum is not representable.
    """
    if period < 1 or len(series) < period:
        return math.nan
    window = list(series)[-period:]
    try:
        return math.fsum(window) / period
    except OverflowError:
        return math.fsum(x / period for x in window)


def price_change_percent(current: float, previous: float) -> float:
    """Percentage change from `previous` to `current`; 0 when `previous` is 0."""
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def clamp_confidence(score: float) -> float:
    """Clamp a confidence score to [0, 1]. NaN maps to 0."""
    if math.isnan(score):
        return 0.0
    return max(0.0, min(1.0, score))


def position_size(max_position_size: float, confidence: float) -> float:
    """Suggested trade size: max size scaled by confidence, capped at max size."""
    return min(max_position_size * confidence, max_position_size)


def parse_price(raw: str) -> float | None:
    """Parse a decimal price string. Returns None for unparseable or non-finite input."""
    try:
        price = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price):
        return None
    return price
