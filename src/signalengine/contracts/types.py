"""Contract enums.

All enums are strict string enums; values match the Recall API payloads.
"""

from enum import Enum


class SignalAction(str, Enum):
    """Trading signal action."""

    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"
