"""Market data contracts.

Producer: RecallClient.get_market_data() (one entry per token per cycle)
Consumer: Strategy.analyze()
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from signalengine.contracts.base import ContractBase


def _numeric_to_str(v: Any) -> Any:
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


class MarketData(ContractBase):
    """
    Market snapshot for one token in one cycle.

    Attributes:
        token: Token symbol (e.g., "WETH").
        price: Price as a raw decimal string. Not validated here; strategies
            skip entries whose price does not parse to a finite number.
        volume_24h: 24h traded volume.
        change_24h: 24h price change.
        timestamp: Snapshot timestamp (ms).
        chain: Chain identifier (e.g., "ethereum").
    """

    token: str = Field(..., min_length=1, description="Token symbol")
    price: str = Field(..., description="Price as decimal string")
    volume_24h: str = Field(default="0", alias="volume24h", description="24h volume")
    change_24h: str = Field(default="0", alias="change24h", description="24h change")
    timestamp: int = Field(default=0, ge=0, description="Snapshot timestamp (ms)")
    chain: str = Field(default="", description="Chain identifier")

    @field_validator("price", "volume_24h", "change_24h", mode="before")
    @classmethod
    def coerce_numeric_text(cls, v: Any) -> Any:
        """Accept JSON numbers for decimal-string fields."""
        return _numeric_to_str(v)


class Balance(ContractBase):
    """Token balance held by the agent on one chain."""

    token: str
    amount: str
    chain: str = ""
    value: str = "0"

    @field_validator("amount", "value", mode="before")
    @classmethod
    def coerce_numeric_text(cls, v: Any) -> Any:
        """Accept JSON numbers for decimal-string fields."""
        return _numeric_to_str(v)
