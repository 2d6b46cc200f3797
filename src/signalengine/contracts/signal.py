"""TradingSignal contract.

Producer: Strategy.analyze()
Consumer: SignalPipeline (confidence floor, trade mapping)
"""

from __future__ import annotations

from decimal import Decimal  # noqa: TC003 - used at runtime in validators

from pydantic import Field, field_validator

from signalengine.contracts.base import ContractBase, parse_decimal
from signalengine.contracts.types import SignalAction  # noqa: TC001 - used at runtime in Pydantic


class TradingSignal(ContractBase):
    """A confidence-scored trading signal for one token.

    Signals are produced fresh every cycle and are never persisted by the
    engine. The only link back to the producing strategy is the reason text.
    """

    action: SignalAction = Field(description="buy, sell or hold")
    confidence: float = Field(ge=0.0, le=1.0, description="Signal strength in [0, 1]")
    reason: str = Field(default="", description="Human-readable reason")
    token: str = Field(min_length=1, description="Token symbol")
    amount: Decimal | None = Field(default=None, description="Suggested position size")

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, v: object) -> Decimal | None:
        """Parse optional decimal amount."""
        if v is None:
            return None
        return parse_decimal(v)

    @property
    def is_actionable(self) -> bool:
        """Whether the signal asks for a trade (buy or sell)."""
        return self.action in (SignalAction.BUY, SignalAction.SELL)
