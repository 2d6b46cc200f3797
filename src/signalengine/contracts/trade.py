"""Trade execution contracts.

Producer: SignalPipeline.to_trade_request()
Consumer: TradeExecutor (RecallClient.execute_trade)
"""

from __future__ import annotations

from decimal import Decimal  # noqa: TC003 - used at runtime in validators

from pydantic import Field, field_validator

from signalengine.contracts.base import ContractBase, parse_decimal


class TradeExecutionRequest(ContractBase):
    """Request to swap `amount` of `from_token` into `to_token`."""

    from_token: str = Field(alias="fromToken", min_length=1)
    to_token: str = Field(alias="toToken", min_length=1)
    amount: Decimal = Field(gt=0, description="Amount of from_token to spend")
    reason: str = Field(default="")
    chain: str | None = Field(default=None)

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, v: object) -> Decimal:
        """Parse decimal amount."""
        return parse_decimal(v)


class TradeExecutionResponse(ContractBase):
    """Acknowledgement returned by the execution collaborator."""

    trade_id: str = Field(alias="tradeId")
    status: str
    transaction_hash: str | None = Field(default=None, alias="transactionHash")
    gas_used: str | None = Field(default=None, alias="gasUsed")
