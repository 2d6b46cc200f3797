"""Data contracts shared between the engine and its collaborators."""

from signalengine.contracts.base import ContractBase, format_amount, parse_decimal
from signalengine.contracts.market import Balance, MarketData
from signalengine.contracts.signal import TradingSignal
from signalengine.contracts.trade import TradeExecutionRequest, TradeExecutionResponse
from signalengine.contracts.types import SignalAction

__all__ = [
    "Balance",
    "ContractBase",
    "MarketData",
    "SignalAction",
    "TradeExecutionRequest",
    "TradeExecutionResponse",
    "TradingSignal",
    "format_amount",
    "parse_decimal",
]
