"""Signal-generation strategies.

- Strategy Protocol: analyze(market_data) -> list[TradingSignal]
- PriceHistory: per-strategy, per-token bounded price buffers
- create_strategy(): name-keyed factory over StrategyKind
"""

from signalengine.strategies.base import (
    Strategy,
    StrategyConfig,
    StrategyParams,
    strategy_metadata,
)
from signalengine.strategies.errors import StrategyConfigError, UnknownStrategyError
from signalengine.strategies.factory import StrategyKind, create_strategy, list_available
from signalengine.strategies.history import PriceHistory
from signalengine.strategies.moving_average import MovingAverageParams, MovingAverageStrategy
from signalengine.strategies.simple_trigger import SimpleTriggerParams, SimpleTriggerStrategy

__all__ = [
    "MovingAverageParams",
    "MovingAverageStrategy",
    "PriceHistory",
    "SimpleTriggerParams",
    "SimpleTriggerStrategy",
    "Strategy",
    "StrategyConfig",
    "StrategyConfigError",
    "StrategyKind",
    "StrategyParams",
    "UnknownStrategyError",
    "create_strategy",
    "list_available",
    "strategy_metadata",
]
