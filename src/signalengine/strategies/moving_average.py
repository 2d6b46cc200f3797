"""Moving-average crossover strategy.

Compares a short and a long trailing mean of each token's price history.
Short above long is read as upward momentum (buy), short below long as
downward momentum (sell).
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from pydantic import Field

from signalengine.contracts import SignalAction, TradingSignal, format_amount
from signalengine.strategies.base import StrategyConfig, StrategyParams
from signalengine.strategies.history import PriceHistory
from signalengine.strategies.indicators import (
    clamp_confidence,
    moving_average,
    parse_price,
    position_size,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from signalengine.contracts import MarketData

logger = logging.getLogger(__name__)

# Per-token memory bound, independent of long_period.
HISTORY_CAPACITY = 100

# Relative MA gap of 10% maps to full confidence.
CONFIDENCE_SCALE = 10.0


class MovingAverageParams(StrategyParams):
    """Parameters for MovingAverageStrategy.

    short_period < long_period is expected but not enforced.
    """

    short_period: int = Field(ge=1)
    long_period: int = Field(ge=1)


class MovingAverageStrategy:
    """Short/long moving-average crossover strategy.

    Deterministic given the same history and input batch.
    """

    def __init__(self, config: StrategyConfig) -> None:
        """
        Initialize strategy.

        Args:
            config: Strategy configuration with MovingAverageParams fields.

        Raises:
            StrategyConfigError: If the parameter bundle is invalid.
        """
        self._params = MovingAverageParams.from_parameters(config.parameters)
        self._config = config
        self._history = PriceHistory(HISTORY_CAPACITY)

    @property
    def name(self) -> str:
        return "Moving Average Strategy"

    @property
    def description(self) -> str:
        return "Uses short and long-term moving averages to generate buy/sell signals"

    @property
    def config(self) -> StrategyConfig:
        """Current configuration."""
        return self._config

    @property
    def params(self) -> MovingAverageParams:
        """Validated parameter bundle."""
        return self._params

    def is_enabled(self) -> bool:
        return self._config.enabled

    def update_config(
        self,
        parameters: Mapping[str, Any] | None = None,
        *,
        enabled: bool | None = None,
    ) -> None:
        """
        Merge parameter changes into the configuration.

        Price history is preserved.

        Raises:
            StrategyConfigError: If the merged bundle is invalid.
        """
        if parameters:
            self._params = self._params.merged(parameters)
        self._config = replace(
            self._config,
            enabled=self._config.enabled if enabled is None else enabled,
            parameters=self._params.model_dump(mode="json", by_alias=True),
        )

    async def analyze(self, market_data: Sequence[MarketData]) -> list[TradingSignal]:
        """
        Ingest one cycle's batch and return crossover signals.

        For each allowed token with a parseable price:
        1. Append the price to the token's history
        2. Skip until the history holds long_period prices
        3. Compare short and long moving averages

        Args:
            market_data: One entry per token for this cycle.

        Returns:
            At most one signal per token.
        """
        signals: list[TradingSignal] = []
        params = self._params

        for data in market_data:
            if not params.allows(data.token):
                continue

            price = parse_price(data.price)
            if price is None:
                logger.debug("Skipping unparseable price", extra={"symbol": data.token})
                continue

            history = self._history.append(data.token, price)
            if len(history) < params.long_period:
                continue

            short_ma = moving_average(history, params.short_period)
            long_ma = moving_average(history, params.long_period)
            if not (math.isfinite(short_ma) and math.isfinite(long_ma)):
                continue

            signal = self._generate_signal(data.token, short_ma, long_ma)
            if signal is not None:
                signals.append(signal)
                logger.debug(
                    "Generated signal",
                    extra={
                        "symbol": signal.token,
                        "action": signal.action.value,
                        "confidence": signal.confidence,
                    },
                )

        return signals

    def _generate_signal(self, token: str, short_ma: float, long_ma: float) -> TradingSignal | None:
        """Turn a pair of moving averages into a signal, or None."""
        params = self._params
        avg_price = short_ma / 2 + long_ma / 2
        if avg_price == 0:
            return None

        relative_diff = abs(short_ma - long_ma) / avg_price
        if not math.isfinite(relative_diff):
            return None
        confidence = clamp_confidence(relative_diff * CONFIDENCE_SCALE)
        if confidence < params.min_confidence:
            return None

        if short_ma > long_ma:
            action = SignalAction.BUY
            reason = f"Short MA ({short_ma:.4f}) > Long MA ({long_ma:.4f})"
        elif short_ma < long_ma:
            action = SignalAction.SELL
            reason = f"Short MA ({short_ma:.4f}) < Long MA ({long_ma:.4f})"
        else:
            return None

        return TradingSignal(
            action=action,
            confidence=confidence,
            reason=reason,
            token=token,
            amount=format_amount(position_size(params.max_position_size, confidence)),
        )

    def reset_history(self) -> None:
        """Drop all recorded prices."""
        self._history.clear()
        logger.info("Price history reset", extra={"strategy": self.name})

    def get_price_history(self, token: str) -> list[float]:
        """Recorded prices for a token, oldest first."""
        return self._history.get(token)
