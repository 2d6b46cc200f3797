"""Threshold-trigger strategy.

Fires when the current price deviates from the recent rolling average by
more than a configured percentage.
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
    price_change_percent,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from signalengine.contracts import MarketData

logger = logging.getLogger(__name__)

# Exceedance ratio at which confidence saturates.
MAX_EXCEEDANCE = 2.0


class SimpleTriggerParams(StrategyParams):
    """Parameters for SimpleTriggerStrategy.

    Thresholds are positive percentages. A zero threshold makes every
    nonzero move trigger; that is left to the caller.
    """

    buy_threshold: float
    sell_threshold: float
    lookback_period: int = Field(ge=1)

    @property
    def history_capacity(self) -> int:
        return self.lookback_period * 2


def _exceedance(move_pct: float, threshold_pct: float) -> float:
    """How many thresholds `move_pct` covers, capped at MAX_EXCEEDANCE."""
    if threshold_pct == 0:
        return MAX_EXCEEDANCE if move_pct != 0 else 0.0
    return min(abs(move_pct) / threshold_pct, MAX_EXCEEDANCE)


class SimpleTriggerStrategy:
    """Percentage-deviation trigger against a trailing lookback mean.

    The lookback window includes the price just appended.
    """

    def __init__(self, config: StrategyConfig) -> None:
        """
        Initialize strategy.

        Args:
            config: Strategy configuration with SimpleTriggerParams fields.

        Raises:
            StrategyConfigError: If the parameter bundle is invalid.
        """
        self._params = SimpleTriggerParams.from_parameters(config.parameters)
        self._config = config
        self._history = PriceHistory(self._params.history_capacity)

    @property
    def name(self) -> str:
        return "Simple Trigger Strategy"

    @property
    def description(self) -> str:
        return "Triggers buy/sell based on price percentage changes from recent average"

    @property
    def config(self) -> StrategyConfig:
        """Current configuration."""
        return self._config

    @property
    def params(self) -> SimpleTriggerParams:
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

        Price history is preserved; a smaller lookback trims it from the
        oldest end to the new 2 * lookback_period bound.

        Raises:
            StrategyConfigError: If the merged bundle is invalid.
        """
        if parameters:
            self._params = self._params.merged(parameters)
            self._history.resize(self._params.history_capacity)
        self._config = replace(
            self._config,
            enabled=self._config.enabled if enabled is None else enabled,
            parameters=self._params.model_dump(mode="json", by_alias=True),
        )

    async def analyze(self, market_data: Sequence[MarketData]) -> list[TradingSignal]:
        """
        Ingest one cycle's batch and return threshold signals.

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
            if len(history) < params.lookback_period:
                continue

            lookback_mean = moving_average(history, params.lookback_period)
            if not math.isfinite(lookback_mean):
                continue
            signal = self._generate_signal(data.token, price, lookback_mean)
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

    def _generate_signal(
        self, token: str, price: float, lookback_mean: float
    ) -> TradingSignal | None:
        """Compare price with the lookback mean; None when no threshold is crossed."""
        params = self._params
        price_change = price_change_percent(price, lookback_mean)
        if not math.isfinite(price_change):
            return None

        if price_change >= params.buy_threshold:
            action = SignalAction.BUY
            confidence = clamp_confidence(_exceedance(price_change, params.buy_threshold))
            reason = (
                f"Price increased {price_change:.2f}% above threshold ({params.buy_threshold}%)"
            )
        elif price_change <= -params.sell_threshold:
            action = SignalAction.SELL
            confidence = clamp_confidence(_exceedance(price_change, params.sell_threshold))
            reason = (
                f"Price decreased {abs(price_change):.2f}% "
                f"below threshold ({params.sell_threshold}%)"
            )
        else:
            return None

        if confidence == 0 or confidence < params.min_confidence:
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
