"""Strategy factory.

Maps a configuration's declared name to a concrete strategy instance.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from signalengine.strategies.errors import UnknownStrategyError
from signalengine.strategies.moving_average import MovingAverageStrategy
from signalengine.strategies.simple_trigger import SimpleTriggerStrategy

if TYPE_CHECKING:
    from collections.abc import Callable

    from signalengine.strategies.base import Strategy, StrategyConfig

logger = logging.getLogger(__name__)


class StrategyKind(str, Enum):
    """Recognized strategy kinds."""

    MOVING_AVERAGE = "moving_average"
    SIMPLE_TRIGGER = "simple_trigger"

    @classmethod
    def parse(cls, name: str) -> StrategyKind:
        """
        Resolve a configuration name (case-insensitive).

        Raises:
            UnknownStrategyError: If the name is not recognized.
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise UnknownStrategyError(name) from None


_CONSTRUCTORS: dict[StrategyKind, Callable[[StrategyConfig], Strategy]] = {
    StrategyKind.MOVING_AVERAGE: MovingAverageStrategy,
    StrategyKind.SIMPLE_TRIGGER: SimpleTriggerStrategy,
}


def create_strategy(config: StrategyConfig) -> Strategy:
    """
    Build the strategy named by `config.name`.

    Args:
        config: Strategy configuration.

    Returns:
        A new strategy instance with empty price history.

    Raises:
        UnknownStrategyError: If the name is not recognized.
        StrategyConfigError: If the parameter bundle is invalid.
    """
    kind = StrategyKind.parse(config.name)
    strategy = _CONSTRUCTORS[kind](config)
    logger.debug("Created strategy", extra={"kind": kind.value, "enabled": config.enabled})
    return strategy


def list_available() -> list[str]:
    """Names accepted by create_strategy()."""
    return [kind.value for kind in StrategyKind]
