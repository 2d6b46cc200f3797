"""
Agent configuration.

AgentConfig is read from environment variables; strategy configurations
come from built-in defaults or a JSON file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import orjson

from signalengine.logging_config import parse_level
from signalengine.strategies import StrategyConfig, StrategyConfigError

if TYPE_CHECKING:
    from collections.abc import Mapping

# Env var names that must never be logged
REDACTED_ENV_VARS = frozenset({"RECALL_API_KEY"})

DEFAULT_BASE_URL = "https://api.sandbox.competitions.recall.network"

DEFAULT_STRATEGY_CONFIGS: tuple[StrategyConfig, ...] = (
    StrategyConfig(
        name="moving_average",
        enabled=True,
        parameters={
            "shortPeriod": 5,
            "longPeriod": 20,
            "minConfidence": 0.6,
            "maxPositionSize": 100,
            "tokens": ["WETH", "WBTC"],
        },
    ),
    StrategyConfig(
        name="simple_trigger",
        enabled=True,
        parameters={
            "buyThreshold": 2.0,
            "sellThreshold": 1.5,
            "minConfidence": 0.5,
            "maxPositionSize": 50,
            "tokens": ["WETH", "WBTC"],
            "lookbackPeriod": 10,
        },
    ),
)


@dataclass
class AgentConfig:
    """Configuration for TradingAgent."""

    # Recall API key (from RECALL_API_KEY)
    api_key: str

    # Recall API base URL
    base_url: str = DEFAULT_BASE_URL

    # Chain used for market data and trades
    default_chain: str = "ethereum"

    # Upper bound reported in status; per-strategy sizes come from strategy params
    max_position_size: float = 1000.0

    # debug / info / warn / error
    log_level: str = "info"

    # Seconds between cycle starts
    cycle_interval_s: float = 30.0

    # HTTP timeout for the Recall client
    request_timeout_s: float = 30.0

    def __post_init__(self) -> None:
        """Validate config values at construction time."""
        if not self.api_key:
            raise ValueError("RECALL_API_KEY is required")
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {self.base_url!r}")
        if not self.default_chain:
            raise ValueError("default_chain must be non-empty")
        if self.max_position_size <= 0:
            raise ValueError(f"max_position_size must be > 0, got {self.max_position_size}")
        if self.cycle_interval_s <= 0:
            raise ValueError(f"cycle_interval_s must be > 0, got {self.cycle_interval_s}")
        if self.request_timeout_s <= 0:
            raise ValueError(f"request_timeout_s must be > 0, got {self.request_timeout_s}")
        parse_level(self.log_level)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AgentConfig:
        """
        Build config from environment variables.

        Args:
            environ: Mapping to read instead of os.environ.

        Raises:
            ValueError: If RECALL_API_KEY is missing or a value is invalid.
        """
        env = os.environ if environ is None else environ
        api_key = env.get("RECALL_API_KEY", "")
        if not api_key:
            raise ValueError("RECALL_API_KEY is required in environment variables")

        try:
            max_position_size = float(env.get("MAX_POSITION_SIZE", "1000"))
            cycle_interval_s = float(env.get("CYCLE_INTERVAL_S", "30"))
        except ValueError as e:
            raise ValueError(f"Invalid numeric environment value: {e}") from e

        return cls(
            api_key=api_key,
            base_url=env.get("RECALL_BASE_URL") or DEFAULT_BASE_URL,
            default_chain=env.get("DEFAULT_CHAIN") or "ethereum",
            max_position_size=max_position_size,
            log_level=env.get("LOG_LEVEL") or "info",
            cycle_interval_s=cycle_interval_s,
        )

    def redacted(self) -> dict[str, Any]:
        """Loggable view of the config (no API key)."""
        return {
            "base_url": self.base_url,
            "default_chain": self.default_chain,
            "max_position_size": self.max_position_size,
            "log_level": self.log_level,
            "cycle_interval_s": self.cycle_interval_s,
            "request_timeout_s": self.request_timeout_s,
        }


def load_strategy_configs(path: Path | str) -> list[StrategyConfig]:
    """
    Load strategy configurations from a JSON file.

    The file holds a list of `{"name", "enabled", "parameters"}` objects.
    Parameters are validated later, when the factory builds each strategy.

    Raises:
        StrategyConfigError: If the file is unreadable or malformed.
    """
    path = Path(path)
    try:
        raw = orjson.loads(path.read_bytes())
    except OSError as e:
        raise StrategyConfigError(f"Cannot read strategy config {path}: {e}") from e
    except orjson.JSONDecodeError as e:
        raise StrategyConfigError(f"Invalid JSON in strategy config {path}: {e}") from e

    if not isinstance(raw, list):
        raise StrategyConfigError(f"Strategy config {path} must hold a JSON list")

    configs: list[StrategyConfig] = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise StrategyConfigError(f"Strategy config entry {i} must be an object")
        configs.append(StrategyConfig.from_dict(entry))
    return configs
