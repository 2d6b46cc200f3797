"""Strategy construction errors."""

from __future__ import annotations


class StrategyConfigError(ValueError):
    """Strategy configuration is malformed or out of range."""


class UnknownStrategyError(StrategyConfigError):
    """Configuration names a strategy kind the factory does not know."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown strategy: {name}")
        self.name = name
