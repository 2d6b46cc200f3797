"""Strategy plugin interface.

Defines the Strategy Protocol every strategy kind implements, the
StrategyConfig handed to the factory, and the shared parameter-bundle base.
Numeric helpers live in `signalengine.strategies.indicators`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from signalengine.strategies.errors import StrategyConfigError

if TYPE_CHECKING:
    from signalengine.contracts import MarketData, TradingSignal

ParamsT = TypeVar("ParamsT", bound="StrategyParams")


@dataclass(frozen=True)
class StrategyConfig:
    """Configuration for one strategy instance.

    `parameters` is the strategy-specific bundle; keys may be camelCase
    (as in the Recall agent config files) or snake_case.
    """

    name: str
    enabled: bool = True
    parameters: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StrategyConfig:
        """Build from a `{name, enabled, parameters}` mapping."""
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise StrategyConfigError(f"strategy config requires a non-empty name, got {name!r}")
        parameters = data.get("parameters", {})
        if not isinstance(parameters, Mapping):
            raise StrategyConfigError(f"parameters for {name!r} must be an object")
        return cls(name=name, enabled=bool(data.get("enabled", True)), parameters=dict(parameters))

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form for status reporting."""
        return {"name": self.name, "enabled": self.enabled, "parameters": dict(self.parameters)}


class StrategyParams(BaseModel):
    """Base for strategy parameter bundles.

    Immutable; a partial update produces a new validated bundle.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    min_confidence: float = Field(ge=0.0, le=1.0)
    max_position_size: float = Field(ge=0.0)
    tokens: tuple[str, ...] = Field(default=())

    @classmethod
    def from_parameters(cls: type[ParamsT], parameters: Mapping[str, Any]) -> ParamsT:
        """
        Validate a raw parameter mapping.

        Raises:
            StrategyConfigError: On unknown keys or out-of-range values.
        """
        try:
            return cls.model_validate(dict(parameters))
        except ValidationError as e:
            raise StrategyConfigError(f"invalid {cls.__name__}: {e}") from e

    def merged(self: ParamsT, changes: Mapping[str, Any]) -> ParamsT:
        """Return a new bundle with `changes` applied on top of this one."""
        by_alias = {f.alias: name for name, f in type(self).model_fields.items() if f.alias}
        data = self.model_dump()
        for key, value in changes.items():
            data[by_alias.get(key, key)] = value
        return type(self).from_parameters(data)

    def allows(self, token: str) -> bool:
        """Whether the strategy may act on `token`."""
        return token in self.tokens


class Strategy(Protocol):
    """Protocol defining the strategy interface.

    Strategies own a private per-token price history. `analyze()` appends
    the batch's prices to it and returns zero or more signals; per-token data
    problems (unparseable price, not enough history) skip the token rather
    than raise.

    Example:
        strategy = create_strategy(StrategyConfig(name="moving_average", parameters={...}))
        signals = await strategy.analyze(market_data)
    """

    @property
    def name(self) -> str:
        """Display name."""
        ...

    @property
    def description(self) -> str:
        """One-line description."""
        ...

    @property
    def config(self) -> StrategyConfig:
        """Current configuration."""
        ...

    def is_enabled(self) -> bool:
        """Whether the strategy takes part in cycles."""
        ...

    def update_config(
        self,
        parameters: Mapping[str, Any] | None = None,
        *,
        enabled: bool | None = None,
    ) -> None:
        """Merge parameter changes into the configuration; history is kept."""
        ...

    async def analyze(self, market_data: Sequence[MarketData]) -> list[TradingSignal]:
        """Ingest one cycle's batch and return signals."""
        ...

    def reset_history(self) -> None:
        """Drop all recorded prices."""
        ...

    def get_price_history(self, token: str) -> list[float]:
        """Recorded prices for a token, oldest first."""
        ...


def strategy_metadata(strategy: Strategy) -> dict[str, Any]:
    """Descriptive metadata used for status reporting."""
    return {
        "name": strategy.name,
        "description": strategy.description,
        "enabled": strategy.is_enabled(),
    }
