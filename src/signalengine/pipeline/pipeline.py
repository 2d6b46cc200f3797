"""
Signal pipeline.

Runs every enabled strategy over one cycle's market data, pools the
signals, applies the global confidence floor and forwards survivors to the
trade executor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Protocol

from signalengine.contracts import (
    SignalAction,
    TradeExecutionRequest,
    TradeExecutionResponse,
    TradingSignal,
)
from signalengine.logging_config import log_trade

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from signalengine.contracts import MarketData
    from signalengine.pipeline.exporter import PipelineExporter
    from signalengine.strategies import Strategy

logger = logging.getLogger(__name__)


class MarketDataSource(Protocol):
    """Collaborator that delivers one market-data batch per cycle."""

    async def get_market_data(self, chain: str | None = None) -> list[MarketData]: ...


class TradeExecutor(Protocol):
    """Collaborator that submits trade requests."""

    async def execute_trade(self, request: TradeExecutionRequest) -> TradeExecutionResponse: ...


@dataclass
class PipelineConfig:
    """Configuration for SignalPipeline."""

    # Global confidence floor, applied after each strategy's own min_confidence
    min_confidence: float = 0.5

    # Reference quote asset: buys spend it, sells acquire it
    quote_token: str = "USDC"

    # Amount used when a signal carries no suggested amount
    default_amount: Decimal = Decimal("10")

    # Chain forwarded with every trade request (None = executor default)
    chain: str | None = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ValueError(f"min_confidence must be in [0, 1], got {self.min_confidence}")
        if not self.quote_token:
            raise ValueError("quote_token must be non-empty")
        self.default_amount = Decimal(str(self.default_amount))
        if self.default_amount <= 0:
            raise ValueError(f"default_amount must be > 0, got {self.default_amount}")


@dataclass
class PipelineMetrics:
    """Metrics for pipeline operations."""

    cycles: int = 0
    strategy_runs: int = 0
    strategy_errors: int = 0
    signals_generated: int = 0
    signals_below_floor: int = 0
    signals_skipped: int = 0
    trades_executed: int = 0
    trades_failed: int = 0
    signals_per_action: dict[str, int] = field(default_factory=dict)

    def record_signal(self, signal: TradingSignal) -> None:
        """Record one generated signal."""
        self.signals_generated += 1
        action = signal.action.value
        self.signals_per_action[action] = self.signals_per_action.get(action, 0) + 1

    def reset(self) -> None:
        """Reset all metrics."""
        self.cycles = 0
        self.strategy_runs = 0
        self.strategy_errors = 0
        self.signals_generated = 0
        self.signals_below_floor = 0
        self.signals_skipped = 0
        self.trades_executed = 0
        self.trades_failed = 0
        self.signals_per_action.clear()

    def to_dict(self) -> dict[str, Any]:
        """Convert metrics to dictionary for logging/status."""
        return {
            "cycles": self.cycles,
            "strategy_runs": self.strategy_runs,
            "strategy_errors": self.strategy_errors,
            "signals_generated": self.signals_generated,
            "signals_below_floor": self.signals_below_floor,
            "signals_skipped": self.signals_skipped,
            "trades_executed": self.trades_executed,
            "trades_failed": self.trades_failed,
            "signals_per_action": dict(self.signals_per_action),
        }


@dataclass(frozen=True)
class TradeExecution:
    """A signal that reached the executor and the executor's answer."""

    signal: TradingSignal
    request: TradeExecutionRequest
    response: TradeExecutionResponse


@dataclass
class CycleResult:
    """Outcome of one pipeline cycle."""

    signals: list[TradingSignal] = field(default_factory=list)
    executions: list[TradeExecution] = field(default_factory=list)
    below_floor: int = 0
    skipped: int = 0
    failed: int = 0


class SignalPipeline:
    """
    Turns market data into executed trades.

    Flow:
    1. Every enabled strategy analyzes the batch (registration order)
    2. Signals are pooled, preserving per-strategy emission order
    3. Signals below the global confidence floor are dropped
    4. Survivors are mapped to trade requests and executed one by one

    A strategy that raises is logged and skipped; a trade that fails is
    logged and the remaining signals are still processed. No retries.
    """

    def __init__(
        self,
        strategies: Iterable[Strategy] = (),
        executor: TradeExecutor | None = None,
        config: PipelineConfig | None = None,
        exporter: PipelineExporter | None = None,
    ) -> None:
        """
        Initialize pipeline.

        Args:
            strategies: Strategies in registration order.
            executor: Trade executor. Without one, signals are generated but not executed.
            config: Pipeline configuration. Uses defaults if not provided.
            exporter: Optional Prometheus exporter.
        """
        self._strategies: list[Strategy] = list(strategies)
        self._executor = executor
        self._config = config or PipelineConfig()
        self._exporter = exporter
        self._metrics = PipelineMetrics()

    @property
    def config(self) -> PipelineConfig:
        """Get pipeline configuration."""
        return self._config

    @property
    def metrics(self) -> PipelineMetrics:
        """Get pipeline metrics."""
        return self._metrics

    @property
    def strategies(self) -> list[Strategy]:
        """Registered strategies (copy), in registration order."""
        return list(self._strategies)

    def add_strategy(self, strategy: Strategy) -> None:
        """Register a strategy after the existing ones."""
        self._strategies.append(strategy)

    def remove_strategy(self, strategy: Strategy) -> None:
        """Unregister a strategy."""
        self._strategies.remove(strategy)

    async def run_cycle(self, market_data: Sequence[MarketData]) -> CycleResult:
        """
        Run one full cycle: analyze, filter, execute.

        Args:
            market_data: This cycle's batch (read by every strategy, not mutated).

        Returns:
            CycleResult with pooled signals and executions.
        """
        signals = await self.analyze_all(market_data)
        result = await self.process_signals(signals)
        self._metrics.cycles += 1
        if self._exporter is not None:
            self._exporter.record_cycle()
        return result

    async def analyze_all(self, market_data: Sequence[MarketData]) -> list[TradingSignal]:
        """
        Run every enabled strategy over the batch and pool their signals.

        Args:
            market_data: This cycle's batch.

        Returns:
            Signals in strategy registration order, then emission order.
        """
        pooled: list[TradingSignal] = []
        for strategy in self._strategies:
            if not strategy.is_enabled():
                continue
            self._metrics.strategy_runs += 1
            try:
                signals = await strategy.analyze(market_data)
            except Exception as e:
                self._metrics.strategy_errors += 1
                if self._exporter is not None:
                    self._exporter.record_strategy_error()
                logger.error(
                    "Strategy analysis failed",
                    extra={"strategy": strategy.name, "error": str(e)},
                    exc_info=True,
                )
                continue

            logger.debug(
                "Strategy generated signals",
                extra={"strategy": strategy.name, "count": len(signals)},
            )
            for signal in signals:
                self._metrics.record_signal(signal)
                if self._exporter is not None:
                    self._exporter.record_signal(signal.action)
            pooled.extend(signals)
        return pooled

    async def process_signals(self, signals: Sequence[TradingSignal]) -> CycleResult:
        """
        Filter pooled signals and forward survivors to the executor.

        Args:
            signals: Pooled signals for this cycle.

        Returns:
            CycleResult describing what happened to each signal.
        """
        result = CycleResult(signals=list(signals))
        if not signals:
            logger.info("No trading signals generated")
            return result

        logger.info("Processing trading signals", extra={"count": len(signals)})

        for signal in signals:
            if signal.confidence < self._config.min_confidence:
                result.below_floor += 1
                self._metrics.signals_below_floor += 1
                if self._exporter is not None:
                    self._exporter.record_below_floor()
                logger.debug(
                    "Skipping low confidence signal",
                    extra={"symbol": signal.token, "confidence": signal.confidence},
                )
                continue

            request = self.to_trade_request(signal)
            if request is None or self._executor is None:
                result.skipped += 1
                self._metrics.signals_skipped += 1
                continue

            try:
                log_trade(
                    logger,
                    "Executing signal",
                    symbol=signal.token,
                    action=signal.action.value,
                    confidence=signal.confidence,
                    from_token=request.from_token,
                    to_token=request.to_token,
                    amount=str(request.amount),
                )
                response = await self._executor.execute_trade(request)
            except Exception as e:
                result.failed += 1
                self._metrics.trades_failed += 1
                if self._exporter is not None:
                    self._exporter.record_trade_failure()
                logger.error(
                    "Failed to execute signal",
                    extra={"symbol": signal.token, "error": str(e)},
                )
                continue

            result.executions.append(
                TradeExecution(signal=signal, request=request, response=response)
            )
            self._metrics.trades_executed += 1
            if self._exporter is not None:
                self._exporter.record_trade(signal.action)
            log_trade(
                logger,
                "Trade executed",
                symbol=signal.token,
                trade_id=response.trade_id,
                status=response.status,
            )

        return result

    def to_trade_request(self, signal: TradingSignal) -> TradeExecutionRequest | None:
        """
        Map a signal onto a trade request.

        buy spends the quote asset to acquire the signal's token; sell is the
        inverse. Returns None for signals that cannot be traded (hold, a
        signal on the quote asset itself, or a non-positive amount).
        """
        quote = self._config.quote_token
        if signal.action == SignalAction.BUY:
            from_token, to_token = quote, signal.token
        elif signal.action == SignalAction.SELL:
            from_token, to_token = signal.token, quote
        else:
            return None

        if from_token == to_token:
            logger.warning("Signal on quote asset is not tradeable", extra={"symbol": signal.token})
            return None

        amount = signal.amount if signal.amount is not None else self._config.default_amount
        if amount <= 0:
            logger.debug("Signal amount is not positive", extra={"symbol": signal.token})
            return None

        return TradeExecutionRequest(
            from_token=from_token,
            to_token=to_token,
            amount=amount,
            reason=f"{signal.action.value} signal: {signal.reason}",
            chain=self._config.chain,
        )
