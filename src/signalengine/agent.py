"""
Trading agent.

Owns the strategies and the signal pipeline, and drives one pipeline cycle
per interval:

    RecallClient.get_market_data → SignalPipeline.run_cycle → RecallClient.execute_trade

Cycles never overlap. stop() prevents future cycles; a cycle already in
progress runs to completion.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import TYPE_CHECKING, Any

from signalengine.config import DEFAULT_STRATEGY_CONFIGS
from signalengine.pipeline import CycleResult, PipelineConfig, SignalPipeline
from signalengine.strategies import StrategyConfigError, create_strategy, strategy_metadata

if TYPE_CHECKING:
    from collections.abc import Iterable

    from signalengine.client import RecallClient
    from signalengine.config import AgentConfig
    from signalengine.pipeline import PipelineExporter
    from signalengine.strategies import Strategy, StrategyConfig

logger = logging.getLogger(__name__)


class TradingAgent:
    """
    Interval-driven trading agent.

    Usage:
        agent = TradingAgent(AgentConfig.from_env(), RecallClient(config))
        await agent.start()
        ...
        agent.stop()
        await agent.wait_stopped()
        await agent.close()
    """

    def __init__(
        self,
        config: AgentConfig,
        client: RecallClient,
        strategy_configs: Iterable[StrategyConfig] | None = None,
        pipeline_config: PipelineConfig | None = None,
        exporter: PipelineExporter | None = None,
    ) -> None:
        """
        Initialize agent.

        Args:
            config: Agent configuration.
            client: Market data source and trade executor.
            strategy_configs: Strategies loaded by initialize(). Defaults to
                DEFAULT_STRATEGY_CONFIGS.
            pipeline_config: Pipeline configuration. Defaults to the agent's chain.
            exporter: Optional Prometheus exporter for pipeline counters.
        """
        self._config = config
        self._client = client
        self._strategy_configs = list(
            DEFAULT_STRATEGY_CONFIGS if strategy_configs is None else strategy_configs
        )
        self._pipeline = SignalPipeline(
            executor=client,
            config=pipeline_config or PipelineConfig(chain=config.default_chain),
            exporter=exporter,
        )
        self._initialized = False
        self._running = False
        self._stop_event = asyncio.Event()
        self._loop_task: asyncio.Task[None] | None = None
        self._cycle_lock = asyncio.Lock()

        logger.info("Trading agent created", extra={"config": config.redacted()})

    @property
    def running(self) -> bool:
        """Whether the cycle loop is active."""
        return self._running

    @property
    def pipeline(self) -> SignalPipeline:
        """The agent's signal pipeline."""
        return self._pipeline

    @property
    def strategies(self) -> list[Strategy]:
        """Registered strategies in registration order."""
        return self._pipeline.strategies

    async def initialize(self) -> None:
        """
        Check API health, load strategies and log initial balances.

        Raises:
            RuntimeError: If the API is unhealthy.
        """
        logger.info("Initializing trading agent")

        if not await self._client.health_check():
            raise RuntimeError("Recall API is not healthy")

        chains = await self._client.get_supported_chains()
        logger.info("Supported chains", extra={"chains": chains})

        if not self._initialized:
            for strategy_config in self._strategy_configs:
                self.add_strategy(strategy_config)

        balances = await self._client.get_balances(self._config.default_chain)
        logger.info(
            "Initial balances",
            extra={"balances": {b.token: b.amount for b in balances}},
        )

        self._initialized = True
        logger.info("Trading agent initialized", extra={"strategies": len(self.strategies)})

    async def start(self, interval_s: float | None = None) -> None:
        """
        Initialize if needed, run one cycle, then schedule a cycle per interval.

        Args:
            interval_s: Seconds between cycles (defaults to config.cycle_interval_s).
        """
        if self._running:
            logger.warning("Trading agent is already running")
            return

        interval = self._config.cycle_interval_s if interval_s is None else interval_s
        if interval <= 0:
            raise ValueError(f"interval_s must be > 0, got {interval}")

        if not self._initialized:
            await self.initialize()

        self._running = True
        self._stop_event.clear()
        logger.info("Starting trading agent", extra={"interval_s": interval})

        loop = asyncio.get_running_loop()
        first_start = loop.time()
        await self.run_cycle()
        self._loop_task = asyncio.create_task(self._run_loop(interval, first_start))

    async def _run_loop(self, interval_s: float, first_start: float) -> None:
        """
        Start a cycle every interval, measured from cycle start, until stopped.

        Ticks that fall inside an overrunning cycle are skipped; the next
        cycle starts on the following tick.
        """
        loop = asyncio.get_running_loop()
        next_start = first_start + interval_s
        while not self._stop_event.is_set():
            now = loop.time()
            if next_start < now:
                missed = math.floor((now - next_start) / interval_s) + 1
                next_start += missed * interval_s
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=next_start - now)
            except TimeoutError:
                next_start += interval_s
                await self.run_cycle()

    def stop(self) -> None:
        """Prevent future cycles. An in-flight cycle is not interrupted."""
        if not self._running:
            logger.warning("Trading agent is not running")
            return
        self._running = False
        self._stop_event.set()
        logger.info("Trading agent stopped")

    async def wait_stopped(self) -> None:
        """Wait until the cycle loop has exited."""
        if self._loop_task is not None:
            await self._loop_task
            self._loop_task = None

    async def close(self) -> None:
        """Stop the loop and release the client."""
        if self._running:
            self.stop()
        await self.wait_stopped()
        await self._client.close()

    async def run_cycle(self) -> CycleResult | None:
        """
        Fetch market data and run the pipeline once.

        Returns:
            The cycle result, or None if no market data could be obtained.
        """
        async with self._cycle_lock:
            logger.info("Starting trading cycle")
            try:
                market_data = await self._client.get_market_data(self._config.default_chain)
            except Exception as e:
                logger.error("Failed to fetch market data", extra={"error": str(e)})
                return None

            if not market_data:
                logger.warning("No market data available")
                return None

            result = await self._pipeline.run_cycle(market_data)
            logger.info(
                "Trading cycle completed",
                extra={
                    "signals": len(result.signals),
                    "executed": len(result.executions),
                    "failed": result.failed,
                },
            )
            return result

    def add_strategy(self, strategy_config: StrategyConfig) -> Strategy | None:
        """
        Build a strategy and register it.

        A configuration error is logged and the entry is skipped.

        Returns:
            The new strategy, or None if the configuration was rejected.
        """
        try:
            strategy = create_strategy(strategy_config)
        except StrategyConfigError as e:
            logger.error(
                "Failed to load strategy",
                extra={"strategy": strategy_config.name, "error": str(e)},
            )
            return None
        self._pipeline.add_strategy(strategy)
        logger.info("Loaded strategy", extra={"strategy": strategy.name})
        return strategy

    def remove_strategy(self, name: str) -> bool:
        """
        Remove the first strategy whose configured or display name matches.

        Matching is case-insensitive.

        Returns:
            True if a strategy was removed.
        """
        wanted = name.strip().lower()
        for strategy in self._pipeline.strategies:
            if wanted in (strategy.config.name.lower(), strategy.name.lower()):
                self._pipeline.remove_strategy(strategy)
                logger.info("Removed strategy", extra={"strategy": strategy.name})
                return True
        logger.warning("Strategy not found", extra={"strategy": name})
        return False

    def get_status(self) -> dict[str, Any]:
        """Status snapshot for dashboards."""
        return {
            "is_running": self._running,
            "strategies": [strategy_metadata(s) for s in self._pipeline.strategies],
            "config": self._config.redacted(),
            "metrics": self._pipeline.metrics.to_dict(),
        }

    async def get_trade_history(self, limit: int = 50) -> list[dict[str, Any]]:
        """Recent trades on the default chain."""
        return await self._client.get_trade_history(limit, self._config.default_chain)
