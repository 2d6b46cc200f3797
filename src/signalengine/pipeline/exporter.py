"""
Prometheus metrics exporter for the signal pipeline.

Exports low-cardinality counters only. The single label is `action`
(buy/sell/hold); token symbols and strategy names are never labels.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prometheus_client import Counter
from prometheus_client.registry import CollectorRegistry

if TYPE_CHECKING:
    from signalengine.contracts import SignalAction


class PipelineExporter:
    """
    Prometheus counters mirroring PipelineMetrics.

    Usage:
        registry = CollectorRegistry()
        exporter = PipelineExporter(registry=registry)
        pipeline = SignalPipeline(strategies, executor, exporter=exporter)
        # generate_latest(registry) -> bytes for /metrics endpoint
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """
        Initialize exporter.

        Args:
            registry: Prometheus CollectorRegistry. A private registry is created if None.
        """
        self._registry = registry or CollectorRegistry()

        self._cycles = Counter(
            "signalengine_cycles",
            "Completed signal pipeline cycles",
            registry=self._registry,
        )
        self._strategy_errors = Counter(
            "signalengine_strategy_errors",
            "Strategy analyze() calls that raised",
            registry=self._registry,
        )
        self._signals_generated = Counter(
            "signalengine_signals_generated",
            "Signals emitted by strategies",
            ["action"],
            registry=self._registry,
        )
        self._signals_below_floor = Counter(
            "signalengine_signals_below_floor",
            "Signals dropped by the global confidence floor",
            registry=self._registry,
        )
        self._trades_executed = Counter(
            "signalengine_trades_executed",
            "Trade requests accepted by the executor",
            ["action"],
            registry=self._registry,
        )
        self._trades_failed = Counter(
            "signalengine_trades_failed",
            "Trade requests that raised in the executor",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Registry the counters are registered on."""
        return self._registry

    def record_cycle(self) -> None:
        self._cycles.inc()

    def record_strategy_error(self) -> None:
        self._strategy_errors.inc()

    def record_signal(self, action: SignalAction) -> None:
        self._signals_generated.labels(action=action.value).inc()

    def record_below_floor(self) -> None:
        self._signals_below_floor.inc()

    def record_trade(self, action: SignalAction) -> None:
        self._trades_executed.labels(action=action.value).inc()

    def record_trade_failure(self) -> None:
        self._trades_failed.inc()
