"""Tests for PipelineExporter."""

from __future__ import annotations

import pytest
from prometheus_client import generate_latest
from prometheus_client.registry import CollectorRegistry

from signalengine.contracts import MarketData, SignalAction, TradeExecutionResponse, TradingSignal
from signalengine.pipeline import PipelineExporter, SignalPipeline
from signalengine.strategies import StrategyConfig


def sample(registry: CollectorRegistry, name: str, labels: dict[str, str] | None = None) -> float:
    value = registry.get_sample_value(name, labels or {})
    return 0.0 if value is None else value


class StaticStrategy:
    """Strategy double that always emits the same signals."""

    def __init__(self, signals: list[TradingSignal]) -> None:
        self._signals = signals

    name = "static"
    description = "static"
    config = StrategyConfig(name="static")

    def is_enabled(self) -> bool:
        return True

    async def analyze(self, market_data: list[MarketData]) -> list[TradingSignal]:
        return list(self._signals)


class BrokenStrategy(StaticStrategy):
    async def analyze(self, market_data: list[MarketData]) -> list[TradingSignal]:
        raise RuntimeError("boom")


class OkExecutor:
    async def execute_trade(self, request: object) -> TradeExecutionResponse:
        return TradeExecutionResponse(trade_id="t", status="completed")


class TestPipelineExporter:
    """Tests for PipelineExporter."""

    def test_uses_private_registry_by_default(self) -> None:
        exporter = PipelineExporter()

        assert isinstance(exporter.registry, CollectorRegistry)

    def test_record_methods(self) -> None:
        registry = CollectorRegistry()
        exporter = PipelineExporter(registry=registry)

        exporter.record_cycle()
        exporter.record_signal(SignalAction.BUY)
        exporter.record_signal(SignalAction.BUY)
        exporter.record_trade(SignalAction.SELL)
        exporter.record_trade_failure()
        exporter.record_below_floor()
        exporter.record_strategy_error()

        assert sample(registry, "signalengine_cycles_total") == 1
        assert sample(registry, "signalengine_signals_generated_total", {"action": "buy"}) == 2
        assert sample(registry, "signalengine_trades_executed_total", {"action": "sell"}) == 1
        assert sample(registry, "signalengine_trades_failed_total") == 1
        assert sample(registry, "signalengine_signals_below_floor_total") == 1
        assert sample(registry, "signalengine_strategy_errors_total") == 1

    @pytest.mark.asyncio
    async def test_pipeline_feeds_exporter(self) -> None:
        registry = CollectorRegistry()
        exporter = PipelineExporter(registry=registry)
        signals = [
            TradingSignal(action="buy", confidence=0.9, token="WETH", amount="5"),
            TradingSignal(action="sell", confidence=0.2, token="WBTC", amount="5"),
        ]
        pipeline = SignalPipeline(
            [StaticStrategy(signals), BrokenStrategy([])],
            OkExecutor(),
            exporter=exporter,
        )

        await pipeline.run_cycle([MarketData(token="WETH", price="1")])

        assert sample(registry, "signalengine_cycles_total") == 1
        assert sample(registry, "signalengine_strategy_errors_total") == 1
        assert sample(registry, "signalengine_signals_generated_total", {"action": "sell"}) == 1
        assert sample(registry, "signalengine_signals_below_floor_total") == 1
        assert sample(registry, "signalengine_trades_executed_total", {"action": "buy"}) == 1

    def test_no_symbol_labels_exported(self) -> None:
        registry = CollectorRegistry()
        exporter = PipelineExporter(registry=registry)
        exporter.record_signal(SignalAction.BUY)

        text = generate_latest(registry).decode()

        assert "symbol=" not in text
        assert "token=" not in text
