"""Signal pipeline: strategy fan-out, confidence floor and trade mapping."""

from signalengine.pipeline.exporter import PipelineExporter
from signalengine.pipeline.pipeline import (
    CycleResult,
    MarketDataSource,
    PipelineConfig,
    PipelineMetrics,
    SignalPipeline,
    TradeExecution,
    TradeExecutor,
)

__all__ = [
    "CycleResult",
    "MarketDataSource",
    "PipelineConfig",
    "PipelineExporter",
    "PipelineMetrics",
    "SignalPipeline",
    "TradeExecution",
    "TradeExecutor",
]
