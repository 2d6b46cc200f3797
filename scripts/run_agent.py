#!/usr/bin/env python3
"""
Run the trading agent against the Recall API.

Usage:
    python -m scripts.run_agent                         # default strategies, 30s cycles
    python -m scripts.run_agent --strategies strategies.json --interval-s 60
    python -m scripts.run_agent --once                  # single cycle, then exit
    python -m scripts.run_agent --duration-s 300        # stop after 5 minutes

Environment:
    RECALL_API_KEY (required), RECALL_BASE_URL, DEFAULT_CHAIN,
    MAX_POSITION_SIZE, LOG_LEVEL, CYCLE_INTERVAL_S

Graceful shutdown via SIGINT/SIGTERM: no new cycle starts, the current one
finishes.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from dataclasses import dataclass
from pathlib import Path

from signalengine.agent import TradingAgent
from signalengine.client import RecallClient
from signalengine.config import AgentConfig, load_strategy_configs
from signalengine.logging_config import setup_logging
from signalengine.strategies import StrategyConfigError, list_available

logger = logging.getLogger(__name__)


@dataclass
class RunOptions:
    """Command-line options."""

    interval_s: float | None = None
    strategies_path: Path | None = None
    duration_s: float | None = None
    log_level: str | None = None
    json_logs: bool = True
    once: bool = False

    def __post_init__(self) -> None:
        if self.interval_s is not None and self.interval_s <= 0:
            raise ValueError(f"interval_s must be > 0, got {self.interval_s}")
        if self.duration_s is not None and self.duration_s <= 0:
            raise ValueError(f"duration_s must be > 0, got {self.duration_s}")


async def run(config: AgentConfig, options: RunOptions) -> int:
    """Run the agent until stopped. Returns a process exit code."""
    strategy_configs = None
    if options.strategies_path is not None:
        strategy_configs = load_strategy_configs(options.strategies_path)

    client = RecallClient(config)
    agent = TradingAgent(config, client, strategy_configs=strategy_configs)

    try:
        if options.once:
            await agent.initialize()
            await agent.run_cycle()
            return 0

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, agent.stop)

        await agent.start(options.interval_s)
        if options.duration_s is not None:
            loop.call_later(options.duration_s, agent.stop)
        await agent.wait_stopped()
        logger.info("Final status", extra={"status": agent.get_status()})
        return 0
    finally:
        await agent.close()


def main() -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Signal-driven trading agent for the Recall API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"Available strategies: {', '.join(list_available())}",
    )
    parser.add_argument("--interval-s", type=float, default=None, help="Seconds between cycles")
    parser.add_argument(
        "--strategies",
        type=Path,
        default=None,
        help="JSON file with a list of {name, enabled, parameters} strategy configs",
    )
    parser.add_argument("--duration-s", type=float, default=None, help="Stop after N seconds")
    parser.add_argument("--log-level", default=None, help="debug, info, warn or error")
    parser.add_argument(
        "--json-logs",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Emit JSON log lines (default) or human-readable lines",
    )
    parser.add_argument("--once", action="store_true", help="Run a single cycle and exit")
    args = parser.parse_args()

    try:
        options = RunOptions(
            interval_s=args.interval_s,
            strategies_path=args.strategies,
            duration_s=args.duration_s,
            log_level=args.log_level,
            json_logs=args.json_logs,
            once=args.once,
        )
        config = AgentConfig.from_env()
        setup_logging(level=options.log_level or config.log_level, json_format=options.json_logs)
        return asyncio.run(run(config, options))
    except (ValueError, StrategyConfigError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
