"""
Structured logging configuration for the signal engine.

Provides:
- JSON or human-readable single-line output on one stream handler
- Credential filtering (Recall API key, bearer tokens) in messages and extras
- A TRADE level between INFO and WARNING for trade execution records

Usage:
    from signalengine.logging_config import setup_logging, log_trade

    setup_logging(level="info")  # Call once at startup
    logger = logging.getLogger(__name__)
    logger.info("message", extra={"symbol": "WETH"})
    log_trade(logger, "Trade executed", symbol="WETH", trade_id="t-1")

Market token symbols are not credentials; log them under `symbol`.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any

TRADE = 25
logging.addLevelName(TRADE, "TRADE")

_SENSITIVE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\bbearer\s+[\w\-\.=]+", re.I), "Bearer [REDACTED]"),
    (re.compile(r"\b(api[_-]?key|apikey)([=:]\s*)['\"]?[\w\-]+['\"]?", re.I), r"\1\2[REDACTED]"),
]

# Extra fields whose (lowercased) name contains one of these never reach output
BLOCKED_FIELDS: frozenset[str] = frozenset(
    {
        "api_key",
        "apikey",
        "secret",
        "password",
        "authorization",
        "bearer",
        "credential",
        "access_token",
        "auth_token",
    }
)

# LogRecord attributes that are not user extras
_RECORD_ATTRS: frozenset[str] = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "message",
        "taskName",
    }
)

_MAX_LIST_ITEMS = 10


def _sanitize_text(text: str) -> str:
    """Redact credentials embedded in free-form text."""
    if not text:
        return text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def _is_blocked(key: str) -> bool:
    key_lower = key.lower()
    return any(blocked in key_lower for blocked in BLOCKED_FIELDS)


def _filter_extra(extra: dict[str, Any], *, _depth: int = 0) -> dict[str, Any]:
    """Drop blocked fields and flatten values to log-safe forms."""
    if _depth > 3:
        return {"_truncated": "max depth exceeded"}

    filtered: dict[str, Any] = {}
    for key, value in extra.items():
        if _is_blocked(key):
            continue
        if isinstance(value, (int, float, bool, type(None))):
            filtered[key] = value
        elif isinstance(value, str):
            filtered[key] = _sanitize_text(value)
        elif isinstance(value, (list, tuple)):
            if len(value) <= _MAX_LIST_ITEMS:
                filtered[key] = list(value)
            else:
                filtered[key] = f"[list:{len(value)} items]"
        elif isinstance(value, dict):
            filtered[key] = _filter_extra(value, _depth=_depth + 1)
        else:
            filtered[key] = _sanitize_text(str(value))
    return filtered


def _record_extra(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}


class JsonFormatter(logging.Formatter):
    """JSON log formatter, one object per line.

    Output format:
    {"ts":"2024-01-01T00:00:00.000+00:00","level":"INFO","logger":"module","msg":"...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_dict: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": _sanitize_text(record.getMessage()),
        }

        if record.levelno >= logging.WARNING:
            log_dict["file"] = record.filename
            log_dict["line"] = record.lineno

        if record.exc_info:
            log_dict["exc"] = _sanitize_text(self.formatException(record.exc_info))

        extra = _record_extra(record)
        if extra:
            log_dict.update(_filter_extra(extra))

        return json.dumps(log_dict, default=str, ensure_ascii=False)


class SimpleFormatter(logging.Formatter):
    """Human-readable formatter for development: `LEVEL name: msg | k=v`."""

    def format(self, record: logging.LogRecord) -> str:
        base = f"{record.levelname:8s} {record.name}: {_sanitize_text(record.getMessage())}"

        filtered = _filter_extra(_record_extra(record))
        if filtered:
            extra_str = " ".join(f"{k}={v}" for k, v in filtered.items())
            base = f"{base} | {extra_str}"

        if record.exc_info:
            base = f"{base}\n{_sanitize_text(self.formatException(record.exc_info))}"

        return base


def parse_level(level: int | str) -> int:
    """Resolve `debug`/`info`/`warn`/`error`/`trade` (any case) or an int to a level."""
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name == "WARN":
        name = "WARNING"
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def setup_logging(
    *,
    level: int | str = logging.INFO,
    json_format: bool = True,
    stream: Any = None,
) -> None:
    """Configure logging for the application. Call once at startup.

    Args:
        level: Log level (int or name; default INFO).
        json_format: Use JSON formatter (default True for production).
        stream: Output stream (default stderr).
    """
    if stream is None:
        stream = sys.stderr

    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter() if json_format else SimpleFormatter())

    root = logging.getLogger()
    root.setLevel(parse_level(level))
    root.handlers.clear()
    root.addHandler(handler)

    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def log_trade(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """Log a trade record at TRADE level with structured fields."""
    logger.log(TRADE, msg, extra=fields)
