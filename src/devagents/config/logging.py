"""
logging.py - Global logging configuration

All logs go to stderr so stdout stays clean for command results (catalogs,
system prompts, JSON). Structured key=value pairs are rendered after the message.

Example output:
    2024-01-21 10:30:45 [WARNING ] devagents.persona.loader: Skipping persona file path=agents/x.md code=1003

Usage:
    from devagents.config.logging import configure_logging, get_logger
    configure_logging(level="INFO")
    logger = get_logger(__name__)
    logger.info("Scanned personas", count=9)
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from typing import Any

import structlog


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    DIM = "\033[2m"
    BOLD = "\033[1m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    BRIGHT_BLACK = "\033[90m"


LOG_COLORS = {
    "DEBUG": f"{Colors.BRIGHT_BLACK}{Colors.DIM}",
    "INFO": Colors.GREEN,
    "WARNING": Colors.YELLOW,
    "ERROR": f"{Colors.RED}{Colors.BOLD}",
    "CRITICAL": f"{Colors.RED}{Colors.BOLD}",
}

_RESERVED_KEYS = ("logger", "logger_name", "event", "level", "timestamp", "_colors")

_configured = False
_force_colors = False
_level = logging.INFO


def format_log(_logger: Any, method_name: str, event_dict: dict[str, Any]) -> str:
    """Render one log entry, colored when the stream is a terminal."""
    colors = event_dict.pop("_colors", None)
    if colors is None:
        colors = _force_colors

    level = method_name.upper()
    if level == "WARN":
        level = "WARNING"
    msg = str(event_dict.get("event", ""))
    timestamp = event_dict.get("timestamp") or datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    logger_name = event_dict.get("logger", "") or event_dict.get("logger_name", "")
    extra = {k: v for k, v in event_dict.items() if k not in _RESERVED_KEYS}

    if not colors:
        parts = [f"{timestamp} [{level:<8}]"]
        if logger_name:
            parts.append(f"{logger_name}:")
        parts.append(msg)
        parts.extend(f"{k}={v}" for k, v in extra.items())
        return " ".join(parts)

    color = LOG_COLORS.get(level, "")
    parts = [
        f"{Colors.BRIGHT_BLACK}{timestamp}{Colors.RESET}",
        f"{color}[{level:<8}]{Colors.RESET}",
    ]
    if logger_name:
        parts.append(f"{Colors.CYAN}{logger_name}:{Colors.RESET}")
    parts.append(msg)
    parts.extend(
        f"{Colors.MAGENTA}{k}={Colors.RESET}{Colors.GREEN}{v}{Colors.RESET}"
        for k, v in extra.items()
    )
    return " ".join(parts)


class _SafeStreamHandler(logging.StreamHandler):
    """StreamHandler that ignores writes to a closed stream.

    CliRunner swaps sys.stderr per invocation; a handler created during one
    test may outlive its stream.
    """

    def emit(self, record: logging.LogRecord) -> None:
        stream = self.stream
        if stream is not None and getattr(stream, "closed", False):
            return
        super().emit(record)


def configure_logging(
    level: str = "INFO",
    colors: bool | None = None,
    force: bool = False,
) -> None:
    """Configure global logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        colors: Enable ANSI colors. If None, auto-detect from TTY.
        force: Force reconfiguration even if already configured
    """
    global _configured, _force_colors, _level

    if _configured and not force:
        return

    log_level = getattr(logging, str(level).upper(), logging.INFO)
    _level = log_level

    if colors is None:
        colors = sys.stderr.isatty()
    _force_colors = colors

    root_logger = logging.getLogger()
    root_logger.handlers = []
    handler = _SafeStreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            format_log,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    _configured = True


def get_logger(name: str = "devagents") -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance (usually named after __name__)."""
    return structlog.get_logger(name)


def is_verbose() -> bool:
    return _level <= logging.DEBUG


def get_log_level() -> str:
    return logging.getLevelName(_level)


__all__ = ["configure_logging", "format_log", "get_log_level", "get_logger", "is_verbose"]
