"""Logging configuration for homelab-bridge.

Routes bridge events through structlog. Secret-bearing fields are masked
before rendering, and httpx's per-request chatter is held back unless
debug logging is on.
"""

import logging
import sys
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any

import structlog

# Event keys whose values never reach a log sink
SECRET_KEYS = frozenset({"api_key", "apikey", "authorization", "secure_json_data"})

# Libraries that log every request at INFO
CHATTY_LOGGERS = ("httpx", "httpcore")

MASK = "***"


def redact_secrets(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor that masks secret-bearing fields."""
    for key in event_dict:
        if key.lower() in SECRET_KEYS and event_dict[key]:
            event_dict[key] = MASK
    return event_dict


def configure_logging(
    level: str = "warning",
    log_file: str | Path | None = None,
    json_output: bool = False,
) -> None:
    """Configure logging for the bridge CLI.

    Args:
        level: Log level (debug, info, warning, error, critical)
        log_file: Write logs here instead of stderr
        json_output: Render one JSON object per event
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(str(log_path))
    else:
        # stdout carries command output
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)

    logging.basicConfig(level=log_level, handlers=[handler], format="%(message)s", force=True)

    library_level = log_level if log_level <= logging.DEBUG else max(log_level, logging.WARNING)
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_secrets,
        structlog.processors.UnicodeDecoder(),
    ]
    processors.append(
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
