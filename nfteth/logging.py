"""
Structured logging setup for nfteth.

This module configures **structlog** on top of the stdlib ``logging`` package:
- events are rendered as JSON or, for interactive use, with the console renderer;
- ``bytes`` values (addresses, token ids) are rendered as 0x-hex;
- call-scoped context (caller, operation) can be bound with contextvars.

Quick start
-----------
    from nfteth.logging import setup_logging, get_logger

    setup_logging()                      # once, at process start (the CLI does it)
    log = get_logger(__name__)
    log.info("deposit_ok", certificate_id=1, amount=100)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

import structlog
from structlog.contextvars import merge_contextvars

from .config import load_config


def _hexify_bytes(_: Any, __: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Render bytes values as 0x-hex so JSON output stays valid."""
    for k, v in list(event_dict.items()):
        if isinstance(v, (bytes, bytearray)):
            event_dict[k] = "0x" + bytes(v).hex()
        elif isinstance(v, (list, tuple)) and any(isinstance(x, (bytes, bytearray)) for x in v):
            event_dict[k] = ["0x" + bytes(x).hex() if isinstance(x, (bytes, bytearray)) else x for x in v]
    return event_dict


def _base_processors() -> Iterable:
    yield structlog.stdlib.add_log_level
    yield structlog.processors.TimeStamper(fmt="iso", utc=True)
    yield merge_contextvars
    yield structlog.processors.StackInfoRenderer()
    yield structlog.processors.format_exc_info
    yield _hexify_bytes
    yield structlog.processors.UnicodeDecoder()


def setup_logging(*, level: Optional[str | int] = None, log_format: Optional[str] = None) -> None:
    """
    Configure structlog + stdlib logging. Defaults come from nfteth.config
    (``NFTETH_LOG_LEVEL`` / ``NFTETH_LOG_FORMAT``).
    """
    cfg = load_config()
    level = level or cfg.log_level
    log_format = (log_format or cfg.log_format).lower()

    processors = list(_base_processors())
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False, sort_keys=False)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            *processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
            foreign_pre_chain=[structlog.stdlib.add_log_level, structlog.stdlib.add_logger_name, *processors],
        )
    )
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: Optional[str] = None) -> Any:
    """
    Return a lazy structlog logger named ``name``. Resolution is deferred to
    first use, so module-level loggers pick up a later ``setup_logging()``.
    """
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()


def call_context(**kv: Any) -> Any:
    """
    Context manager binding call-scoped values (e.g. ``op``, ``caller``) into
    every event logged inside it; previous values are restored on exit, so
    nested (reentrant) calls keep their own context.
    """
    return structlog.contextvars.bound_contextvars(**kv)


__all__ = ["setup_logging", "get_logger", "call_context"]
