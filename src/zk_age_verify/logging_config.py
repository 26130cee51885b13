"""
Structured logging setup for the zk-age-verify system.

All modules log through ``structlog.get_logger(__name__)``. This module wires
the processor chain once per process. The chain always includes a redaction
processor that scrubs anything shaped like an identity number from event
values, including rendered exception text, so that a careless log call can
never leak one.

Production drops debug-level diagnostics regardless of ``LOG_LEVEL``. Output
goes to stderr so that command output on stdout stays machine-readable.
"""

import logging
import re
import sys
from typing import Any, Dict, Optional

import structlog

from . import config
from .constants import REDACTION_PLACEHOLDER

# Twelve digits, optionally grouped 4-4-4 with spaces or hyphens
_IDENTITY_PATTERN = re.compile(r"(?<!\d)\d{4}[ -]?\d{4}[ -]?\d{4}(?!\d)")


def _scrub(value: Any) -> Any:
    if isinstance(value, str):
        return _IDENTITY_PATTERN.sub(REDACTION_PLACEHOLDER, value)
    if isinstance(value, int) and not isinstance(value, bool):
        text = str(value)
        return REDACTION_PLACEHOLDER if _IDENTITY_PATTERN.search(text) else value
    if isinstance(value, dict):
        return {k: _scrub(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(_scrub(v) for v in value)
    return value


def redact_identity_numbers(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """
    structlog processor replacing identity-number-shaped values.

    Parameters
    ----------
    logger : Any
        Wrapped logger (unused).
    method_name : str
        Log method name (unused).
    event_dict : dict
        Event being processed.

    Returns
    -------
    dict
        The event with every matching substring replaced by ``[REDACTED]``.

    Examples
    --------
    >>> redact_identity_numbers(None, "info", {"event": "got 2341 2341 2346"})
    {'event': 'got [REDACTED]'}
    """
    return {key: _scrub(value) for key, value in event_dict.items()}


def configure_logging(
    level: Optional[str] = None,
    structured: Optional[bool] = None,
    environment: Optional[str] = None,
) -> None:
    """
    Configure structlog for the process.

    Parameters
    ----------
    level : Optional[str], default=None
        Minimum level name. Defaults to ``config.LOG_LEVEL``.
    structured : Optional[bool], default=None
        JSON output when True, console output otherwise. Defaults to
        ``config.STRUCTURED_LOGGING``.
    environment : Optional[str], default=None
        ``"production"`` or ``"development"``. Defaults to ``config.APP_ENV``.
    """
    level_name = (level or config.LOG_LEVEL).upper()
    structured = config.STRUCTURED_LOGGING if structured is None else structured
    environment = (environment or config.APP_ENV).lower()

    min_level = getattr(logging, level_name, logging.INFO)
    if environment != "development":
        min_level = max(min_level, logging.INFO)

    renderer = (
        structlog.processors.JSONRenderer()
        if structured
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            redact_identity_numbers,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
