"""Logging utilities for views-distinct.

Every helper takes a message plus keyword context; the context is rendered as
a compact JSON blob so pass outcomes can be grepped and parsed from the logs.
"""
import json
import logging
from typing import Any, Iterable, Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_MAX_CONTEXT_LENGTH = 1000

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format=DEFAULT_FORMAT,
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger('views-distinct')

_max_context_length = DEFAULT_MAX_CONTEXT_LENGTH


def configure_logging(level: str = "INFO", fmt: Optional[str] = None,
                      max_context_length: Optional[int] = None) -> None:
    """Apply level/format settings to the package logger.

    Args:
        level: Logging level name (``DEBUG``, ``INFO``...)
        fmt: Optional format string for a dedicated handler
        max_context_length: Truncation limit for rendered context
    """
    global _max_context_length

    logger.setLevel(level.upper())
    if fmt:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.handlers = [handler]
        logger.propagate = False
    if max_context_length:
        _max_context_length = max_context_length


def safe_json(obj: Any, max_length: Optional[int] = None) -> str:
    """Serialize context to JSON, falling back to ``str`` for odd values.

    Args:
        obj: Object to serialize
        max_length: Maximum length of output string

    Returns:
        JSON string, truncated when longer than ``max_length``
    """
    limit = max_length or _max_context_length
    try:
        json_str = json.dumps(obj, ensure_ascii=False, default=str, sort_keys=True)
    except (TypeError, ValueError):
        return "<unable to serialize>"

    if len(json_str) > limit:
        json_str = json_str[:limit] + "... [truncated]"
    return json_str


def _emit(level: int, message: str, context: dict) -> None:
    if context:
        logger.log(level, f"{message} | Context: {safe_json(context)}")
    else:
        logger.log(level, message)


def log_info(message: str, **kwargs) -> None:
    """Log info message with optional context."""
    _emit(logging.INFO, message, kwargs)


def log_warning(message: str, **kwargs) -> None:
    """Log warning message with optional context."""
    _emit(logging.WARNING, message, kwargs)


def log_error(message: str, **kwargs) -> None:
    """Log error message with optional context."""
    _emit(logging.ERROR, message, kwargs)


def log_debug(message: str, **kwargs) -> None:
    """Log debug message with optional context."""
    _emit(logging.DEBUG, message, kwargs)


def log_pass_summary(pass_name: str, fields: Iterable[str], removed: int,
                     total_rows: int, **kwargs) -> None:
    """Log the outcome of one dedup pass.

    Passes that removed nothing are logged at debug level to keep listings
    without duplicates quiet.

    Args:
        pass_name: ``raw`` or ``rendered``
        fields: Field identifiers that took part in the pass
        removed: Number of rows removed
        total_rows: Running total after removal
        **kwargs: Additional context
    """
    log = log_info if removed else log_debug
    log(f"Dedup pass finished: {pass_name}",
        fields=list(fields),
        removed=removed,
        total_rows=total_rows,
        **kwargs)
