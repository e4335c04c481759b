"""Debug logging utilities for the CardDAV store."""

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger("py_carddav")
store_logger = logging.getLogger("py_carddav.store")


def _printable(arg: Any) -> Any:
    """Shorten long command arguments (card bodies) for the log."""
    if isinstance(arg, str) and len(arg) > 200:
        return f"{arg[:200]}... ({len(arg) - 200} more chars)"
    if isinstance(arg, dict):
        return {k: _printable(v) for k, v in arg.items()}
    return arg


def log_batch(label: str, commands: list[tuple[str, tuple[Any, ...]]]) -> None:
    """Log an outgoing store batch in JSON format.

    Args:
        label: Name of the logical operation the batch belongs to
        commands: Commands as (name, args) tuples
    """
    if not store_logger.isEnabledFor(logging.DEBUG):
        return

    batch_data = {
        "type": "batch",
        "label": label,
        "commands": [[name, *[_printable(a) for a in args]] for name, args in commands],
    }

    store_logger.debug(json.dumps(batch_data, indent=2, ensure_ascii=False, default=str))


def log_batch_result(label: str, results: list[Any]) -> None:
    """Log the replies of an executed store batch in JSON format.

    Args:
        label: Name of the logical operation the batch belongs to
        results: One reply per command
    """
    if not store_logger.isEnabledFor(logging.DEBUG):
        return

    result_data = {
        "type": "result",
        "label": label,
        "results": [_printable(r) for r in results],
    }

    store_logger.debug(json.dumps(result_data, indent=2, ensure_ascii=False, default=str))


def setup_debug_logging() -> None:
    """Configure debug logging for the CardDAV store."""
    # Configure logger
    logger.setLevel(logging.DEBUG)

    # Create console handler with custom formatter
    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG)

    # Simple format - just the message (since we format the logs ourselves)
    formatter = logging.Formatter("%(message)s")
    handler.setFormatter(formatter)

    logger.addHandler(handler)

    # Prevent propagation to avoid duplicate logs
    logger.propagate = False

