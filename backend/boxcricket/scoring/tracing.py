"""Injectable tracing hook for the scoring engine.

A tracer is any callable taking ``(event, fields)``. It observes the engine and
never feeds back into it, so a failing tracer is logged and ignored.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

logger = logging.getLogger(__name__)

Tracer = Callable[[str, Mapping[str, Any]], None]


def log_tracer(event: str, fields: Mapping[str, Any]) -> None:
    """Default tracer: forward to ``logging`` at DEBUG level."""
    if logger.isEnabledFor(logging.DEBUG):
        detail = " ".join(f"{k}={v!r}" for k, v in fields.items())
        logger.debug("%s %s", event, detail)


def emit(tracer: Optional[Tracer], event: str, **fields: Any) -> None:
    if tracer is None:
        return
    try:
        tracer(event, fields)
    except Exception:
        logger.exception("tracer failed while handling %r", event)
