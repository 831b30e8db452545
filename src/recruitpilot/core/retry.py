"""Bounded linear-backoff retry for assistant service calls."""

from __future__ import annotations

import logging
from threading import Event
from time import sleep
from typing import Callable, TypeVar

from .errors import AnalysisCancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY_SEC = 1.0


def retry(
    operation: Callable[[], T],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    *,
    base_delay_sec: float = DEFAULT_BASE_DELAY_SEC,
    label: str | None = None,
    cancel_event: Event | None = None,
    sleep_fn: Callable[[float], None] = sleep,
) -> T:
    """Call `operation` up to `max_attempts` times.

    Waits `base_delay_sec * attempt` between attempts and re-raises the last
    error unchanged once attempts run out. When `cancel_event` is given, the
    wait happens on the event so a cancel stops the loop early.
    """
    safe_attempts = max(1, int(max_attempts))
    delay_base = max(0.0, float(base_delay_sec))
    name = label or getattr(operation, "__name__", "operation")
    for attempt in range(1, safe_attempts + 1):
        if cancel_event is not None and cancel_event.is_set():
            raise AnalysisCancelled(f"{name} cancelled before attempt {attempt}")
        try:
            return operation()
        except Exception as exc:
            if attempt >= safe_attempts:
                raise
            delay = delay_base * attempt
            logger.warning(
                "Retry attempt %d/%d for %s after error: %s",
                attempt,
                safe_attempts,
                name,
                exc,
            )
            if delay <= 0:
                continue
            if cancel_event is not None:
                if cancel_event.wait(timeout=delay):
                    raise AnalysisCancelled(f"{name} cancelled during retry backoff") from exc
            else:
                sleep_fn(delay)
    raise RuntimeError("Retry loop exited unexpectedly.")
