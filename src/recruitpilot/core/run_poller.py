"""Drive one assistant run from submission to a terminal state."""

from __future__ import annotations

import logging
from threading import Event
from time import sleep
from typing import Any, Callable, Protocol

from .analysis_types import FAILED_RUN_STATUSES, PENDING_RUN_STATUSES
from .errors import AnalysisCancelled, RunTerminalFailure, RunTimeout, UnknownRunStatus
from .retry import retry

logger = logging.getLogger(__name__)

DEFAULT_MAX_POLL_ATTEMPTS = 60
DEFAULT_POLL_INTERVAL_SEC = 1.0


class RunStatusSource(Protocol):
    def get_run_status(self, conversation_id: str, run_id: str) -> dict[str, Any]: ...


def _failure_reason(run: dict[str, Any]) -> str | None:
    last_error = run.get("last_error")
    if isinstance(last_error, dict):
        message = last_error.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return None


def wait_for_completion(
    client: RunStatusSource,
    conversation_id: str,
    run_id: str,
    *,
    max_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS,
    poll_interval_sec: float = DEFAULT_POLL_INTERVAL_SEC,
    retry_fn: Callable[..., Any] = retry,
    cancel_event: Event | None = None,
    sleep_fn: Callable[[float], None] = sleep,
) -> dict[str, Any]:
    """Poll until `completed`; worst case is `max_attempts * poll_interval_sec` plus retries."""
    safe_attempts = max(1, int(max_attempts))
    interval = max(0.0, float(poll_interval_sec))

    for attempt in range(1, safe_attempts + 1):
        run = retry_fn(
            lambda: client.get_run_status(conversation_id, run_id),
            label="get_run_status",
        )
        status = str(run.get("status") or "unknown") if isinstance(run, dict) else "unknown"
        logger.info("Run status check %d/%d: %s (run=%s)", attempt, safe_attempts, status, run_id)

        if status == "completed":
            return run
        if status in FAILED_RUN_STATUSES:
            raise RunTerminalFailure(status, _failure_reason(run), run_id=run_id)
        if status not in PENDING_RUN_STATUSES:
            raise UnknownRunStatus(status, run_id=run_id)

        if attempt >= safe_attempts or interval <= 0:
            continue
        if cancel_event is not None:
            if cancel_event.wait(timeout=interval):
                raise AnalysisCancelled(f"Polling of run {run_id} cancelled")
        else:
            sleep_fn(interval)

    raise RunTimeout(safe_attempts, run_id=run_id)
