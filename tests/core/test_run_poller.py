from threading import Event

import pytest

from src.recruitpilot.core.errors import (
    AnalysisCancelled,
    RunTerminalFailure,
    RunTimeout,
    TransportError,
    UnknownRunStatus,
)
from src.recruitpilot.core.run_poller import wait_for_completion


class _FakeRunSource:
    def __init__(self, statuses: list, *, last_error: dict | None = None) -> None:
        self._statuses = list(statuses)
        self._last_error = last_error
        self.checks = 0

    def get_run_status(self, conversation_id: str, run_id: str) -> dict:
        assert conversation_id == "thread_1"
        assert run_id == "run_1"
        self.checks += 1
        status = self._statuses[min(self.checks - 1, len(self._statuses) - 1)]
        if isinstance(status, Exception):
            raise status
        return {"id": run_id, "status": status, "last_error": self._last_error}


def _no_retry(operation, label=None):
    _ = label
    return operation()


def test_poller_returns_on_completed():
    source = _FakeRunSource(["queued", "in_progress", "completed"])
    sleeps: list[float] = []
    run = wait_for_completion(source, "thread_1", "run_1", retry_fn=_no_retry, sleep_fn=sleeps.append)
    assert run["status"] == "completed"
    assert source.checks == 3
    assert sleeps == [1.0, 1.0]


def test_poller_never_terminal_checks_exactly_max_attempts_then_times_out():
    source = _FakeRunSource(["in_progress"])
    with pytest.raises(RunTimeout):
        wait_for_completion(source, "thread_1", "run_1", max_attempts=5, retry_fn=_no_retry, sleep_fn=lambda _s: None)
    assert source.checks == 5


@pytest.mark.parametrize("status", ["failed", "cancelled", "expired"])
def test_poller_raises_on_terminal_failure_with_remote_reason(status):
    source = _FakeRunSource(["queued", status], last_error={"message": "rate limit exceeded"})
    with pytest.raises(RunTerminalFailure) as excinfo:
        wait_for_completion(source, "thread_1", "run_1", retry_fn=_no_retry, sleep_fn=lambda _s: None)
    assert excinfo.value.status == status
    assert "rate limit exceeded" in str(excinfo.value)
    assert source.checks == 2


def test_poller_terminal_failure_without_reason_says_unknown():
    source = _FakeRunSource(["failed"])
    with pytest.raises(RunTerminalFailure, match="Unknown error"):
        wait_for_completion(source, "thread_1", "run_1", retry_fn=_no_retry, sleep_fn=lambda _s: None)


def test_poller_unknown_status_is_not_retried():
    source = _FakeRunSource(["mystery_state", "completed"])
    with pytest.raises(UnknownRunStatus, match="mystery_state"):
        wait_for_completion(source, "thread_1", "run_1", retry_fn=_no_retry, sleep_fn=lambda _s: None)
    assert source.checks == 1


def test_poller_requires_action_is_treated_as_pending():
    source = _FakeRunSource(["requires_action", "completed"])
    run = wait_for_completion(source, "thread_1", "run_1", retry_fn=_no_retry, sleep_fn=lambda _s: None)
    assert run["status"] == "completed"


def test_poller_fetches_status_through_retry_executor():
    source = _FakeRunSource([TransportError("flaky"), "completed"])
    labels: list[str] = []

    def _retry_once(operation, label=None):
        labels.append(label)
        try:
            return operation()
        except TransportError:
            return operation()

    run = wait_for_completion(source, "thread_1", "run_1", retry_fn=_retry_once, sleep_fn=lambda _s: None)
    assert run["status"] == "completed"
    assert labels == ["get_run_status"]
    assert source.checks == 2


def test_poller_stops_when_cancelled_between_checks():
    source = _FakeRunSource(["in_progress"])
    cancel = Event()
    cancel.set()
    sleeps: list[float] = []
    with pytest.raises(AnalysisCancelled):
        wait_for_completion(
            source,
            "thread_1",
            "run_1",
            retry_fn=_no_retry,
            cancel_event=cancel,
            sleep_fn=sleeps.append,
        )
    assert source.checks == 1
    assert sleeps == []


def test_poller_unset_event_waits_then_completes():
    source = _FakeRunSource(["queued", "completed"])
    run = wait_for_completion(
        source,
        "thread_1",
        "run_1",
        poll_interval_sec=0.01,
        retry_fn=_no_retry,
        cancel_event=Event(),
    )
    assert run["status"] == "completed"
    assert source.checks == 2
