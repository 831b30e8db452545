"""Error taxonomy for assistant-backed application analysis."""

from __future__ import annotations


class AnalysisError(Exception):
    """Base class for failures raised inside one analysis call."""


class ConfigurationError(AnalysisError):
    """Credentials or identifiers are missing or malformed."""

    def __init__(self, issues: list[str]) -> None:
        super().__init__("; ".join(issues) or "Assistant configuration is invalid.")
        self.issues = list(issues)


class TransportError(AnalysisError):
    """One network call to the assistant service failed."""

    def __init__(self, message: str, *, status_code: int | None = None, operation: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.operation = operation


class RunTerminalFailure(AnalysisError):
    """The remote run ended in `failed`, `cancelled` or `expired`."""

    def __init__(self, status: str, reason: str | None = None, *, run_id: str | None = None) -> None:
        super().__init__(f"Assistant run {status}: {reason or 'Unknown error'}")
        self.status = status
        self.reason = reason
        self.run_id = run_id


class UnknownRunStatus(RunTerminalFailure):
    def __init__(self, status: str, *, run_id: str | None = None) -> None:
        AnalysisError.__init__(self, f"Unknown run status: {status}")
        self.status = status
        self.reason = None
        self.run_id = run_id


class RunTimeout(AnalysisError):
    """Polling attempts were exhausted before the run reached a terminal state."""

    def __init__(self, attempts: int, *, run_id: str | None = None) -> None:
        super().__init__(f"Assistant analysis timed out after {attempts} status checks")
        self.attempts = attempts
        self.run_id = run_id


class AnalysisCancelled(AnalysisError):
    """An outer cancel signal stopped retries or polling."""
