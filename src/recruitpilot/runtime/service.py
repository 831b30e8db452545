"""Shared analysis-service facade for daemon/app entrypoints."""

from __future__ import annotations

import logging
from threading import Event, RLock
from typing import Any, Callable

from src.recruitpilot.core.email_templates import email_subject
from src.recruitpilot.core.orchestrator import AnalysisOrchestrator, build_orchestrator

logger = logging.getLogger(__name__)


class AnalysisService:
    """Single owner of the process-wide orchestrator."""

    def __init__(self, *, orchestrator_factory: Callable[[], AnalysisOrchestrator] = build_orchestrator) -> None:
        self._factory = orchestrator_factory
        self._lock = RLock()
        self._orchestrator: AnalysisOrchestrator | None = None
        self._started = False
        self._last_start_source: str | None = None
        self._connection_ok: bool | None = None

    def _build_orchestrator(self) -> AnalysisOrchestrator:
        with self._lock:
            if self._orchestrator is None:
                self._orchestrator = self._factory()
            return self._orchestrator

    def start(self, *, probe_connection: bool = True, source: str = "runtime") -> dict[str, Any]:
        """Build and initialize the orchestrator; a failed probe only warns."""
        with self._lock:
            already_started = self._started
            orchestrator = self._build_orchestrator()
            self._started = True
            self._last_start_source = source

        status = orchestrator.initialize()
        if status["issues"]:
            logger.warning("Assistant configuration issues: %s", "; ".join(status["issues"]))
        if probe_connection:
            self._connection_ok = orchestrator.test_connection()
            if not self._connection_ok:
                logger.warning("Assistant connection test failed, but continuing startup")

        return {
            "ok": True,
            "source": "analysis_service",
            "already_started": already_started,
            "start_source": source,
            "mode": status["mode"],
            "issues": status["issues"],
            "connection_ok": self._connection_ok,
        }

    def _get_orchestrator(self) -> AnalysisOrchestrator:
        if self._orchestrator is None:
            self.start(probe_connection=False, source="implicit")
        return self._build_orchestrator()

    def health(self, *, probe: bool = False) -> dict[str, Any]:
        orchestrator = self._get_orchestrator()
        if probe:
            self._connection_ok = orchestrator.test_connection()
        return {
            "ok": True,
            "source": "analysis_service",
            "started": self._started,
            "last_start_source": self._last_start_source,
            "mode": orchestrator.mode,
            "connection_ok": self._connection_ok,
        }

    def validate_config(self) -> dict[str, Any]:
        return {"ok": True, **self._get_orchestrator().validate_config()}

    def analyze(
        self,
        *,
        applicant_text: str,
        job_description: str,
        job_title: str | None = None,
        cancel_event: Event | None = None,
    ) -> dict[str, Any]:
        result = self._get_orchestrator().analyze_application(
            applicant_text,
            job_description,
            cancel_event=cancel_event,
        )
        return {
            "ok": True,
            "email_subject": email_subject(job_title),
            "result": result.to_dict(),
        }


_ANALYSIS_SERVICE: AnalysisService | None = None


def get_analysis_service() -> AnalysisService:
    global _ANALYSIS_SERVICE
    if _ANALYSIS_SERVICE is None:
        _ANALYSIS_SERVICE = AnalysisService()
    return _ANALYSIS_SERVICE
