"""Assistant-backed application analysis with guaranteed thread cleanup."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from threading import Event, RLock
from time import sleep
from typing import Any, Callable, Mapping, Protocol

from .analysis_types import AnalysisResult, AssistantConfig, ConfigReport
from .config_loader import (
    DEFAULT_ANALYSIS_SETTINGS,
    get_analysis_settings,
    load_assistant_config,
    load_config,
)
from .config_validator import validate_assistant_config
from .conversation import ConversationLifecycle
from .email_templates import format_candidate_email
from .errors import AnalysisError, ConfigurationError
from .fallback import generate_error_result, generate_fallback
from .prompts import format_analysis_prompt
from .providers import AssistantsClient
from .response_parser import (
    DUAL_WORD_LIMIT,
    HeuristicResponseParser,
    ResponseParser,
    parse_match_score,
    validate_parsed,
)
from .retry import retry
from .run_poller import wait_for_completion

logger = logging.getLogger(__name__)


class AssistantClient(Protocol):
    def create_conversation(self) -> str: ...

    def delete_conversation(self, conversation_id: str) -> None: ...

    def post_message(self, conversation_id: str, text: str) -> Any: ...

    def create_run(self, conversation_id: str, assistant_id: str) -> dict[str, Any]: ...

    def get_run_status(self, conversation_id: str, run_id: str) -> dict[str, Any]: ...

    def list_messages(self, conversation_id: str) -> list[str]: ...


@dataclass(frozen=True, slots=True)
class OrchestratorSettings:
    max_retries: int = 3
    retry_base_delay_sec: float = 1.0
    max_poll_attempts: int = 60
    poll_interval_sec: float = 1.0
    word_limit: int = DUAL_WORD_LIMIT

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "OrchestratorSettings":
        merged = {**DEFAULT_ANALYSIS_SETTINGS, **payload}
        return cls(
            max_retries=int(merged["max_retries"]),
            retry_base_delay_sec=float(merged["retry_base_delay_sec"]),
            max_poll_attempts=int(merged["max_poll_attempts"]),
            poll_interval_sec=float(merged["poll_interval_sec"]),
            word_limit=int(merged["word_limit"]),
        )


class AnalysisOrchestrator:
    """Compose validation, thread lifecycle, polling and parsing into one call.

    Construction does no I/O. `initialize()` validates the configuration once
    and fixes the operating mode for the life of the object: `ready` when the
    credentials are well formed, `degraded` otherwise. In degraded mode every
    analysis returns the static fallback without touching the network.
    """

    def __init__(
        self,
        config: AssistantConfig,
        *,
        client: AssistantClient | None = None,
        client_factory: Callable[[AssistantConfig], AssistantClient] = AssistantsClient.from_config,
        parser: ResponseParser | None = None,
        settings: OrchestratorSettings | None = None,
        sleep_fn: Callable[[float], None] = sleep,
    ) -> None:
        self._config = config
        self._client = client
        self._client_factory = client_factory
        self._parser: ResponseParser = parser or HeuristicResponseParser()
        self._settings = settings or OrchestratorSettings()
        self._sleep = sleep_fn
        self._lock = RLock()
        self._report: ConfigReport | None = None

    @property
    def settings(self) -> OrchestratorSettings:
        return self._settings

    @property
    def mode(self) -> str:
        if self._report is None:
            return "uninitialized"
        return "ready" if self._report.is_valid else "degraded"

    def _ensure_initialized(self) -> ConfigReport:
        with self._lock:
            report = self._report
            if report is None:
                report = validate_assistant_config(self._config)
                if report.is_valid and self._client is None:
                    self._client = self._client_factory(self._config)
                if not report.is_valid:
                    logger.warning(
                        "Assistant integration disabled, using fallback analysis: %s",
                        "; ".join(report.issues),
                    )
                self._report = report
            return report

    def initialize(self) -> dict[str, Any]:
        report = self._ensure_initialized()
        return {
            "ok": True,
            "mode": self.mode,
            "issues": list(report.issues),
            "config": dict(report.masked_config),
        }

    def validate_config(self) -> dict[str, Any]:
        report = self._ensure_initialized()
        return report.to_dict()

    def _retry(self, cancel_event: Event | None) -> Callable[..., Any]:
        def _run(operation: Callable[[], Any], label: str | None = None) -> Any:
            return retry(
                operation,
                self._settings.max_retries,
                base_delay_sec=self._settings.retry_base_delay_sec,
                label=label,
                cancel_event=cancel_event,
                sleep_fn=self._sleep,
            )

        return _run

    def _require_client(self) -> AssistantClient:
        report = self._ensure_initialized()
        if not report.is_valid or self._client is None:
            raise ConfigurationError(report.issues)
        return self._client

    def test_connection(self) -> bool:
        """Create and discard one thread; an unconfigured service counts as reachable."""
        report = self._ensure_initialized()
        if not report.is_valid:
            return True
        try:
            client = self._require_client()
            conversation_id = client.create_conversation()
            client.delete_conversation(conversation_id)
        except Exception as exc:
            logger.error("Assistant Service connection test failed: %s", exc)
            return False
        logger.info("Assistant Service connection test successful")
        return True

    def analyze_application(
        self,
        applicant_text: str,
        job_description: str,
        *,
        cancel_event: Event | None = None,
    ) -> AnalysisResult:
        """Analyze one application; never raises."""
        report = self._ensure_initialized()
        if not report.is_valid:
            return generate_fallback()

        state: dict[str, Any] = {"phase": "idle", "conversation_id": None}
        try:
            return self._run_analysis(applicant_text, job_description, state=state, cancel_event=cancel_event)
        except Exception as exc:
            logger.error(
                "AI analysis failed in phase %s (thread=%s): %s: %s",
                state["phase"],
                state["conversation_id"],
                exc.__class__.__name__,
                exc,
            )
            return generate_error_result(exc, conversation_id=state["conversation_id"])

    def _run_analysis(
        self,
        applicant_text: str,
        job_description: str,
        *,
        state: dict[str, Any],
        cancel_event: Event | None,
    ) -> AnalysisResult:
        client = self._require_client()
        assistant_id = str(self._config.assistant_id)
        run_with_retry = self._retry(cancel_event)
        lifecycle = ConversationLifecycle(client, retry_fn=run_with_retry)
        prompt = format_analysis_prompt(job_description, applicant_text)
        logger.info(
            "Starting application analysis (applicant_chars=%d, job_chars=%d)",
            len(applicant_text or ""),
            len(job_description or ""),
        )

        with lifecycle.open() as conversation_id:
            state.update(phase="context_open", conversation_id=conversation_id)
            run_with_retry(lambda: client.post_message(conversation_id, prompt), label="post_message")
            state["phase"] = "prompt_submitted"

            run = run_with_retry(lambda: client.create_run(conversation_id, assistant_id), label="create_run")
            run_id = str(run.get("id"))
            state["phase"] = "run_polling"
            wait_for_completion(
                client,
                conversation_id,
                run_id,
                max_attempts=self._settings.max_poll_attempts,
                poll_interval_sec=self._settings.poll_interval_sec,
                retry_fn=run_with_retry,
                cancel_event=cancel_event,
                sleep_fn=self._sleep,
            )

            messages = run_with_retry(lambda: client.list_messages(conversation_id), label="list_messages")
            if not messages or not str(messages[0]).strip():
                raise AnalysisError("Assistant returned no message text")
            raw_output = str(messages[0])
            state["phase"] = "result_fetched"

            parsed = self._parser.parse(raw_output)
            match_score = parse_match_score(raw_output)
            validation = validate_parsed(parsed, max_words=self._settings.word_limit)
            state["phase"] = "parsed"

        state["phase"] = "closed"
        if not validation.is_valid:
            logger.warning("Analysis format validation: %s", validation.to_dict())
        logger.info(
            "Analysis completed successfully (thread=%s, score=%d, length=%d, separator=%s)",
            conversation_id,
            match_score,
            len(raw_output),
            parsed.separator,
        )
        return AnalysisResult(
            success=True,
            recruiter_analysis=parsed.recruiter_analysis,
            candidate_email=format_candidate_email(parsed.candidate_email),
            match_score=match_score,
            validation=validation,
            source="assistant",
            conversation_id=conversation_id,
            raw_output=raw_output,
        )


def build_orchestrator(
    *,
    env: Mapping[str, str] | None = None,
    config_path: str | Path | None = None,
    client: AssistantClient | None = None,
) -> AnalysisOrchestrator:
    """Wire an orchestrator from the environment and optional JSON config."""
    payload = load_config(config_path)
    return AnalysisOrchestrator(
        load_assistant_config(env, payload),
        client=client,
        settings=OrchestratorSettings.from_dict(get_analysis_settings(payload)),
    )
