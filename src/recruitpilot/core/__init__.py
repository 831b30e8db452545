"""Core analysis orchestration for RecruitPilot."""

from .analysis_types import AnalysisResult, AssistantConfig, ConfigReport, ParsedResponse, ValidationReport
from .config_loader import (
    clear_config_cache,
    get_analysis_settings,
    load_assistant_config,
    load_config,
    resolve_config_path,
)
from .config_validator import validate_assistant_config
from .conversation import ConversationLifecycle
from .errors import (
    AnalysisCancelled,
    AnalysisError,
    ConfigurationError,
    RunTerminalFailure,
    RunTimeout,
    TransportError,
    UnknownRunStatus,
)
from .fallback import generate_error_result, generate_fallback
from .orchestrator import AnalysisOrchestrator, OrchestratorSettings, build_orchestrator
from .response_parser import HeuristicResponseParser, parse_match_score, validate_analysis, validate_parsed
from .retry import retry
from .run_poller import wait_for_completion

__all__ = [
    "AnalysisCancelled",
    "AnalysisError",
    "AnalysisOrchestrator",
    "AnalysisResult",
    "AssistantConfig",
    "ConfigReport",
    "ConfigurationError",
    "ConversationLifecycle",
    "HeuristicResponseParser",
    "OrchestratorSettings",
    "ParsedResponse",
    "RunTerminalFailure",
    "RunTimeout",
    "TransportError",
    "UnknownRunStatus",
    "ValidationReport",
    "build_orchestrator",
    "clear_config_cache",
    "generate_error_result",
    "generate_fallback",
    "get_analysis_settings",
    "load_assistant_config",
    "load_config",
    "parse_match_score",
    "resolve_config_path",
    "retry",
    "validate_analysis",
    "validate_parsed",
    "validate_assistant_config",
    "wait_for_completion",
]
