"""Load RecruitPilot JSON config and environment credentials."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Mapping

from .analysis_types import AssistantConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/config.json")
DEFAULT_BASE_URL = "https://api.openai.com/v1"
_CONFIG_CACHE: dict[Path, tuple[int, dict[str, Any]]] = {}

ENV_API_KEY = "OPENAI_API_KEY"
ENV_ORGANIZATION_ID = "OPENAI_ORGANIZATION_ID"
ENV_ASSISTANT_ID = "OPENAI_ASSISTANT_ID"

DEFAULT_ANALYSIS_SETTINGS: dict[str, Any] = {
    "max_retries": 3,
    "retry_base_delay_sec": 1.0,
    "max_poll_attempts": 60,
    "poll_interval_sec": 1.0,
    "word_limit": 500,
    "timeout_sec": 30,
}


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[3]


def resolve_config_path(config_path: str | Path | None = None) -> Path:
    """Resolve config path against repo root.

    Priority:
    1. explicit function argument
    2. `RECRUITPILOT_CONFIG_PATH` environment variable
    3. default `config/config.json`
    """
    raw_path: str | Path | None = config_path or os.getenv("RECRUITPILOT_CONFIG_PATH")
    candidate = Path(raw_path) if raw_path else DEFAULT_CONFIG_PATH
    if not candidate.is_absolute():
        candidate = _repo_root() / candidate
    return candidate.resolve()


def load_config(config_path: str | Path | None = None, *, use_cache: bool = True) -> dict[str, Any]:
    """Load config JSON as a dictionary; a missing file yields `{}`."""
    resolved = resolve_config_path(config_path)
    if not resolved.exists():
        logger.debug("No config file at %s; relying on environment credentials", resolved)
        _CONFIG_CACHE.pop(resolved, None)
        return {}

    mtime_ns = resolved.stat().st_mtime_ns
    if use_cache and resolved in _CONFIG_CACHE:
        cached_mtime_ns, cached_payload = _CONFIG_CACHE[resolved]
        if cached_mtime_ns == mtime_ns:
            return cached_payload

    try:
        payload = json.loads(resolved.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in config file: {resolved}") from exc

    if not isinstance(payload, dict):
        raise ValueError(f"Config root must be a JSON object: {resolved}")

    _CONFIG_CACHE[resolved] = (mtime_ns, payload)
    return payload


def clear_config_cache() -> None:
    """Clear in-memory config cache."""
    _CONFIG_CACHE.clear()


_QUOTES = "\"'"


def _clean(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def normalize_api_key(value: Any) -> str | None:
    """Trim and drop every quote character, as keys pasted from shells often carry them."""
    cleaned = _clean(value)
    if cleaned is None:
        return None
    for quote in _QUOTES:
        cleaned = cleaned.replace(quote, "")
    return cleaned.strip() or None


def normalize_identifier(value: Any) -> str | None:
    """Trim surrounding whitespace and quotes; inner characters are left for validation."""
    cleaned = _clean(value)
    if cleaned is None:
        return None
    return cleaned.strip(_QUOTES).strip() or None

def get_assistant_section(config: dict[str, Any] | None = None) -> dict[str, Any]:
    payload = load_config() if config is None else config
    section = payload.get("assistant")
    return section if isinstance(section, dict) else {}


def get_analysis_settings(config: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return orchestrator tunables merged over defaults, ignoring bad values."""
    payload = load_config() if config is None else config
    section = payload.get("analysis")
    out = dict(DEFAULT_ANALYSIS_SETTINGS)
    if not isinstance(section, dict):
        return out
    for key, default in DEFAULT_ANALYSIS_SETTINGS.items():
        value = section.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if value < 0 or (isinstance(default, int) and value < 1):
            continue
        out[key] = type(default)(value)
    return out


def load_assistant_config(
    env: Mapping[str, str] | None = None,
    config: dict[str, Any] | None = None,
) -> AssistantConfig:
    """Build the credential snapshot; environment wins over the config file.

    Values are normalized here and nowhere else, so the validator and the
    HTTP client see the same strings. A value that is empty after
    normalization falls through to the next source.
    """
    environ = os.environ if env is None else env
    section = get_assistant_section(config)

    def _pick(
        env_name: str,
        file_key: str,
        normalize: Callable[[Any], str | None],
    ) -> tuple[str | None, str | None]:
        from_env = normalize(environ.get(env_name))
        if from_env is not None:
            return from_env, "environment"
        from_file = normalize(section.get(file_key))
        if from_file is not None:
            return from_file, "config_file"
        return None, None

    api_key, source = _pick(ENV_API_KEY, "api_key", normalize_api_key)
    organization_id, _ = _pick(ENV_ORGANIZATION_ID, "organization_id", normalize_identifier)
    assistant_id, _ = _pick(ENV_ASSISTANT_ID, "assistant_id", normalize_identifier)
    settings = get_analysis_settings(config)
    return AssistantConfig(
        api_key=api_key,
        organization_id=organization_id,
        assistant_id=assistant_id,
        base_url=_clean(section.get("base_url")) or DEFAULT_BASE_URL,
        timeout_sec=int(settings["timeout_sec"]),
        source=source,
    )
