"""Credential shape checks for the assistant integration.

Values are checked exactly as they will be sent. Quote stripping happens once,
in `config_loader.load_assistant_config`, so a value that still carries quotes
here is reported rather than silently accepted.
"""

from __future__ import annotations

import logging
import re

from .analysis_types import AssistantConfig, ConfigReport

logger = logging.getLogger(__name__)

API_KEY_PREFIXES = ("sk-", "proj-")
ORGANIZATION_PREFIX = "org-"
_WHITESPACE_RE = re.compile(r"\s")
_QUOTES = "\"'"


def mask_api_key(api_key: str | None) -> str | None:
    if not api_key:
        return None
    return f"{api_key[:5]}***{api_key[-4:]}"


def mask_organization_id(organization_id: str | None) -> str | None:
    if not organization_id:
        return None
    return f"{ORGANIZATION_PREFIX}***{organization_id[-4:]}"


def _api_key_issues(api_key: str | None) -> list[str]:
    if not api_key:
        return ["OPENAI_API_KEY is missing from both environment and config file"]
    issues: list[str] = []
    if not api_key.startswith(API_KEY_PREFIXES):
        issues.append('API key should start with either "sk-" or "proj-"')
    if _WHITESPACE_RE.search(api_key):
        issues.append("API key contains whitespace - please remove it")
    if any(ch in api_key for ch in _QUOTES):
        issues.append("API key contains quote characters - please remove them")
    return issues


def _organization_issues(organization_id: str | None) -> list[str]:
    if not organization_id:
        return ["OPENAI_ORGANIZATION_ID is missing from both environment and config file"]
    issues: list[str] = []
    if not organization_id.startswith(ORGANIZATION_PREFIX):
        issues.append(f'Organization ID should start with "{ORGANIZATION_PREFIX}"')
    if _WHITESPACE_RE.search(organization_id):
        issues.append("Organization ID contains whitespace - please remove it")
    if any(ch in organization_id for ch in _QUOTES):
        issues.append("Organization ID contains quote characters - please remove them")
    return issues


def validate_assistant_config(config: AssistantConfig) -> ConfigReport:
    """Report every credential problem at once; never raises."""
    issues = _api_key_issues(config.api_key) + _organization_issues(config.organization_id)
    if not config.assistant_id:
        issues.append("OPENAI_ASSISTANT_ID is missing from both environment and config file")

    masked = {
        "api_key": mask_api_key(config.api_key),
        "organization_id": mask_organization_id(config.organization_id),
        "assistant_id": config.assistant_id,
    }
    report = ConfigReport(
        is_valid=not issues,
        issues=issues,
        masked_config=masked,
        source=config.source,
    )
    logger.info(
        "Assistant configuration: api_key=%s organization_id=%s assistant_id=%s valid=%s",
        masked["api_key"] or "Missing",
        masked["organization_id"] or "Missing",
        "Present" if config.assistant_id else "Missing",
        report.is_valid,
    )
    return report
