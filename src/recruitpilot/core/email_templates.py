"""Candidate email draft formatting."""

from __future__ import annotations

SIGNATURE = "Best regards,\nRecruitPilot AI Team"


def email_subject(job_title: str | None = None) -> str:
    return f"Application Status Update - {(job_title or '').strip() or 'Position'}"


def format_candidate_email(content: str) -> str:
    """Append the signature when the draft does not already close with one."""
    body = content.strip()
    if "best regards" not in body.lower():
        body = f"{body}\n\n{SIGNATURE}"
    return body
