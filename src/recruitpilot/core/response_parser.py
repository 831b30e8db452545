"""Split, score and check free-text assistant output."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol

from .analysis_types import ParsedResponse, ValidationReport

LEAN_WORD_LIMIT = 150
DUAL_WORD_LIMIT = 500

PLACEHOLDER_RECRUITER_ANALYSIS = (
    "The assistant response did not contain a recruiter analysis. Please review this application manually."
)
PLACEHOLDER_CANDIDATE_EMAIL = (
    "Dear Candidate,\n\n"
    "Thank you for your application. It has been received and is currently being reviewed. "
    "You will hear back about next steps soon.\n\n"
    "Best regards,\nRecruitPilot AI Team"
)

REQUIRED_SECTIONS = (
    "Match Score",
    "Initial Feedback",
    "Strengths Identified",
    "Areas for Enhancement",
    "Recommendations",
)

DISALLOWED_PHRASES = (
    "our team",
    "join us",
    "we are looking",
    "our company",
    "welcome aboard",
    "welcome to the team",
)

MATCH_SCORE_RE = re.compile(r"Match Score[\s*_]*:[\s*_]*([+-]?\d+)", re.IGNORECASE)

# A line may carry list numbering and markdown emphasis around a label.
_LINE_PREFIX = r"^[ \t]*(?:#{1,6}[ \t]*)?(?:\*\*|__)?[ \t]*(?:(?:\d+|[A-Za-z])[.)][ \t]*)?(?:\*\*|__)?[ \t]*"


@dataclass(frozen=True, slots=True)
class SeparatorRule:
    name: str
    pattern: re.Pattern[str]
    keep_marker: bool


SEPARATOR_RULES: tuple[SeparatorRule, ...] = (
    SeparatorRule(
        name="candidate_email_header",
        pattern=re.compile(
            _LINE_PREFIX + r"candidate[ \t]+email(?:[ \t]+draft)?[ \t]*(?:\*\*|__)?[ \t]*:?[ \t]*(?:\*\*|__)?[ \t]*$",
            re.IGNORECASE | re.MULTILINE,
        ),
        keep_marker=False,
    ),
    SeparatorRule(
        name="subject_line",
        pattern=re.compile(r"^[ \t]*(?:\*\*)?Subject[ \t]*:", re.IGNORECASE | re.MULTILINE),
        keep_marker=True,
    ),
    SeparatorRule(
        name="horizontal_rule",
        pattern=re.compile(r"^[ \t]*(?:-{3,}|\*{3,}|_{3,})[ \t]*$", re.MULTILINE),
        keep_marker=False,
    ),
)

_SCAFFOLD_RE = re.compile(
    _LINE_PREFIX
    + r"(?:recruiter[ \t]+analysis|internal[ \t]+(?:analysis|feedback)|candidate[ \t]+email(?:[ \t]+draft)?)"
    + r"[ \t]*(?:\*\*|__)?[ \t]*:?[ \t]*(?:\*\*|__)?[ \t]*(?:\n|$)",
    re.IGNORECASE,
)

# Rules left dangling above a header split belong to neither artifact.
_TRAILING_RULE_RE = re.compile(r"(?:\n[ \t]*(?:-{3,}|\*{3,}|_{3,})[ \t]*)+\s*$")


class ResponseParser(Protocol):
    def parse(self, raw: str) -> ParsedResponse: ...


def strip_scaffold(text: str) -> str:
    """Drop leading section labels such as `1. Recruiter Analysis:`."""
    out = text.strip()
    while True:
        match = _SCAFFOLD_RE.match(out)
        if not match:
            return out
        out = out[match.end():].strip()


class HeuristicResponseParser:
    """Split on the first rule, in priority order, that matches anywhere in the text."""

    def __init__(self, rules: tuple[SeparatorRule, ...] = SEPARATOR_RULES) -> None:
        self._rules = rules

    def _find_split(self, raw: str) -> tuple[SeparatorRule, re.Match[str]] | None:
        for rule in self._rules:
            match = rule.pattern.search(raw)
            if match is not None:
                return rule, match
        return None

    def parse(self, raw: str) -> ParsedResponse:
        text = raw or ""
        found = self._find_split(text)
        if found is None:
            return ParsedResponse(
                recruiter_analysis=strip_scaffold(text) or PLACEHOLDER_RECRUITER_ANALYSIS,
                candidate_email=PLACEHOLDER_CANDIDATE_EMAIL,
                separator=None,
            )

        rule, match = found
        before = _TRAILING_RULE_RE.sub("", text[: match.start()])
        after = text[match.start():] if rule.keep_marker else text[match.end():]
        return ParsedResponse(
            recruiter_analysis=strip_scaffold(before) or PLACEHOLDER_RECRUITER_ANALYSIS,
            candidate_email=strip_scaffold(after) or PLACEHOLDER_CANDIDATE_EMAIL,
            separator=rule.name,
        )


def parse_match_score(text: str) -> int:
    match = MATCH_SCORE_RE.search(text or "")
    if not match:
        return 0
    return max(0, min(100, int(match.group(1))))


def _header_re(section: str) -> re.Pattern[str]:
    return re.compile(
        r"(?:^|\n)[ \t#*_\d.)-]*" + re.escape(section) + r"[ \t*_]*:",
        re.IGNORECASE,
    )


_HEADER_PATTERNS = {section: _header_re(section) for section in REQUIRED_SECTIONS}


def _section_body(text: str, section: str) -> str | None:
    match = _HEADER_PATTERNS[section].search(text)
    if not match:
        return None
    start = match.end()
    end = len(text)
    for other, pattern in _HEADER_PATTERNS.items():
        if other == section:
            continue
        nxt = pattern.search(text, start)
        if nxt is not None and nxt.start() < end:
            end = nxt.start()
    return text[start:end].strip(" \t\r\n*_")


def _section_present(text: str, section: str) -> bool:
    body = _section_body(text, section)
    if not body:
        return False
    if section == "Match Score":
        return bool(re.match(r"[+-]?\d+", body))
    return True


def count_words(text: str) -> int:
    return len(text.split())


def _phrase_issues(text: str) -> list[str]:
    low = text.lower()
    return [f'Contains inappropriate phrase: "{phrase}"' for phrase in DISALLOWED_PHRASES if phrase in low]


def validate_analysis(text: str, *, max_words: int = DUAL_WORD_LIMIT) -> ValidationReport:
    """Flag missing sections, excess length and company-voice phrases; never raises."""
    body = text or ""
    missing = [section for section in REQUIRED_SECTIONS if not _section_present(body, section)]
    issues: list[str] = []

    word_count = count_words(body)
    if word_count > max_words:
        issues.append(f"Response too long ({word_count} words)")
    issues.extend(_phrase_issues(body))

    return ValidationReport(
        is_valid=not missing and not issues,
        missing_sections=missing,
        issues=issues,
        word_count=word_count,
    )


def validate_parsed(parsed: ParsedResponse, *, max_words: int = DUAL_WORD_LIMIT) -> ValidationReport:
    """Check the recruiter part for sections and length, and the email draft for phrases only."""
    report = validate_analysis(parsed.recruiter_analysis, max_words=max_words)
    for issue in _phrase_issues(parsed.candidate_email):
        if issue not in report.issues:
            report.issues.append(f"Candidate email: {issue}")
    report.is_valid = not report.missing_sections and not report.issues
    return report
