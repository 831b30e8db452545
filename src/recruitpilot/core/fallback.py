"""Deterministic results used when the assistant cannot be used."""

from __future__ import annotations

from .analysis_types import AnalysisResult, ValidationReport
from .response_parser import count_words, validate_analysis

FALLBACK_MATCH_SCORE = 50

FALLBACK_RECRUITER_ANALYSIS = """Match Score: 50

Initial Feedback:
Automated analysis is not available for this application. The score is a neutral placeholder and does not reflect the applicant's fit.

Strengths Identified:
- Not assessed automatically; see the submitted cover letter and resume.

Areas for Enhancement:
- Not assessed automatically; a reviewer should compare the application with the job requirements.

Recommendations:
Review this application manually before contacting the applicant."""

FALLBACK_CANDIDATE_EMAIL = """Dear Candidate,

Thank you for submitting your application. It has been received and is currently under review by the hiring team.

You will be contacted about next steps once the review is complete.

Best regards,
RecruitPilot AI Team"""

ERROR_RECRUITER_ANALYSIS = (
    "Automated analysis could not be completed for this application and it requires manual review. "
    "The application itself was submitted successfully."
)

ERROR_CANDIDATE_EMAIL = """Dear Candidate,

We apologize, but we couldn't complete the analysis at this moment. Your application has been submitted and will be reviewed by the hiring team.

Best regards,
RecruitPilot AI Team"""


def generate_fallback() -> AnalysisResult:
    """Static, policy-compliant pair of artifacts with a neutral score."""
    validation = validate_analysis(f"{FALLBACK_RECRUITER_ANALYSIS}\n\n{FALLBACK_CANDIDATE_EMAIL}")
    return AnalysisResult(
        success=True,
        recruiter_analysis=FALLBACK_RECRUITER_ANALYSIS,
        candidate_email=FALLBACK_CANDIDATE_EMAIL,
        match_score=FALLBACK_MATCH_SCORE,
        validation=validation,
        source="fallback",
    )


def generate_error_result(error: BaseException | str, *, conversation_id: str | None = None) -> AnalysisResult:
    """Result for a call that failed after the assistant was reached."""
    message = str(error) or error.__class__.__name__
    return AnalysisResult(
        success=False,
        recruiter_analysis=ERROR_RECRUITER_ANALYSIS,
        candidate_email=ERROR_CANDIDATE_EMAIL,
        match_score=0,
        validation=ValidationReport(
            is_valid=False,
            missing_sections=[],
            issues=[f"Analysis failed: {message}"],
            word_count=count_words(ERROR_RECRUITER_ANALYSIS),
        ),
        error_message=message,
        source="error",
        conversation_id=conversation_id,
    )
