"""Prompt text sent to the assistant for one application."""

from __future__ import annotations

ANALYSIS_PROMPT_TEMPLATE = """Review this application as a third-party recruitment specialist and provide professional feedback.

Job Description:
{job_description}

CV/Application Content:
{applicant_text}

Respond with exactly two sections in this order.

Recruiter Analysis:
Match Score: [0-100]

Initial Feedback:
[2-3 sentences of personalized feedback focusing on key alignments or gaps]

Strengths Identified:
- [Top 2-3 relevant qualifications that align well with the role]

Areas for Enhancement:
- [2-3 specific qualifications or experiences that could be strengthened]

Recommendations:
[One clear, practical suggestion for improving the application]

Candidate Email:
Subject: [short subject line]
[A brief, polite email to the applicant summarizing the feedback above]

Note: Keep feedback brief, professional, and constructive. Write as an independent reviewer, never in the hiring company's voice."""


def format_analysis_prompt(job_description: str, applicant_text: str) -> str:
    return ANALYSIS_PROMPT_TEMPLATE.format(
        job_description=(job_description or "").strip() or "(not provided)",
        applicant_text=(applicant_text or "").strip() or "(not provided)",
    )
