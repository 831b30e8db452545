"""HTTP surface for application analysis."""

from __future__ import annotations

from fastapi import FastAPI
from pydantic import BaseModel, Field

from src.recruitpilot.core.logging_setup import configure_logging
from src.recruitpilot.runtime.service import get_analysis_service

app = FastAPI(title="RecruitPilot Analysis")


class AnalysisRequest(BaseModel):
    applicant_text: str = Field(min_length=1)
    job_description: str = Field(min_length=1)
    job_title: str | None = None


@app.on_event("startup")
def _init_analysis_service() -> None:
    configure_logging()
    # An unreachable or unconfigured assistant must never block startup.
    get_analysis_service().start(probe_connection=True, source="app")


@app.get("/health")
def health(probe: bool = False) -> dict:
    return get_analysis_service().health(probe=probe)


@app.get("/api/assistant/config")
def assistant_config() -> dict:
    return get_analysis_service().validate_config()


@app.post("/api/analysis")
def analyze(req: AnalysisRequest) -> dict:
    return get_analysis_service().analyze(
        applicant_text=req.applicant_text,
        job_description=req.job_description,
        job_title=req.job_title,
    )
