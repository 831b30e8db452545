"""Runtime service facade exports."""

from .service import AnalysisService, get_analysis_service

__all__ = ["AnalysisService", "get_analysis_service"]
