"""AI analysis of content items via a text-completion provider."""

from .interfaces import AnalysisRequest, AnalysisResult, AnalystConfig, AnalyzerInterface, build_user_content
from .client import AnalysisClient, analyze_content

__all__ = [
    "AnalysisRequest", "AnalysisResult", "AnalystConfig", "AnalyzerInterface",
    "build_user_content", "AnalysisClient", "analyze_content"
]
