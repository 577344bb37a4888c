"""
Results Analysis Pipeline Module

LangGraph fan-out / fan-in pipeline that scores a finished mock interview.

Pipeline Flow:
1. Response, resume, job-fit and preparation analyzers run in parallel
2. Coach joins their outputs into overall feedback
3. Orchestrator caches the result in interview_feedback and scores the session
"""

from .orchestrator import AnalysisResult, analyze_session, get_results
from .pipeline import get_compiled_graph

__all__ = [
    "AnalysisResult",
    "analyze_session",
    "get_results",
    "get_compiled_graph",
]
