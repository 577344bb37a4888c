import time
from typing import Any

from interview_analysis.agents.base import node_timing, run_step
from interview_analysis.prompts import get_resume_analyzer_system, get_resume_analyzer_user
from interview_analysis.schemas import ResultsAnalysisState, ResumeAnalysis


def resume_analyzer_node(state: ResultsAnalysisState) -> dict[str, Any]:
    started = time.perf_counter()
    outcome = run_step(
        "resume_utilization",
        system_prompt=get_resume_analyzer_system(),
        user_prompt=get_resume_analyzer_user(
            resume_text=state["resume_text"],
            candidate_transcript=state["candidate_transcript"],
        ),
        schema=ResumeAnalysis,
        prompt_name="analysis/resume-analyzer-system",
    )
    return {
        "resume_outcome": outcome.model_dump(),
        "node_timings": [node_timing("resume_analyzer", started, outcome)],
    }
