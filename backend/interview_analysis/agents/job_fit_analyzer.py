import time
from typing import Any

from interview_analysis.agents.base import node_timing, run_step
from interview_analysis.prompts import get_job_fit_analyzer_system, get_job_fit_analyzer_user
from interview_analysis.schemas import JobFitAnalysis, ResultsAnalysisState


def job_fit_analyzer_node(state: ResultsAnalysisState) -> dict[str, Any]:
    started = time.perf_counter()
    outcome = run_step(
        "job_fit",
        system_prompt=get_job_fit_analyzer_system(),
        user_prompt=get_job_fit_analyzer_user(
            position=state["position"],
            job_text=state["job_text"],
            candidate_transcript=state["candidate_transcript"],
        ),
        schema=JobFitAnalysis,
        prompt_name="analysis/job-fit-analyzer-system",
    )
    return {
        "job_fit_outcome": outcome.model_dump(),
        "node_timings": [node_timing("job_fit_analyzer", started, outcome)],
    }
