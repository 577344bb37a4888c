import time
from typing import Any

from interview_analysis.agents.base import node_timing, run_step
from interview_analysis.prompts import get_preparation_analyzer_system, get_preparation_analyzer_user
from interview_analysis.schemas import PreparationAnalysis, ResultsAnalysisState


def preparation_analyzer_node(state: ResultsAnalysisState) -> dict[str, Any]:
    started = time.perf_counter()
    outcome = run_step(
        "preparation",
        system_prompt=get_preparation_analyzer_system(),
        user_prompt=get_preparation_analyzer_user(
            position=state["position"],
            preparation_context=state["preparation_context"],
            candidate_transcript=state["candidate_transcript"],
        ),
        schema=PreparationAnalysis,
        prompt_name="analysis/preparation-analyzer-system",
    )
    return {
        "preparation_outcome": outcome.model_dump(),
        "node_timings": [node_timing("preparation_analyzer", started, outcome)],
    }
