import time
from typing import Any

from interview_analysis.agents.base import node_timing, run_step
from interview_analysis.prompts import get_response_analyzer_system, get_response_analyzer_user
from interview_analysis.schemas import AnalysisOutcome, ResponseAnalysis, ResultsAnalysisState

STEP = "response_quality"


def response_analyzer_node(state: ResultsAnalysisState) -> dict[str, Any]:
    started = time.perf_counter()
    system_prompt = get_response_analyzer_system()

    analyses = []
    failures = []
    for pair in state["pairs"]:
        outcome = run_step(
            STEP,
            system_prompt=system_prompt,
            user_prompt=get_response_analyzer_user(
                position=state["position"],
                question=pair["question"],
                question_type=pair["question_type"],
                answer=pair["answer"],
                job_text=state["job_text"],
            ),
            schema=ResponseAnalysis,
            prompt_name="analysis/response-analyzer-system",
            extra={
                "question": pair["question"],
                "question_type": pair["question_type"],
                "answer": pair["answer"],
            },
        )
        analyses.append(outcome.data)
        if outcome.is_degraded:
            failures.append(outcome.reason)

    if failures:
        result = AnalysisOutcome.degraded(
            STEP,
            analyses,
            f"{len(failures)} of {len(analyses)} answers used default scores ({failures[0]})",
        )
    else:
        result = AnalysisOutcome.analyzed(STEP, analyses)

    return {
        "response_outcome": result.model_dump(),
        "node_timings": [node_timing("response_analyzer", started, result)],
    }
