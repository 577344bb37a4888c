import json
import time
from typing import Any

from interview_analysis.agents.base import node_timing, run_step
from interview_analysis.prompts import get_coach_system, get_coach_user
from interview_analysis.schemas import CoachingFeedback, ResultsAnalysisState


def _brief(outcome: dict | None) -> str:
    if not outcome:
        return "(not available)"
    text = json.dumps(outcome["data"], ensure_ascii=False, indent=1)
    if outcome["status"] == "degraded":
        text = "(default values, analysis unavailable)\n" + text
    return text[:3000]


def coach_node(state: ResultsAnalysisState) -> dict[str, Any]:
    """Runs after the four analyzers join; turns their outputs into coaching feedback."""
    started = time.perf_counter()
    outcome = run_step(
        "coaching",
        system_prompt=get_coach_system(),
        user_prompt=get_coach_user(
            position=state["position"],
            response_analyses=_brief(state.get("response_outcome")),
            resume_analysis=_brief(state.get("resume_outcome")),
            job_fit_analysis=_brief(state.get("job_fit_outcome")),
            preparation_analysis=_brief(state.get("preparation_outcome")),
        ),
        schema=CoachingFeedback,
        prompt_name="analysis/coach-system",
    )
    return {
        "coaching_outcome": outcome.model_dump(),
        "node_timings": [node_timing("coach", started, outcome)],
    }
