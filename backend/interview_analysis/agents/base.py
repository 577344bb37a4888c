import logging
import time
from typing import Type

from pydantic import BaseModel

from core.config import ANALYSIS_MODEL
from core.llm import complete_json
from core.prompt_manager import get_langfuse_prompt
from interview_analysis.schemas import AnalysisOutcome

logger = logging.getLogger(__name__)


def run_step(
    step: str,
    *,
    system_prompt: str,
    user_prompt: str,
    schema: Type[BaseModel],
    prompt_name: str,
    extra: dict | None = None,
) -> AnalysisOutcome:
    """One LLM call validated against ``schema``; degrades to schema defaults on any failure."""
    extra = extra or {}
    try:
        result = complete_json(
            step,
            system_prompt,
            user_prompt,
            model=ANALYSIS_MODEL,
            temperature=0.3,
            prompt=get_langfuse_prompt(prompt_name),
        )
        parsed = schema(**{**result, **extra})
        return AnalysisOutcome.analyzed(step, parsed.model_dump())
    except Exception as e:
        reason = f"{type(e).__name__}: {e}"[:300]
        logger.warning("Analysis step %s degraded to defaults: %s", step, reason)
        return AnalysisOutcome.degraded(step, schema(**extra).model_dump(), reason)


def node_timing(node: str, started: float, outcome: AnalysisOutcome) -> dict:
    return {
        "node": node,
        "duration_ms": (time.perf_counter() - started) * 1000,
        "error": outcome.reason if outcome.is_degraded else None,
    }
