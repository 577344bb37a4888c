import asyncio
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from db import repository
from db.models import InterviewFeedback, InterviewSession
from db.session import service_db
from interview_analysis.pipeline import get_compiled_graph
from interview_analysis.schemas import (
    AnalysisOutcome,
    CoachingFeedback,
    JobFitAnalysis,
    PreparationAnalysis,
    ResultsAnalysisState,
    ResumeAnalysis,
)
from interview_analysis.transcript import candidate_transcript, extract_pairs, preparation_context
from observability.tracing import PipelineTrace

logger = logging.getLogger(__name__)

STATUS_CACHED = "cached"
STATUS_GENERATED = "generated"
STATUS_NO_CONVERSATION = "no_conversation"

# state key -> (step name, degraded default)
_OUTCOME_KEYS = {
    "response_outcome": ("response_quality", list),
    "resume_outcome": ("resume_utilization", lambda: ResumeAnalysis().model_dump()),
    "job_fit_outcome": ("job_fit", lambda: JobFitAnalysis().model_dump()),
    "preparation_outcome": ("preparation", lambda: PreparationAnalysis().model_dump()),
    "coaching_outcome": ("coaching", lambda: CoachingFeedback().model_dump()),
}


@dataclass
class AnalysisResult:
    values: dict
    overall_score: int
    degraded_steps: dict[str, str] = field(default_factory=dict)


def is_feedback_complete(feedback: InterviewFeedback | None) -> bool:
    """A feedback row is a usable cache only once every analysis blob is stored."""
    if feedback is None:
        return False
    return (
        feedback.analysis_completed_at is not None
        and feedback.response_analyses is not None
        and bool(feedback.resume_analysis)
        and bool(feedback.job_fit_analysis)
        and (bool(feedback.preparation_analysis) or feedback.preparation_score is not None)
    )


def overall_score(communication: float, content: float, confidence: float, preparation: float) -> int:
    # Halves round up: 76.5 scores 77.
    return math.floor((communication + content + confidence + preparation) / 4 + 0.5)


def _outcomes(final_state: dict) -> dict[str, AnalysisOutcome]:
    outcomes = {}
    for key, (step, default) in _OUTCOME_KEYS.items():
        raw = final_state.get(key)
        if raw:
            outcomes[key] = AnalysisOutcome(**raw)
        else:
            outcomes[key] = AnalysisOutcome.degraded(step, default(), "step did not run")
    return outcomes


def build_feedback_values(final_state: dict) -> AnalysisResult:
    outcomes = _outcomes(final_state)
    coaching = outcomes["coaching_outcome"].data
    preparation = outcomes["preparation_outcome"].data

    degraded = {o.step: o.reason for o in outcomes.values() if o.is_degraded}
    score = overall_score(
        coaching["communication_score"],
        coaching["content_score"],
        coaching["confidence_score"],
        preparation["preparation_score"],
    )

    values = {
        "overall_feedback": coaching["overall_feedback"],
        "strengths": coaching["strengths"],
        "areas_for_improvement": coaching["areas_for_improvement"],
        "suggested_next_steps": coaching["suggested_next_steps"],
        "communication_score": coaching["communication_score"],
        "content_score": coaching["content_score"],
        "confidence_score": coaching["confidence_score"],
        "preparation_score": preparation["preparation_score"],
        "response_analyses": outcomes["response_outcome"].data,
        "resume_analysis": outcomes["resume_outcome"].data,
        "job_fit_analysis": outcomes["job_fit_outcome"].data,
        "preparation_analysis": preparation,
        "coaching_analysis": coaching,
        "degraded_steps": degraded,
        "analysis_completed_at": datetime.now(),
    }
    return AnalysisResult(values=values, overall_score=score, degraded_steps=degraded)


async def analyze_session(
    db: AsyncSession,
    session: InterviewSession,
    *,
    service_session_factory=None,
) -> AnalysisResult | None:
    """Run the full analysis and persist it. Returns None when nothing was said yet."""
    turns = await repository.list_turns(db, session.id)
    if not turns:
        return None

    resume = await repository.get_resume(db, session.resume_id)
    job = await repository.get_job(db, session.job_description_id)
    pairs = extract_pairs(turns)

    position = "the role"
    if job is not None and (job.job_title or job.company_name):
        position = " at ".join(p for p in (job.job_title, job.company_name) if p)

    initial_state: ResultsAnalysisState = {
        "session_id": session.id,
        "position": position,
        "pairs": [p.model_dump() for p in pairs],
        "candidate_transcript": candidate_transcript(turns),
        "preparation_context": preparation_context(turns),
        "resume_text": (resume.parsed_content or resume.parsed_summary or "") if resume else "",
        "job_text": (job.job_content or job.job_summary or "") if job else "",
        "response_outcome": None,
        "resume_outcome": None,
        "job_fit_outcome": None,
        "preparation_outcome": None,
        "coaching_outcome": None,
        "node_timings": [],
    }

    with PipelineTrace(
        pipeline_name="results_analysis",
        user_id=session.user_id,
        session_id=session.id,
        metadata={"turns": len(turns), "pairs": len(pairs), "demo_type": session.demo_type},
    ) as trace:
        compiled = get_compiled_graph()
        final_state = await asyncio.to_thread(compiled.invoke, initial_state)

        for timing in final_state.get("node_timings", []):
            trace.log_node(
                timing["node"],
                output_data={"degraded": timing["error"] is not None},
                duration_ms=timing["duration_ms"],
                error=timing["error"],
            )

    result = build_feedback_values(final_state)

    factory = service_session_factory or service_db.session
    async with factory() as service:
        await repository.upsert_feedback(service, session.id, result.values)
        await repository.set_overall_score(service, session.id, result.overall_score)

    if result.degraded_steps:
        logger.warning("Analysis for %s degraded steps: %s", session.id, sorted(result.degraded_steps))
    logger.info("Analysis for %s stored (overall_score=%d)", session.id, result.overall_score)
    return result


async def get_results(
    db: AsyncSession,
    session: InterviewSession,
    *,
    service_session_factory=None,
) -> dict:
    feedback = await repository.get_feedback(db, session.id)

    if is_feedback_complete(feedback):
        logger.info("Serving cached analysis for %s", session.id)
        return build_results_response(session, feedback, STATUS_CACHED)

    result = await analyze_session(db, session, service_session_factory=service_session_factory)
    if result is None:
        return build_results_response(session, feedback, STATUS_NO_CONVERSATION)

    feedback = await repository.get_feedback(db, session.id)
    await db.refresh(session)
    return build_results_response(session, feedback, STATUS_GENERATED)


def build_results_response(
    session: InterviewSession,
    feedback: InterviewFeedback | None,
    status: str,
) -> dict:
    analyses = (feedback.response_analyses or []) if feedback else []
    question_analysis = [
        {
            "questionNumber": number,
            "question": item.get("question"),
            "questionType": item.get("question_type"),
            "answer": item.get("answer"),
            "qualityScore": item.get("quality_score"),
            "strengths": item.get("strengths", []),
            "weaknesses": item.get("weaknesses", []),
            "suggestions": item.get("suggestions", []),
            "keywordAlignment": item.get("keyword_alignment", []),
            "missedOpportunities": item.get("missed_opportunities", []),
        }
        for number, item in enumerate(analyses, 1)
    ]

    ai_analysis = None
    if feedback is not None:
        ai_analysis = {
            "responseAnalyses": feedback.response_analyses,
            "resumeAnalysis": feedback.resume_analysis,
            "jobFitAnalysis": feedback.job_fit_analysis,
            "preparationAnalysis": feedback.preparation_analysis,
            "coachingAnalysis": feedback.coaching_analysis,
        }

    return {
        "session": session.to_dict(),
        "feedback": feedback.to_dict() if feedback else None,
        "questionAnalysis": question_analysis,
        "aiAnalysis": ai_analysis,
        "analysisStatus": status,
        "degradedSteps": (feedback.degraded_steps or {}) if feedback else {},
    }
