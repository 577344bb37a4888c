import logging
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import (
    ConversationTurn,
    InterviewFeedback,
    InterviewQuestion,
    InterviewSession,
    JobDescription,
    Resume,
)

logger = logging.getLogger(__name__)

FEEDBACK_FIELDS = (
    "overall_feedback",
    "strengths",
    "areas_for_improvement",
    "suggested_next_steps",
    "communication_score",
    "content_score",
    "confidence_score",
    "preparation_score",
    "response_analyses",
    "resume_analysis",
    "job_fit_analysis",
    "preparation_analysis",
    "coaching_analysis",
    "degraded_steps",
    "analysis_completed_at",
)


# ── Sessions ─────────────────────────────────────────────


async def get_session(db: AsyncSession, session_id: str) -> InterviewSession | None:
    result = await db.execute(select(InterviewSession).where(InterviewSession.id == session_id))
    return result.scalar_one_or_none()


async def get_user_session(db: AsyncSession, session_id: str, user_id: str) -> InterviewSession | None:
    result = await db.execute(
        select(InterviewSession).where(
            InterviewSession.id == session_id,
            InterviewSession.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def list_completed_sessions(db: AsyncSession, user_id: str) -> list[InterviewSession]:
    result = await db.execute(
        select(InterviewSession)
        .where(InterviewSession.user_id == user_id, InterviewSession.status == "completed")
        .order_by(InterviewSession.completed_at.desc(), InterviewSession.created_at.desc())
    )
    return list(result.scalars().all())


async def mark_session_active(db: AsyncSession, session_id: str, voice_session_id: str | None) -> None:
    await db.execute(
        update(InterviewSession)
        .where(InterviewSession.id == session_id, InterviewSession.status != "completed")
        .values(status="active", started_at=datetime.now(), voice_session_id=voice_session_id)
    )
    await db.commit()


async def mark_session_completed(db: AsyncSession, session_id: str) -> None:
    await db.execute(
        update(InterviewSession)
        .where(InterviewSession.id == session_id)
        .values(status="completed", completed_at=datetime.now())
    )
    await db.commit()


async def set_overall_score(db: AsyncSession, session_id: str, score: float) -> None:
    await db.execute(
        update(InterviewSession).where(InterviewSession.id == session_id).values(overall_score=score)
    )
    await db.commit()


# ── Resume / job content ─────────────────────────────────


async def latest_resume(db: AsyncSession, user_id: str) -> Resume | None:
    result = await db.execute(
        select(Resume).where(Resume.user_id == user_id).order_by(Resume.created_at.desc()).limit(1)
    )
    return result.scalar_one_or_none()


async def latest_job(db: AsyncSession, user_id: str) -> JobDescription | None:
    result = await db.execute(
        select(JobDescription)
        .where(JobDescription.user_id == user_id)
        .order_by(JobDescription.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_resume(db: AsyncSession, resume_id: str) -> Resume | None:
    return await db.get(Resume, resume_id)


async def get_job(db: AsyncSession, job_id: str) -> JobDescription | None:
    return await db.get(JobDescription, job_id)


async def jobs_by_id(db: AsyncSession, job_ids) -> dict[str, JobDescription]:
    ids = set(job_ids)
    if not ids:
        return {}
    result = await db.execute(select(JobDescription).where(JobDescription.id.in_(ids)))
    return {job.id: job for job in result.scalars().all()}


# ── Questions ────────────────────────────────────────────


async def list_questions(db: AsyncSession, session_id: str) -> list[InterviewQuestion]:
    result = await db.execute(
        select(InterviewQuestion)
        .where(InterviewQuestion.session_id == session_id)
        .order_by(InterviewQuestion.question_order)
    )
    return list(result.scalars().all())


async def count_questions(db: AsyncSession, session_id: str) -> int:
    result = await db.execute(
        select(func.count()).select_from(InterviewQuestion).where(InterviewQuestion.session_id == session_id)
    )
    return result.scalar_one()


# ── Conversation log ─────────────────────────────────────


async def list_turns(db: AsyncSession, session_id: str) -> list[ConversationTurn]:
    result = await db.execute(
        select(ConversationTurn)
        .where(ConversationTurn.session_id == session_id)
        .order_by(ConversationTurn.turn_number)
    )
    return list(result.scalars().all())


async def append_turn(
    db: AsyncSession,
    session_id: str,
    speaker: str,
    message_type: str,
    text: str,
) -> ConversationTurn:
    """Append one turn after the current last turn. Caller commits."""
    result = await db.execute(
        select(func.max(ConversationTurn.turn_number)).where(ConversationTurn.session_id == session_id)
    )
    last = result.scalar_one_or_none() or 0
    turn = ConversationTurn(
        session_id=session_id,
        turn_number=last + 1,
        speaker=speaker,
        message_type=message_type,
        message_text=text,
        word_count=len(text.split()),
    )
    db.add(turn)
    await db.flush()
    return turn


# ── Feedback ─────────────────────────────────────────────


async def get_feedback(db: AsyncSession, session_id: str) -> InterviewFeedback | None:
    result = await db.execute(
        select(InterviewFeedback)
        .where(InterviewFeedback.session_id == session_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


def _dialect_insert(db: AsyncSession):
    if db.get_bind().dialect.name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    else:
        from sqlalchemy.dialects.sqlite import insert
    return insert


async def upsert_feedback(db: AsyncSession, session_id: str, values: dict) -> None:
    """Insert or overwrite the single feedback row for a session."""
    unknown = set(values) - set(FEEDBACK_FIELDS)
    if unknown:
        raise ValueError(f"Unknown feedback fields: {sorted(unknown)}")

    insert = _dialect_insert(db)
    stmt = insert(InterviewFeedback).values(session_id=session_id, **values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[InterviewFeedback.session_id],
        set_={**values, "updated_at": func.now()},
    )
    await db.execute(stmt)
    await db.commit()
    logger.info("Feedback upserted for session %s", session_id)


async def latest_feedback(db: AsyncSession, session_ids) -> InterviewFeedback | None:
    ids = list(session_ids)
    if not ids:
        return None
    result = await db.execute(
        select(InterviewFeedback)
        .where(InterviewFeedback.session_id.in_(ids))
        .order_by(InterviewFeedback.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()
