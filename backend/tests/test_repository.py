import pytest
from sqlalchemy import func, select

from db import repository
from db.models import InterviewFeedback
from db.session import service_db


async def test_feedback_upsert_keeps_one_row_per_session(seed, db):
    session = await seed(status="completed")

    await repository.upsert_feedback(db, session.id, {"overall_feedback": "First", "content_score": 60})
    async with service_db.session() as service:
        await repository.upsert_feedback(service, session.id, {"overall_feedback": "Second", "content_score": 80})

    count = await db.execute(
        select(func.count()).select_from(InterviewFeedback).where(InterviewFeedback.session_id == session.id)
    )
    assert count.scalar_one() == 1

    feedback = await repository.get_feedback(db, session.id)
    assert feedback.overall_feedback == "Second"
    assert feedback.content_score == 80


async def test_feedback_upsert_rejects_unknown_fields(seed, db):
    session = await seed()

    with pytest.raises(ValueError):
        await repository.upsert_feedback(db, session.id, {"session_id": "other"})


async def test_append_turn_numbers_sequentially(seed, db):
    session = await seed(turns=[("interviewer", "main_question", "Why us?")])

    first = await repository.append_turn(db, session.id, "candidate", "response", "Because of the mission.")
    second = await repository.append_turn(db, session.id, "interviewer", "follow_up", "Which part?")
    await db.commit()

    assert (first.turn_number, second.turn_number) == (2, 3)
    assert first.word_count == 4
    assert [t.turn_number for t in await repository.list_turns(db, session.id)] == [1, 2, 3]


async def test_mark_active_does_not_reopen_completed_session(seed, db):
    session = await seed(status="completed")

    await repository.mark_session_active(db, session.id, "voice-1")

    refreshed = await repository.get_session(db, session.id)
    await db.refresh(refreshed)
    assert refreshed.status == "completed"


async def test_user_session_is_scoped_to_owner(seed, db):
    session = await seed("user-1")

    assert await repository.get_user_session(db, session.id, "user-1") is not None
    assert await repository.get_user_session(db, session.id, "user-2") is None
