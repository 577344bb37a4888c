from dataclasses import asdict, dataclass
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from db import repository
from db.models import ConversationTurn, InterviewSession

NO_TURNS_PROGRESS = 20


@dataclass
class InterviewProgress:
    currentQuestion: int
    currentMainQuestion: int
    totalQuestions: int
    progress: int
    mainQuestionsAsked: int
    mainQuestionsCompleted: int
    currentQuestionType: Optional[str]
    currentFollowupCount: int
    followupLetter: Optional[str]
    totalQuestionsAsked: int

    def to_dict(self) -> dict:
        return asdict(self)


def compute_progress(turns: Sequence[ConversationTurn], total_questions: int) -> InterviewProgress:
    """Derive question position and percent complete from the ordered turn log."""
    total = max(total_questions, 1)

    if not turns:
        return InterviewProgress(
            currentQuestion=1,
            currentMainQuestion=1,
            totalQuestions=total,
            progress=NO_TURNS_PROGRESS,
            mainQuestionsAsked=0,
            mainQuestionsCompleted=0,
            currentQuestionType=None,
            currentFollowupCount=0,
            followupLetter=None,
            totalQuestionsAsked=0,
        )

    interviewer_turns = [t for t in turns if t.speaker == "interviewer"]
    asked = sum(1 for t in interviewer_turns if t.message_type == "main_question")
    asked_total = sum(1 for t in interviewer_turns if t.message_type in ("main_question", "follow_up"))
    completed = max(0, asked - 1)

    followups = 0
    for turn in reversed(interviewer_turns):
        if turn.message_type == "main_question":
            break
        if turn.message_type == "follow_up":
            followups += 1

    last = interviewer_turns[-1] if interviewer_turns else None
    current = min(max(asked, 1), total)

    if last is not None and last.message_type == "closing":
        completed = total
        current = total
        progress = 100
    else:
        progress = min(100, round(completed / total * 100))

    return InterviewProgress(
        currentQuestion=current,
        currentMainQuestion=current,
        totalQuestions=total,
        progress=progress,
        mainQuestionsAsked=asked,
        mainQuestionsCompleted=completed,
        currentQuestionType=last.message_type if last else None,
        currentFollowupCount=followups,
        followupLetter=chr(97 + followups - 1) if followups > 0 else None,
        totalQuestionsAsked=asked_total,
    )


async def get_progress(db: AsyncSession, session: InterviewSession) -> InterviewProgress:
    total = await repository.count_questions(db, session.id) or session.question_count
    turns = await repository.list_turns(db, session.id)
    return compute_progress(turns, total)
