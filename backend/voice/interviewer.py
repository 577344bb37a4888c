import logging
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import INTERVIEWER_MODEL
from core.llm import LLMResponseError, complete_json
from db import repository
from personas import PersonaConfig, load_persona
from voice.prompts import (
    APOLOGY,
    get_interviewer_langfuse_prompt,
    get_interviewer_prompt,
    get_interviewer_turn_prompt,
)

logger = logging.getLogger(__name__)

INTERVIEWER_MESSAGE_TYPES = ("main_question", "follow_up", "transition", "closing")
HISTORY_TURNS = 12


@dataclass
class InterviewerReply:
    message: str
    message_type: str
    degraded: bool = False


@dataclass
class InterviewContext:
    persona: PersonaConfig
    session_id: str | None = None
    position: str = "the open position"
    difficulty: str = "medium"
    questions: list[str] = field(default_factory=list)
    history: list[tuple[str, str]] = field(default_factory=list)

    def history_text(self) -> str:
        return "\n".join(f"{speaker.upper()}: {text}" for speaker, text in self.history)


async def load_context(db: AsyncSession, interview_session_id: str | None) -> InterviewContext:
    """Everything the interviewer needs to stay on script for one session.

    Unknown sessions get a generic context so the caller still gets a reply.
    """
    session = await repository.get_session(db, interview_session_id) if interview_session_id else None
    if session is None:
        return InterviewContext(persona=load_persona(None))

    job = await repository.get_job(db, session.job_description_id)
    questions = await repository.list_questions(db, session.id)
    turns = await repository.list_turns(db, session.id)

    position = "the open position"
    if job is not None and (job.job_title or job.company_name):
        position = " at ".join(part for part in (job.job_title, job.company_name) if part)

    return InterviewContext(
        persona=load_persona(session.interview_type),
        session_id=session.id,
        position=position,
        difficulty=session.difficulty_level,
        questions=[q.question_text for q in questions],
        history=[(t.speaker, t.message_text) for t in turns[-HISTORY_TURNS:]],
    )


def generate_reply(context: InterviewContext, candidate_text: str) -> InterviewerReply:
    """One interviewer turn. Never raises; falls back to a static apology."""
    system_prompt = get_interviewer_prompt(
        persona_name=context.persona.name,
        persona_tone=context.persona.tone,
        persona_instructions=context.persona.instructions,
        position=context.position,
        difficulty=context.difficulty,
        questions=context.questions,
    )
    user_prompt = get_interviewer_turn_prompt(
        history=context.history_text(),
        candidate_text=candidate_text,
    )

    try:
        result = complete_json(
            "interviewer-reply",
            system_prompt,
            user_prompt,
            model=INTERVIEWER_MODEL,
            temperature=0.7,
            max_tokens=200,
            prompt=get_interviewer_langfuse_prompt(),
        )
        message = str(result.get("message") or "").strip()
        if not message:
            raise LLMResponseError("interviewer-reply: empty message")
    except Exception as e:
        logger.error("Interviewer reply failed: %s", e)
        return InterviewerReply(message=APOLOGY, message_type="transition", degraded=True)

    message_type = result.get("message_type")
    if message_type not in INTERVIEWER_MESSAGE_TYPES:
        logger.warning("Interviewer returned unknown message_type %r, treating as follow_up", message_type)
        message_type = "follow_up"

    return InterviewerReply(message=message, message_type=message_type)
