import logging
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from core.config import ANALYSIS_MODEL
from core.llm import LLMResponseError, complete_json
from db.models import InterviewQuestion
from interview.prompts import (
    get_question_context_prompt,
    get_question_generator_langfuse_prompt,
    get_question_generator_prompt,
)
from personas import PersonaConfig

logger = logging.getLogger(__name__)


class GeneratedQuestion(BaseModel):
    """A question produced for one interview session."""
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(description="The question as it will be asked aloud")
    type: Literal["behavioral", "technical", "situational"] = Field(default="behavioral")
    expected_points: List[str] = Field(default_factory=list, alias="expectedPoints")
    follow_up: Optional[str] = Field(default=None, alias="followUp")

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value):
        value = str(value or "").strip().lower()
        return value if value in ("behavioral", "technical", "situational") else "behavioral"


STOCK_QUESTIONS = [
    GeneratedQuestion(text="Tell me about yourself and your background.", type="behavioral"),
    GeneratedQuestion(text="Why are you interested in this position?", type="behavioral"),
    GeneratedQuestion(text="Describe a challenging project you worked on.", type="behavioral"),
    GeneratedQuestion(text="What are your technical strengths?", type="technical"),
    GeneratedQuestion(text="Where do you see yourself in 5 years?", type="behavioral"),
]


def generate_questions(
    *,
    resume_text: str,
    job_text: str,
    company_name: str | None,
    job_title: str | None,
    persona: PersonaConfig,
    difficulty: str,
    count: int,
) -> list[GeneratedQuestion]:
    """Ask the model for ``count`` tailored questions. Raises on any failure."""
    system_prompt = get_question_generator_prompt(
        persona_name=persona.name,
        persona_tone=persona.tone,
        question_focus=persona.question_focus,
        difficulty=difficulty,
        question_count=count,
    )
    user_prompt = get_question_context_prompt(
        resume_text=resume_text,
        job_text=job_text,
        company_name=company_name or "",
        job_title=job_title or "",
    )

    result = complete_json(
        "question-generator",
        system_prompt,
        user_prompt,
        model=ANALYSIS_MODEL,
        temperature=0.7,
        max_tokens=1500,
        prompt=get_question_generator_langfuse_prompt(),
    )

    raw = result.get("questions")
    if not isinstance(raw, list) or not raw:
        raise LLMResponseError("question-generator: no questions in reply")

    try:
        questions = [GeneratedQuestion(**item) for item in raw if isinstance(item, dict)]
    except ValidationError as e:
        raise LLMResponseError(f"question-generator: invalid question ({e})") from e

    if not questions:
        raise LLMResponseError("question-generator: no usable questions in reply")

    logger.info("Generated %d questions (%d requested)", len(questions), count)
    return questions[:count]


def stock_questions(count: int) -> list[GeneratedQuestion]:
    return STOCK_QUESTIONS[: max(1, min(count, len(STOCK_QUESTIONS)))]


def build_question_rows(session_id: str, questions: list[GeneratedQuestion]) -> list[InterviewQuestion]:
    return [
        InterviewQuestion(
            session_id=session_id,
            question_text=q.text,
            question_order=order,
            question_type=q.type,
            expected_answer_points=q.expected_points or None,
            follow_up_question=q.follow_up,
        )
        for order, q in enumerate(questions, 1)
    ]
