from core.prompt_manager import get_prompt, get_langfuse_prompt

_FALLBACK_QUESTION_GENERATOR = """\
You are an expert interviewer who creates personalized interview questions.

# Interviewer
{{persona_name}}: {{persona_tone}}
Focus areas: {{question_focus}}

# Difficulty
{{difficulty}}. Softball questions are friendly and open, medium questions are realistic,
hard questions probe for depth and trade-offs, hard_as_fck questions are the toughest a
senior panel would ask.

# Rules
- Generate EXACTLY {{question_count}} questions.
- Questions must be relevant to the specific role and company.
- Ground questions in the candidate's real background.
- Mix behavioral, technical and situational questions.
- Each question is one sentence that can be asked aloud.

# Output
Return a JSON object:
{
  "questions": [
    {
      "text": "question text",
      "type": "behavioral|technical|situational",
      "expectedPoints": ["key point 1", "key point 2"],
      "followUp": "optional follow-up question"
    }
  ]
}
"""

_FALLBACK_QUESTION_CONTEXT = """\
Resume:
{{resume_text}}

Job Description:
{{job_text}}

Company: {{company_name}}
Position: {{job_title}}"""


def get_question_generator_prompt(
    *,
    persona_name: str,
    persona_tone: str,
    question_focus: list[str],
    difficulty: str,
    question_count: int,
) -> str:
    return get_prompt(
        "setup/question-generator",
        fallback=_FALLBACK_QUESTION_GENERATOR,
        persona_name=persona_name,
        persona_tone=persona_tone,
        question_focus=", ".join(question_focus) or "general fit",
        difficulty=difficulty,
        question_count=str(question_count),
    )


def get_question_context_prompt(
    *, resume_text: str, job_text: str, company_name: str, job_title: str
) -> str:
    return get_prompt(
        "setup/question-context",
        fallback=_FALLBACK_QUESTION_CONTEXT,
        resume_text=resume_text[:1500],
        job_text=job_text[:1500],
        company_name=company_name or "Unknown",
        job_title=job_title or "Unknown",
    )


def get_question_generator_langfuse_prompt():
    return get_langfuse_prompt("setup/question-generator")
