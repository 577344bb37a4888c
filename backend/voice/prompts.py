from core.prompt_manager import get_prompt, get_langfuse_prompt

_FALLBACK_INTERVIEWER = """\
# Role & Objective
You are {{persona_name}}, a job interviewer conducting a voice interview for LickedIn Interviews.
The candidate is interviewing for: {{position}}.

# Personality & Tone
## Personality
- {{persona_tone}}
## Length
- 1-2 sentences per turn. This is spoken aloud, keep it natural.
## Difficulty
- Difficulty level: {{difficulty}}. Softball means friendly and forgiving, hard means probing and skeptical.
## Extra rules
- {{persona_instructions}}

# Interview Plan
Ask these main questions in order, one at a time. You may ask at most two short follow-ups on an answer before moving on.
{{questions_block}}

# Output
Return a JSON object: {"message": "<what you say next>", "message_type": "<type>"}
message_type is one of:
- "main_question": you are asking the next question from the plan (or the first one after your introduction)
- "follow_up": you are probing the answer to the current question
- "transition": small talk or acknowledgement with no question
- "closing": every planned question has been covered and you are wrapping up the interview
"""

_FALLBACK_INTERVIEWER_TURN = """\
Conversation so far:
{{history}}

Candidate just said: "{{candidate_text}}"

Reply as the interviewer."""

APOLOGY = "I apologize, but I'm having some technical difficulties. Let's continue with your interview."

OPENING_CANDIDATE_TEXT = "Hello"


def get_interviewer_prompt(
    *,
    persona_name: str,
    persona_tone: str,
    persona_instructions: str,
    position: str,
    difficulty: str,
    questions: list[str],
) -> str:
    questions_block = "\n".join(f"{i}. {q}" for i, q in enumerate(questions, 1)) or (
        "1. Tell me about yourself and your background."
    )
    return get_prompt(
        "voice/interviewer",
        fallback=_FALLBACK_INTERVIEWER,
        persona_name=persona_name,
        persona_tone=persona_tone,
        persona_instructions=persona_instructions or "Stay on topic.",
        position=position,
        difficulty=difficulty,
        questions_block=questions_block,
    )


def get_interviewer_turn_prompt(*, history: str, candidate_text: str) -> str:
    return get_prompt(
        "voice/interviewer-turn",
        fallback=_FALLBACK_INTERVIEWER_TURN,
        history=history or "(the interview is just starting)",
        candidate_text=candidate_text,
    )


def get_interviewer_langfuse_prompt():
    return get_langfuse_prompt("voice/interviewer")
