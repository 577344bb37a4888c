from typing import Sequence

from interview_analysis.schemas import QAPair

QUESTION_TYPES = ("main_question", "follow_up")
PREPARATION_KEYWORDS = ("research", "challenge", "improvement", "priority", "opportunity")


def extract_pairs(turns: Sequence) -> list[QAPair]:
    """Rebuild question/answer pairs from the ordered conversation log.

    Each interviewer question opens a pair and the candidate responses that
    follow are joined into its answer. A pair is kept only if it received at
    least one response before the next question.
    """
    pairs: list[QAPair] = []
    question = None
    question_type = None
    answers: list[str] = []

    def close():
        if question is not None and answers:
            pairs.append(QAPair(question=question, question_type=question_type, answer=" ".join(answers)))

    for turn in turns:
        if turn.speaker == "interviewer" and turn.message_type in QUESTION_TYPES:
            close()
            question = turn.message_text
            question_type = turn.message_type
            answers = []
        elif turn.speaker == "candidate" and turn.message_type == "response" and question is not None:
            answers.append(turn.message_text.strip())

    close()
    return pairs


def candidate_transcript(turns: Sequence) -> str:
    return "\n".join(t.message_text for t in turns if t.speaker == "candidate")


def preparation_context(turns: Sequence) -> str:
    """Interviewer prompts that probed research or problem solving."""
    return "\n".join(
        t.message_text
        for t in turns
        if t.speaker == "interviewer" and any(k in t.message_text.lower() for k in PREPARATION_KEYWORDS)
    )
