import pytest

from core.llm import LLMResponseError
from interview.questions import GeneratedQuestion, generate_questions, stock_questions
from personas import load_persona


def _generate(count=3):
    return generate_questions(
        resume_text="Python developer",
        job_text="Backend role",
        company_name="Acme",
        job_title="Engineer",
        persona=load_persona("friendly_mentor"),
        difficulty="softball",
        count=count,
    )


def test_unknown_persona_falls_back_to_professional():
    assert load_persona("does_not_exist").persona_id == "professional"
    assert load_persona(None).persona_id == "professional"


def test_persona_configs_load():
    persona = load_persona("michael_scott")

    assert persona.persona_id == "michael_scott"
    assert persona.question_focus


def test_question_type_is_normalized():
    question = GeneratedQuestion(text="Why?", type=" Technical ")

    assert question.type == "technical"
    assert GeneratedQuestion(text="Why?", type=None).type == "behavioral"


@pytest.mark.parametrize("count, expected", [(1, 1), (3, 3), (5, 5), (10, 5)])
def test_stock_questions_are_capped(count, expected):
    assert len(stock_questions(count)) == expected


def test_generation_trims_to_requested_count(llm):
    llm.on(llm.QUESTIONS, {"questions": [{"text": f"Q{i}?", "type": "behavioral"} for i in range(5)]})

    questions = _generate(count=3)

    assert [q.text for q in questions] == ["Q0?", "Q1?", "Q2?"]


def test_generation_without_questions_raises(llm):
    llm.on(llm.QUESTIONS, {"questions": []})

    with pytest.raises(LLMResponseError):
        _generate()


def test_generation_with_invalid_json_raises(llm):
    llm.on(llm.QUESTIONS, "not json at all")

    with pytest.raises(LLMResponseError):
        _generate()
