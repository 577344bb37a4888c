from types import SimpleNamespace

from core import prompt_manager
from core.prompt_manager import get_prompt, render_template


def test_values_are_not_expanded_again():
    rendered = render_template(
        "Q: {{answer}}\nJob: {{job_text}}",
        {"answer": "I read {{job_text}}", "job_text": "Senior role at Acme"},
    )

    assert rendered == "Q: I read {{job_text}}\nJob: Senior role at Acme"


def test_unknown_placeholders_are_left_alone():
    assert render_template("Hi {{name}}, {{missing}}", {"name": "Jane"}) == "Hi Jane, {{missing}}"


def test_local_template_used_without_langfuse():
    assert get_prompt("voice/interviewer", fallback="Persona: {{persona}}", persona="friendly") == "Persona: friendly"


def test_langfuse_template_rendered_in_one_pass(monkeypatch):
    prompt = SimpleNamespace(prompt="Managed {{answer}} / {{company}}", version=3)
    client = SimpleNamespace(get_prompt=lambda name, label, type: prompt)
    monkeypatch.setattr(prompt_manager, "get_langfuse_client", lambda: client)

    rendered = get_prompt("analysis/response", fallback="unused", answer="{{company}}", company="Acme")

    assert rendered == "Managed {{company}} / Acme"


def test_langfuse_error_uses_local_template(monkeypatch):
    def unavailable(name, label, type):
        raise ConnectionError("down")

    monkeypatch.setattr(
        prompt_manager, "get_langfuse_client", lambda: SimpleNamespace(get_prompt=unavailable)
    )

    assert get_prompt("analysis/response", fallback="Local {{x}}", x=1) == "Local 1"
