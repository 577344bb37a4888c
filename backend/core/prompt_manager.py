import logging
import re
from typing import Any

from observability.tracing import get_langfuse_client

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


def get_prompt(name: str, *, fallback: str, label: str = "production", **variables) -> str:
    """Render an interview prompt, preferring the Langfuse-managed version.

    Both forms use ``{{variable}}`` placeholders. Candidate answers, resumes
    and scraped job pages are passed in as variables, so values are inserted
    as-is and never expanded again.
    """
    client = get_langfuse_client()
    if client is None:
        return render_template(fallback, variables)

    try:
        prompt = client.get_prompt(name, label=label, type="text")
        rendered = render_template(prompt.prompt, variables)
        logger.info("Prompt '%s' fetched from Langfuse (version=%s)", name, prompt.version)
        return rendered
    except Exception as e:
        logger.warning("Langfuse prompt '%s' unavailable (%s), using fallback", name, e)
        return render_template(fallback, variables)


def get_langfuse_prompt(name: str, *, label: str = "production") -> Any | None:
    client = get_langfuse_client()
    if client is None:
        return None
    try:
        return client.get_prompt(name, label=label, type="text")
    except Exception:
        return None


def render_template(template: str, variables: dict) -> str:
    # Single pass: a value containing "{{job_text}}" stays literal.
    return _PLACEHOLDER_RE.sub(lambda m: str(variables.get(m[1], m[0])), template)
