import json
import logging
from functools import lru_cache

from core.config import ANALYSIS_MODEL, GEMINI_MODEL, MODEL_PROVIDER, get_secret
from observability.tracing import traced_generation

logger = logging.getLogger(__name__)


class LLMResponseError(ValueError):
    """The model answered, but not with the JSON object we asked for."""


@lru_cache
def get_gemini_client():
    from google import genai

    api_key = get_secret("gemini-api-key", "GEMINI_API_KEY")
    if api_key:
        return genai.Client(api_key=api_key)
    return genai.Client()


@lru_cache
def get_openai_client():
    from openai import OpenAI

    return OpenAI()


def complete_json(
    name: str,
    system_prompt: str,
    user_prompt: str,
    *,
    model: str | None = None,
    temperature: float = 0.3,
    max_tokens: int | None = None,
    prompt=None,
) -> dict:
    """Run one chat completion and parse the reply as a JSON object.

    Raises whatever the SDK raises, or LLMResponseError when the reply is not
    a JSON object. Callers decide whether to degrade.
    """
    text = _complete(
        name,
        system_prompt,
        user_prompt,
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
        json_mode=True,
        prompt=prompt,
    )
    try:
        parsed = json.loads(_strip_code_fence(text))
    except json.JSONDecodeError as e:
        raise LLMResponseError(f"{name}: invalid JSON from model ({e})") from e
    if not isinstance(parsed, dict):
        raise LLMResponseError(f"{name}: expected a JSON object, got {type(parsed).__name__}")
    return parsed


def complete_text(
    name: str,
    system_prompt: str,
    user_prompt: str,
    *,
    model: str | None = None,
    temperature: float = 0.3,
    max_tokens: int | None = None,
) -> str:
    text = _complete(
        name,
        system_prompt,
        user_prompt,
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
        json_mode=False,
    )
    return text.strip()


def _complete(
    name: str,
    system_prompt: str,
    user_prompt: str,
    *,
    model: str | None,
    temperature: float,
    max_tokens: int | None,
    json_mode: bool,
    prompt=None,
) -> str:
    if MODEL_PROVIDER == "gemini":
        return _complete_gemini(
            name, system_prompt, user_prompt, temperature, max_tokens, json_mode, prompt
        )

    model = model or ANALYSIS_MODEL
    kwargs = {
        "model": model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        "temperature": temperature,
    }
    if max_tokens:
        kwargs["max_tokens"] = max_tokens
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    with traced_generation(
        name,
        model=model,
        prompt=prompt,
        input_data={"system": system_prompt, "user": user_prompt[:2000]},
    ) as gen:
        client = get_openai_client()
        response = client.chat.completions.create(**kwargs)
        content = response.choices[0].message.content or ""

        usage = getattr(response, "usage", None)
        gen.update(
            output=content,
            usage_details={
                "input": getattr(usage, "prompt_tokens", 0),
                "output": getattr(usage, "completion_tokens", 0),
            } if usage else None,
        )

    return content


def _complete_gemini(
    name: str,
    system_prompt: str,
    user_prompt: str,
    temperature: float,
    max_tokens: int | None,
    json_mode: bool,
    prompt=None,
) -> str:
    contents = [
        {"role": "user", "parts": [{"text": system_prompt}]},
        {"role": "model", "parts": [{"text": "Understood."}]},
        {"role": "user", "parts": [{"text": user_prompt}]},
    ]
    config = {"temperature": temperature}
    if max_tokens:
        config["max_output_tokens"] = max_tokens
    if json_mode:
        config["response_mime_type"] = "application/json"

    with traced_generation(
        name,
        model=GEMINI_MODEL,
        prompt=prompt,
        input_data={"system": system_prompt, "user": user_prompt[:2000]},
    ) as gen:
        client = get_gemini_client()
        response = client.models.generate_content(
            model=GEMINI_MODEL, contents=contents, config=config
        )

        usage = getattr(response, "usage_metadata", None)
        gen.update(
            output=response.text,
            usage_details={
                "input": getattr(usage, "prompt_token_count", 0),
                "output": getattr(usage, "candidates_token_count", 0),
            } if usage else None,
        )

    return response.text or ""


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()
