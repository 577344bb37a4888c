import json
import logging
import re
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field, ValidationError

from observability.tracing import get_langfuse_client

logger = logging.getLogger(__name__)

CONFIGS_DIR = Path(__file__).parent / "configs"
DEFAULT_PERSONA = "professional"
_PERSONA_ID_RE = re.compile(r"[a-z0-9_]+")


class PersonaConfig(BaseModel):
    """How a given interviewer persona talks and what it asks about."""
    persona_id: str = Field(description="Identifier the client sends as interviewType / persona")
    name: str = Field(description="Display name of the interviewer")
    description: str = Field(default="")
    tone: str = Field(description="Voice and manner of the interviewer")
    instructions: str = Field(default="", description="Extra behaviour rules for the interviewer")
    question_focus: List[str] = Field(default_factory=list)


def _load_from_langfuse(persona_id: str) -> PersonaConfig | None:
    client = get_langfuse_client()
    if client is None:
        return None

    try:
        prompt = client.get_prompt(f"persona/{persona_id}", label="production", type="text")
    except Exception as e:
        logger.debug("Langfuse persona/%s not available: %s", persona_id, e)
        return None

    config_json = getattr(prompt, "config", None)
    if not config_json or not isinstance(config_json, dict):
        logger.warning("Langfuse persona/%s has no valid config JSON", persona_id)
        return None

    config_json = {"persona_id": persona_id, **config_json}
    try:
        return PersonaConfig(**config_json)
    except ValidationError as e:
        logger.warning("Langfuse persona/%s config invalid (%s), ignoring", persona_id, e)
        return None


def _load_from_file(persona_id: str) -> PersonaConfig:
    config_path = CONFIGS_DIR / f"{persona_id}.json"
    if not _PERSONA_ID_RE.fullmatch(persona_id) or not config_path.exists():
        logger.warning("Unknown persona '%s', using '%s'", persona_id, DEFAULT_PERSONA)
        config_path = CONFIGS_DIR / f"{DEFAULT_PERSONA}.json"

    raw = json.loads(config_path.read_text(encoding="utf-8"))
    return PersonaConfig(**raw)


def load_persona(persona_id: str | None) -> PersonaConfig:
    persona_id = persona_id or DEFAULT_PERSONA

    config = _load_from_langfuse(persona_id)
    if config is not None:
        logger.info("Loaded persona %s from Langfuse", persona_id)
        return config

    return _load_from_file(persona_id)
