import hashlib
import hmac
import json
import logging
import time

import httpx

from core.config import LAYERCODE_AUTHORIZE_URL, layercode_api_key, layercode_pipeline_id

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "layercode-signature"
SIGNATURE_TOLERANCE_SECONDS = 5 * 60


class VoiceAuthorizationError(RuntimeError):
    pass


async def authorize_session(interview_session_id: str | None, metadata: dict | None = None) -> dict:
    """Exchange our API key for a client session key the browser SDK can use."""
    payload = {
        "pipeline_id": layercode_pipeline_id(),
        "session_context": {
            "interview_session_id": interview_session_id,
            "service": "LickedIn Interviews Voice",
            **(metadata or {}),
        },
    }
    headers = {"Authorization": f"Bearer {layercode_api_key()}"}

    async with httpx.AsyncClient(timeout=15.0) as client:
        response = await client.post(LAYERCODE_AUTHORIZE_URL, json=payload, headers=headers)

    if response.status_code >= 400:
        logger.error("Voice authorization failed (%d): %s", response.status_code, response.text[:500])
        raise VoiceAuthorizationError(f"Voice pipeline API error: {response.status_code}")

    data = response.json()
    logger.info(
        "Voice session authorized (session_id=%s, has_key=%s)",
        data.get("session_id"),
        bool(data.get("client_session_key")),
    )
    return data


def verify_signature(body: bytes, signature: str, secret: str, *, now: float | None = None) -> bool:
    """Check a ``t=<unix>,v1=<hex>`` header against an HMAC-SHA256 of ``"<t>.<body>"``."""
    try:
        parts = dict(item.strip().split("=", 1) for item in signature.split(","))
        timestamp = int(parts["t"])
        received = parts["v1"]
    except (KeyError, ValueError):
        return False

    now = time.time() if now is None else now
    if abs(now - timestamp) > SIGNATURE_TOLERANCE_SECONDS:
        return False

    signed = f"{timestamp}.".encode() + body
    expected = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, received)


def sign(body: bytes, secret: str, timestamp: int | None = None) -> str:
    timestamp = int(time.time()) if timestamp is None else timestamp
    digest = hmac.new(secret.encode(), f"{timestamp}.".encode() + body, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


# ---------------------------------------------------------------------------
# Webhook response events
# ---------------------------------------------------------------------------
def sse_event(data: dict) -> str:
    return f"data: {json.dumps(data)}\n\n"


def data_event(content: dict, turn_id) -> str:
    return sse_event({"type": "response.data", "content": content, "turn_id": turn_id})


def tts_event(content: str, turn_id) -> str:
    return sse_event({"type": "response.tts", "content": content, "turn_id": turn_id})


def end_event(turn_id) -> str:
    return sse_event({"type": "response.end", "turn_id": turn_id})
