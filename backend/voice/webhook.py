"""
Voice pipeline webhook handling.

The voice pipeline posts one event per turn. For each event we work out which
interview session it belongs to, keep the live transcription buffer current,
ask the interviewer model for the next utterance, append both sides to the
conversation log, and answer with the server-sent events the pipeline speaks.
A session reached only through the fallback guess gets the live buffer but
nothing in the database.
"""

import asyncio
import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from db import repository
from voice.interviewer import InterviewerReply, generate_reply, load_context
from voice.layercode import data_event, end_event, tts_event
from voice.prompts import OPENING_CANDIDATE_TEXT
from voice.session_store import VoiceSessionStore

logger = logging.getLogger(__name__)

RECORD_ATTEMPTS = 2


class VoiceWebhookEvent(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    session_id: Optional[str] = None
    turn_id: Optional[Any] = None
    text: Optional[str] = None
    session_context: Optional[dict] = None

    @property
    def kind(self) -> str:
        return (self.type or "message").lower()

    def interview_session_id(self, query_value: str | None) -> str | None:
        if query_value:
            return query_value
        if self.session_context:
            return self.session_context.get("interview_session_id")
        return None


async def handle_event(
    event: VoiceWebhookEvent,
    *,
    store: VoiceSessionStore,
    db: AsyncSession,
    interview_session_id: str | None = None,
) -> list[str]:
    explicit_id = event.interview_session_id(interview_session_id)
    logger.info(
        "Voice webhook %s (voice_session=%s, interview=%s, turn=%s)",
        event.kind,
        event.session_id,
        explicit_id,
        event.turn_id,
    )

    if event.kind == "session.start":
        return await _on_session_start(event, store, db, explicit_id)
    if event.kind == "session.end":
        return await _on_session_end(event, store, db, explicit_id)
    if event.kind == "message":
        return await _on_message(event, store, db, explicit_id)

    logger.info("Ignoring voice webhook event type %s", event.type)
    return [end_event(event.turn_id)]


async def _on_session_start(event, store, db, explicit_id) -> list[str]:
    if event.session_id and explicit_id:
        store.register(event.session_id, explicit_id)

    resolved, guessed = store.lookup(event.session_id, explicit_id)
    context = await load_context(db, resolved)
    durable = bool(context.session_id) and not guessed

    if durable:
        await repository.mark_session_active(db, context.session_id, event.session_id)
    elif context.session_id:
        logger.info("Interview %s was guessed for voice session %s, not recording", resolved, event.session_id)

    reply = await asyncio.to_thread(generate_reply, context, OPENING_CANDIDATE_TEXT)

    if context.session_id:
        store.update_transcription(context.session_id, "agent", reply.message)
    if durable:
        await _record_turns(db, context.session_id, None, reply)

    return [
        data_event({"type": "agent_transcription", "text": reply.message}, event.turn_id),
        tts_event(reply.message, event.turn_id),
        end_event(event.turn_id),
    ]


async def _on_message(event, store, db, explicit_id) -> list[str]:
    text = (event.text or "").strip()
    resolved, guessed = store.lookup(event.session_id, explicit_id)
    context = await load_context(db, resolved)
    buffered = bool(text and context.session_id)
    durable = buffered and not guessed

    if not context.session_id:
        logger.info("No interview session for voice session %s, not recording", event.session_id)
    elif guessed:
        logger.info("Interview %s was guessed for voice session %s, buffering only", resolved, event.session_id)

    events = []
    if text:
        events.append(data_event({"type": "user_transcription", "text": text}, event.turn_id))
    if buffered:
        store.update_transcription(context.session_id, "user", text)

    reply = await asyncio.to_thread(generate_reply, context, text or OPENING_CANDIDATE_TEXT)

    if buffered:
        store.update_transcription(context.session_id, "agent", reply.message)
    if durable:
        await _record_turns(db, context.session_id, text, reply)

    events.append(data_event({"type": "agent_transcription", "text": reply.message}, event.turn_id))
    events.append(tts_event(reply.message, event.turn_id))
    events.append(end_event(event.turn_id))
    return events


async def _on_session_end(event, store, db, explicit_id) -> list[str]:
    resolved = store.resolve(event.session_id, explicit_id, allow_fallback=False)
    if resolved and await repository.get_session(db, resolved) is not None:
        await repository.mark_session_completed(db, resolved)
        logger.info("Interview %s completed", resolved)
    if event.session_id:
        store.forget(event.session_id)
    return [end_event(event.turn_id)]


async def _record_turns(
    db: AsyncSession,
    session_id: str,
    candidate_text: str | None,
    reply: InterviewerReply,
) -> None:
    """Append one exchange to the conversation log.

    Overlapping webhooks for a session can pick the same turn number. The
    losing write is rolled back and retried on top of the other one. If it
    still fails the exchange is logged and dropped, and the reply is spoken
    regardless.
    """
    for attempt in range(1, RECORD_ATTEMPTS + 1):
        try:
            if candidate_text:
                await repository.append_turn(db, session_id, "candidate", "response", candidate_text)
            await repository.append_turn(db, session_id, "interviewer", reply.message_type, reply.message)
            await db.commit()
            return
        except IntegrityError as e:
            await db.rollback()
            if attempt < RECORD_ATTEMPTS:
                logger.warning("Turn number taken for interview %s, retrying (%d/%d)", session_id, attempt, RECORD_ATTEMPTS)
            else:
                logger.error("Could not record turns for interview %s: %s", session_id, e)
