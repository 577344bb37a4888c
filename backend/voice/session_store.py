"""
Short-lived voice state shared by the webhook and the transcription stream.

Holds the voice-session -> interview-session mapping registered on
``session.start`` and the most recent candidate/interviewer utterance per
interview session. Entries expire after ``ttl_seconds`` of inactivity. Nothing
here is durable; the conversation log in the database is the source of truth.
"""

import logging
import threading
import time
from dataclasses import dataclass, replace

from core.config import VOICE_FALLBACK_RESOLUTION, VOICE_SESSION_TTL_SECONDS

logger = logging.getLogger(__name__)

FALLBACK_WINDOW_SECONDS = 5 * 60


@dataclass
class Transcription:
    user_text: str = ""
    agent_text: str = ""
    last_update: float = 0.0

    def to_event(self) -> dict:
        return {
            "type": "transcription",
            "userText": self.user_text,
            "agentText": self.agent_text,
            "timestamp": int(self.last_update * 1000),
        }


@dataclass
class _Mapping:
    interview_session_id: str
    registered_at: float


class VoiceSessionStore:
    def __init__(
        self,
        ttl_seconds: int = VOICE_SESSION_TTL_SECONDS,
        *,
        fallback_enabled: bool = VOICE_FALLBACK_RESOLUTION,
        clock=time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self.fallback_enabled = fallback_enabled
        self._clock = clock
        self._lock = threading.Lock()
        self._mappings: dict[str, _Mapping] = {}
        self._transcriptions: dict[str, Transcription] = {}
        self._last_registered: _Mapping | None = None

    # ------------------------------------------------------------------
    # Session mapping
    # ------------------------------------------------------------------
    def register(self, voice_session_id: str, interview_session_id: str) -> None:
        now = self._clock()
        mapping = _Mapping(interview_session_id, now)
        with self._lock:
            self._purge(now)
            self._mappings[voice_session_id] = mapping
            self._last_registered = mapping
        logger.info("Voice session %s -> interview %s", voice_session_id, interview_session_id)

    def forget(self, voice_session_id: str) -> None:
        with self._lock:
            self._mappings.pop(voice_session_id, None)

    def resolve(
        self,
        voice_session_id: str | None = None,
        interview_session_id: str | None = None,
        *,
        allow_fallback: bool = True,
    ) -> str | None:
        session_id, _ = self.lookup(voice_session_id, interview_session_id, allow_fallback=allow_fallback)
        return session_id

    def lookup(
        self,
        voice_session_id: str | None = None,
        interview_session_id: str | None = None,
        *,
        allow_fallback: bool = True,
    ) -> tuple[str | None, bool]:
        """Find the interview session a webhook event belongs to.

        An explicit ``interview_session_id`` wins, then the registered mapping.
        Without either, and when fallback is enabled, the most recently
        registered session is used, else the most recently updated
        transcription buffer inside the last five minutes.

        Returns ``(session_id, guessed)``. ``guessed`` is True only when the
        id came from the fallback.
        """
        if interview_session_id:
            return interview_session_id, False

        now = self._clock()
        with self._lock:
            self._purge(now)

            if voice_session_id and voice_session_id in self._mappings:
                return self._mappings[voice_session_id].interview_session_id, False

            if not (self.fallback_enabled and allow_fallback):
                return None, False

            if self._last_registered is not None:
                logger.warning(
                    "No mapping for voice session %s, falling back to last registered interview %s",
                    voice_session_id,
                    self._last_registered.interview_session_id,
                )
                return self._last_registered.interview_session_id, True

            recent = [
                (buffer.last_update, session_id)
                for session_id, buffer in self._transcriptions.items()
                if now - buffer.last_update <= FALLBACK_WINDOW_SECONDS
            ]
            if recent:
                _, session_id = max(recent)
                logger.warning(
                    "No mapping for voice session %s, falling back to recently active interview %s",
                    voice_session_id,
                    session_id,
                )
                return session_id, True

        return None, False

    # ------------------------------------------------------------------
    # Transcription buffer
    # ------------------------------------------------------------------
    def update_transcription(self, interview_session_id: str, speaker: str, text: str) -> None:
        if speaker not in ("user", "agent"):
            raise ValueError(f"Unknown speaker: {speaker}")

        now = self._clock()
        with self._lock:
            self._purge(now)
            buffer = self._transcriptions.setdefault(interview_session_id, Transcription())
            if speaker == "user":
                buffer.user_text = text
            else:
                buffer.agent_text = text
            buffer.last_update = now

    def get_transcription(self, interview_session_id: str) -> Transcription:
        with self._lock:
            self._purge(self._clock())
            buffer = self._transcriptions.get(interview_session_id)
            return replace(buffer) if buffer else Transcription()

    def __len__(self) -> int:
        with self._lock:
            return len(self._mappings) + len(self._transcriptions)

    def _purge(self, now: float) -> None:
        cutoff = now - self.ttl_seconds
        for key in [k for k, m in self._mappings.items() if m.registered_at < cutoff]:
            del self._mappings[key]
        for key in [k for k, t in self._transcriptions.items() if t.last_update < cutoff]:
            del self._transcriptions[key]
        if self._last_registered is not None and self._last_registered.registered_at < cutoff:
            self._last_registered = None
