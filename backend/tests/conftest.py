"""
Shared fixtures: a throwaway SQLite database per test, a scripted stand-in
for the OpenAI client, bearer tokens and an HTTP client bound to the app.
"""
import json
import os
import threading
from datetime import datetime
from types import SimpleNamespace

os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"
os.environ["LAYERCODE_WEBHOOK_SECRET"] = "test-webhook-secret"
os.environ["LAYERCODE_API_KEY"] = "test-layercode-key"
os.environ["LAYERCODE_PIPELINE_ID"] = "test-pipeline"
os.environ["MODEL_PROVIDER"] = "openai"
os.environ["VOICE_FALLBACK_RESOLUTION"] = "true"
os.environ.pop("LANGFUSE_PUBLIC_KEY", None)
os.environ.pop("LANGFUSE_SECRET_KEY", None)

import httpx
import pytest
from jose import jwt

from db.models import (
    Base,
    ConversationTurn,
    InterviewQuestion,
    InterviewSession,
    JobDescription,
    Resume,
)
from db.session import service_db, user_db
from voice.session_store import VoiceSessionStore

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


class FakeOpenAI:
    """Answers chat completions from a list of (system prompt marker, reply) routes.

    A reply is a dict (sent back as JSON), a string, an exception to raise, or
    a callable taking the request kwargs. Unrouted calls raise, which is how
    tests simulate the model being down. Nodes call this from worker threads.
    """

    INTERVIEWER = "conducting a voice interview"
    QUESTIONS = "creates personalized interview questions"
    SUMMARY = "-word summary of this"
    JOB_DETAILS = "Extract the hiring company"
    RESPONSE_ANALYZER = "scoring a single answer"
    RESUME_ANALYZER = "used their own resume"
    JOB_FIT_ANALYZER = "match a job description"
    PREPARATION_ANALYZER = "how prepared a candidate was"
    COACH = "writing the final feedback"

    def __init__(self):
        self._lock = threading.Lock()
        self.routes = []
        self.calls = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def on(self, marker: str, reply) -> "FakeOpenAI":
        self.routes.append((marker, reply))
        return self

    def count(self, marker: str | None = None) -> int:
        with self._lock:
            if marker is None:
                return len(self.calls)
            return sum(1 for call in self.calls if marker in call["messages"][0]["content"])

    def _create(self, **kwargs):
        system = kwargs["messages"][0]["content"]
        with self._lock:
            self.calls.append(kwargs)
            reply = next((r for marker, r in self.routes if marker in system), None)

        if reply is None:
            raise RuntimeError("model unavailable")
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            reply = reply(kwargs)
        if not isinstance(reply, str):
            reply = json.dumps(reply)

        message = SimpleNamespace(content=reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=None)


def make_token(user_id: str = USER_ID, email: str = "candidate@example.com") -> str:
    return jwt.encode({"sub": user_id, "email": email}, "test-jwt-secret", algorithm="HS256")


def auth(user_id: str = USER_ID) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def llm(monkeypatch):
    fake = FakeOpenAI()
    monkeypatch.setattr("core.llm.get_openai_client", lambda: fake)
    return fake


@pytest.fixture
async def database(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    user_db.configure(url)
    service_db.configure(url)
    async with user_db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield url
    await user_db.dispose()
    await service_db.dispose()


@pytest.fixture
async def db(database):
    async with user_db.session() as session:
        yield session


@pytest.fixture
def voice_store():
    return VoiceSessionStore(ttl_seconds=3600, fallback_enabled=True)


@pytest.fixture
async def client(database, voice_store, llm):
    from main import app

    app.state.voice_store = voice_store
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def seed(db):
    """Factory that stores a resume, a job, a session and optional questions/turns."""

    async def _seed(
        user_id: str = USER_ID,
        *,
        questions: int = 0,
        turns=(),
        status: str = "pending",
        overall_score: float | None = None,
        completed_at: datetime | None = None,
        job_title: str | None = "Backend Engineer",
        company_name: str | None = "Acme",
        job_content: str = "We are hiring a Backend Engineer to join our platform team.",
        question_count: int = 5,
    ) -> InterviewSession:
        resume = Resume(
            user_id=user_id,
            filename="resume.txt",
            parsed_content="Jane Doe. Five years of Python, FastAPI and PostgreSQL.",
            parsed_summary="Backend engineer with five years of Python.",
        )
        job = JobDescription(
            user_id=user_id,
            url="https://jobs.acme.com/backend",
            job_content=job_content,
            job_summary="Backend role on the platform team.",
            company_name=company_name,
            job_title=job_title,
        )
        db.add_all([resume, job])
        await db.flush()

        if status == "completed" and completed_at is None:
            completed_at = datetime.now()
        session = InterviewSession(
            user_id=user_id,
            resume_id=resume.id,
            job_description_id=job.id,
            question_count=question_count,
            status=status,
            overall_score=overall_score,
            completed_at=completed_at,
        )
        db.add(session)
        await db.flush()

        for order in range(1, questions + 1):
            db.add(InterviewQuestion(
                session_id=session.id,
                question_text=f"Question {order}?",
                question_order=order,
                question_type="behavioral",
            ))
        for number, (speaker, message_type, text) in enumerate(turns, 1):
            db.add(ConversationTurn(
                session_id=session.id,
                turn_number=number,
                speaker=speaker,
                message_type=message_type,
                message_text=text,
                word_count=len(text.split()),
            ))
        await db.commit()
        return session

    return _seed


@pytest.fixture
def headers():
    return auth(USER_ID)


@pytest.fixture
def other_headers():
    return auth(OTHER_USER_ID)
