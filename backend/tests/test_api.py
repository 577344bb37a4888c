"""
Read models, session creation, demos and the voice helper endpoints.
"""
import json
from datetime import datetime, timedelta

import httpx

import main
from db import repository
from db.models import Resume
from db.session import user_db
from interview.questions import STOCK_QUESTIONS
from voice import layercode


async def _questions(session_id):
    async with user_db.session() as db:
        return await repository.list_questions(db, session_id)


async def _get_session(session_id):
    async with user_db.session() as db:
        return await repository.get_session(db, session_id)


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


# =============================================================================
# Dashboard
# =============================================================================


async def test_dashboard_stats_over_completed_sessions(client, seed, headers):
    now = datetime.now()
    await seed(status="completed", overall_score=70, completed_at=now - timedelta(days=2))
    await seed(status="completed", overall_score=85, completed_at=now - timedelta(days=1))
    await seed(status="completed", overall_score=None, completed_at=now)
    await seed(status="active")
    await seed("user-2", status="completed", overall_score=99)

    response = await client.get("/api/dashboard", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["stats"] == {"totalInterviews": 3, "averageScore": 78, "bestScore": 85}
    recent = body["recentInterviews"]
    assert [r["score"] for r in recent] == [0, 85, 70]
    assert recent[0]["position"] == "Backend Engineer @ Acme"


async def test_dashboard_position_falls_back_to_job_text(client, seed, headers):
    await seed(
        status="completed",
        overall_score=60,
        job_title=None,
        company_name=None,
        job_content="Position: Staff Engineer at Globex, fully remote.",
    )

    response = await client.get("/api/dashboard", headers=headers)

    interview = response.json()["recentInterviews"][0]
    assert interview["company_name"] == "Globex"
    assert interview["position"].endswith("@ Globex")


async def test_dashboard_keeps_ten_most_recent(client, seed, headers):
    now = datetime.now()
    for days in range(12):
        await seed(status="completed", overall_score=50 + days, completed_at=now - timedelta(days=days))

    body = (await client.get("/api/dashboard", headers=headers)).json()

    assert body["stats"]["totalInterviews"] == 12
    assert len(body["recentInterviews"]) == 10
    assert body["recentInterviews"][0]["score"] == 50


async def test_dashboard_with_no_interviews(client, headers):
    body = (await client.get("/api/dashboard", headers=headers)).json()

    assert body == {"stats": {"totalInterviews": 0, "averageScore": 0, "bestScore": 0}, "recentInterviews": []}


# =============================================================================
# Latest interview
# =============================================================================


async def test_latest_interview_without_sessions(client, headers):
    body = (await client.get("/api/latest-interview", headers=headers)).json()

    assert body["success"] is False
    assert body["hasInterviews"] is False


async def test_latest_interview_prefers_session_with_feedback(client, seed, headers, db):
    now = datetime.now()
    with_feedback = await seed(status="completed", completed_at=now - timedelta(hours=2))
    await seed(status="completed", completed_at=now)
    await repository.upsert_feedback(db, with_feedback.id, {"overall_feedback": "Good"})

    body = (await client.get("/api/latest-interview", headers=headers)).json()

    assert body["sessionId"] == with_feedback.id
    assert body["hasFeedback"] is True


async def test_latest_interview_falls_back_to_most_recent(client, seed, headers):
    now = datetime.now()
    await seed(status="completed", completed_at=now - timedelta(hours=2))
    newest = await seed(status="completed", completed_at=now)

    body = (await client.get("/api/latest-interview", headers=headers)).json()

    assert body["sessionId"] == newest.id
    assert body["hasFeedback"] is False


# =============================================================================
# POST /api/interview/create
# =============================================================================


async def test_create_without_resume_is_rejected(client, headers, llm):
    response = await client.post("/api/interview/create", json={}, headers=headers)

    assert response.status_code == 400
    assert response.json() == {"error": "No resume found. Please upload a resume first."}
    assert llm.count() == 0


async def test_create_without_job_is_rejected(client, headers, db):
    db.add(Resume(user_id="user-1", filename="resume.txt", parsed_content="Jane Doe"))
    await db.commit()

    response = await client.post("/api/interview/create", json={}, headers=headers)

    assert response.status_code == 400
    assert response.json()["error"] == "No job description found. Please process a job URL first."


async def test_create_generates_questions_with_persona(client, seed, headers, llm):
    llm.on(llm.QUESTIONS, {"questions": [
        {"text": "How do you scale Postgres?", "type": "technical", "expectedPoints": ["replicas"]},
        {"text": "Tell me about a conflict.", "type": "Behavioral", "followUp": "What changed?"},
        {"text": "A service is down at 3am. What now?", "type": "riddle"},
    ]})
    await seed()

    response = await client.post(
        "/api/interview/create",
        json={"difficulty": "hard", "interviewType": "tech_lead", "questionCount": 3},
        headers=headers,
    )

    assert response.status_code == 200
    body = response.json()
    session = await _get_session(body["sessionId"])
    assert session.interview_type == "tech_lead"
    assert session.difficulty_level == "hard"
    assert session.question_count == 3

    questions = await _questions(session.id)
    assert [q.question_order for q in questions] == [1, 2, 3]
    assert [q.question_type for q in questions] == ["technical", "behavioral", "behavioral"]
    assert questions[0].expected_answer_points == ["replicas"]
    assert questions[1].follow_up_question == "What changed?"

    system_prompt = llm.calls[0]["messages"][0]["content"]
    assert "EXACTLY 3 questions" in system_prompt


async def test_create_falls_back_to_stock_questions(client, seed, headers, llm):
    await seed()

    response = await client.post("/api/interview/create", json={"persona": "michael_scott"}, headers=headers)

    assert response.status_code == 200
    questions = await _questions(response.json()["sessionId"])
    assert [q.question_text for q in questions] == [q.text for q in STOCK_QUESTIONS]


async def test_create_validates_question_count(client, seed, headers):
    await seed()

    response = await client.post("/api/interview/create", json={"questionCount": 11}, headers=headers)

    assert response.status_code == 400


# =============================================================================
# Demo scenarios
# =============================================================================


async def test_demo_seeds_fixed_questions(client, headers, llm):
    response = await client.post("/api/demo/tony-stark", headers=headers)

    assert response.status_code == 200
    session = await _get_session(response.json()["sessionId"])
    assert session.demo_type == "tony_stark"
    assert session.user_id == "user-1"
    assert len(await _questions(session.id)) == 8


async def test_unknown_demo_is_not_found(client, headers):
    response = await client.post("/api/demo/batman", headers=headers)

    assert response.status_code == 404


# =============================================================================
# Voice authorization and transcription stream
# =============================================================================


def _mock_layercode(monkeypatch, handler):
    real_client = httpx.AsyncClient

    def client_factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return real_client(*args, **kwargs)

    monkeypatch.setattr(layercode.httpx, "AsyncClient", client_factory)


async def test_voice_auth_returns_pipeline_response(client, monkeypatch):
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        seen["auth"] = request.headers["authorization"]
        return httpx.Response(200, json={"client_session_key": "csk", "session_id": "voice-1"})

    _mock_layercode(monkeypatch, handler)

    response = await client.post("/api/voice-auth", json={"sessionId": "interview-1", "metadata": {"persona": "x"}})

    assert response.status_code == 200
    assert response.json() == {"client_session_key": "csk", "session_id": "voice-1"}
    assert seen["auth"] == "Bearer test-layercode-key"
    assert seen["body"]["pipeline_id"] == "test-pipeline"
    assert seen["body"]["session_context"]["interview_session_id"] == "interview-1"
    assert seen["body"]["session_context"]["persona"] == "x"


async def test_voice_auth_failure(client, monkeypatch):
    _mock_layercode(monkeypatch, lambda request: httpx.Response(403, text="forbidden"))

    response = await client.post("/api/voice-auth", json={"sessionId": "interview-1"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Voice authorization failed"
    assert body["authorized"] is False


async def test_transcription_stream_requires_session_id(client, headers):
    response = await client.get("/api/transcription-stream", headers=headers)

    assert response.status_code == 400


async def test_transcription_stream_requires_login(client, seed):
    session = await seed()

    response = await client.get("/api/transcription-stream", params={"sessionId": session.id})

    assert response.status_code == 401


async def test_transcription_stream_hides_other_users_sessions(client, seed, voice_store, other_headers):
    session = await seed()
    voice_store.update_transcription(session.id, "user", "My salary expectations are...")

    response = await client.get("/api/transcription-stream", params={"sessionId": session.id}, headers=other_headers)

    assert response.status_code == 404


async def test_transcription_stream_sends_buffer(client, seed, voice_store, headers, monkeypatch):
    monkeypatch.setattr(main, "TRANSCRIPTION_STREAM_SECONDS", 0.3)
    monkeypatch.setattr(main, "TRANSCRIPTION_POLL_SECONDS", 0.05)
    session = await seed()
    voice_store.update_transcription(session.id, "user", "Hello")
    voice_store.update_transcription(session.id, "agent", "Welcome!")

    response = await client.get("/api/transcription-stream", params={"sessionId": session.id}, headers=headers)

    events = [json.loads(line[6:]) for line in response.text.splitlines() if line.startswith("data: ")]
    assert events[0] == {"type": "connected"}
    assert len(events) == 2
    assert events[1]["userText"] == "Hello"
    assert events[1]["agentText"] == "Welcome!"
