"""
Progress aggregation over the conversation log.
"""
from types import SimpleNamespace

from interview.progress import compute_progress


def _turn(speaker, message_type, text="..."):
    return SimpleNamespace(speaker=speaker, message_type=message_type, message_text=text)


def _interview(*types):
    """Interviewer turns of the given types, each answered by the candidate."""
    turns = []
    for message_type in types:
        turns.append(_turn("interviewer", message_type))
        turns.append(_turn("candidate", "response"))
    return turns


# =============================================================================
# compute_progress
# =============================================================================


def test_no_turns_starts_at_first_question():
    progress = compute_progress([], 5)

    assert progress.currentQuestion == 1
    assert progress.progress == 20
    assert progress.mainQuestionsAsked == 0
    assert progress.mainQuestionsCompleted == 0
    assert progress.totalQuestionsAsked == 0
    assert progress.followupLetter is None


def test_question_in_flight_is_not_completed():
    progress = compute_progress(_interview("main_question", "main_question"), 5)

    assert progress.mainQuestionsAsked == 2
    assert progress.mainQuestionsCompleted == 1
    assert progress.currentQuestion == 2
    assert progress.progress == 20


def test_progress_is_rounded_percentage():
    progress = compute_progress(_interview("main_question", "main_question", "main_question"), 3)

    assert progress.mainQuestionsCompleted == 2
    assert progress.progress == 67


def test_followups_after_latest_main_question_get_letters():
    turns = _interview("main_question", "follow_up", "main_question", "follow_up", "follow_up")
    progress = compute_progress(turns, 5)

    assert progress.currentFollowupCount == 2
    assert progress.followupLetter == "b"
    assert progress.currentQuestionType == "follow_up"
    assert progress.totalQuestionsAsked == 5


def test_transition_does_not_reset_followups():
    turns = _interview("main_question", "follow_up", "transition")
    progress = compute_progress(turns, 5)

    assert progress.currentFollowupCount == 1
    assert progress.followupLetter == "a"


def test_closing_forces_full_progress():
    turns = _interview("main_question", "main_question") + [_turn("interviewer", "closing")]
    progress = compute_progress(turns, 5)

    assert progress.progress == 100
    assert progress.mainQuestionsCompleted == 5
    assert progress.currentQuestion == 5


def test_progress_never_exceeds_100():
    turns = _interview(*["main_question"] * 9)
    progress = compute_progress(turns, 5)

    assert progress.progress == 100
    assert progress.currentQuestion == 5


# =============================================================================
# GET /api/interview/{id}/progress
# =============================================================================


async def test_progress_endpoint_uses_question_rows(client, seed, headers):
    session = await seed(
        questions=4,
        question_count=10,
        turns=[
            ("interviewer", "main_question", "Tell me about yourself."),
            ("candidate", "response", "I build APIs."),
            ("interviewer", "main_question", "Why Acme?"),
        ],
    )

    response = await client.get(f"/api/interview/{session.id}/progress", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["totalQuestions"] == 4
    assert body["mainQuestionsCompleted"] == 1
    assert body["progress"] == 25


async def test_progress_endpoint_falls_back_to_question_count(client, seed, headers):
    session = await seed(questions=0, question_count=8)

    response = await client.get(f"/api/interview/{session.id}/progress", headers=headers)

    assert response.json()["totalQuestions"] == 8


async def test_progress_requires_authentication(client, seed):
    session = await seed()

    response = await client.get(f"/api/interview/{session.id}/progress")

    assert response.status_code == 401
    assert response.json() == {"error": "Authentication required"}


async def test_progress_of_another_users_session_is_not_found(client, seed, other_headers):
    session = await seed()

    response = await client.get(f"/api/interview/{session.id}/progress", headers=other_headers)

    assert response.status_code == 404
    assert response.json() == {"error": "Session not found"}
