import asyncio
import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import CurrentUser, get_current_user
from core.config import FRONTEND_URL, TRANSCRIPTION_STREAM_SECONDS, layercode_webhook_secret
from core.errors import register_exception_handlers
from db import repository
from db.models import InterviewSession, JobDescription, Resume
from db.session import close_db, get_db, init_db
from interview.demo import DEMO_SCENARIOS, seed_demo
from interview.history import build_dashboard
from interview.progress import get_progress
from interview.questions import build_question_rows, generate_questions, stock_questions
from interview_analysis import get_results
from job_setup.scraping import scrape_job
from job_setup.summarizer import extract_job_details, summarize
from job_setup.validation import validate_job_content
from personas import load_persona
from voice.layercode import SIGNATURE_HEADER, authorize_session, sse_event, verify_signature
from voice.session_store import VoiceSessionStore
from voice.webhook import VoiceWebhookEvent, handle_event

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

TRANSCRIPTION_POLL_SECONDS = 0.5
PREVIEW_QUESTION_COUNT = 5
TEXT_RESUME_SUFFIXES = (".txt", ".md")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    if not hasattr(app.state, "voice_store"):
        app.state.voice_store = VoiceSessionStore()
    yield
    await close_db()


app = FastAPI(
    title="LickedIn Interviews API",
    description="Backend API for AI voice mock interviews",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


def get_voice_store(request: Request) -> VoiceSessionStore:
    store = getattr(request.app.state, "voice_store", None)
    if store is None:
        store = request.app.state.voice_store = VoiceSessionStore()
    return store


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------
class CreateInterviewRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    difficulty: str = "medium"
    interview_type: str = Field(default="professional", alias="interviewType")
    persona: Optional[str] = None
    voice_gender: str = Field(default="female", alias="voiceGender")
    communication_style: str = Field(default="corporate_professional", alias="communicationStyle")
    question_count: int = Field(default=5, ge=1, le=10, alias="questionCount")


class VoiceAuthRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(default=None, alias="sessionId")
    metadata: Optional[dict] = None


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/")
async def root():
    return {"service": "LickedIn Interviews API", "status": "running", "version": "1.0.0"}


@app.get("/health")
async def health_check():
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------
@app.get("/api/dashboard")
async def dashboard(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    sessions = await repository.list_completed_sessions(db, user.id)
    jobs = await repository.jobs_by_id(db, (s.job_description_id for s in sessions))
    return build_dashboard(sessions, jobs)


@app.get("/api/latest-interview")
async def latest_interview(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    sessions = await repository.list_completed_sessions(db, user.id)
    if not sessions:
        return {"success": False, "message": "No interviews yet", "hasInterviews": False}

    feedback = await repository.latest_feedback(db, (s.id for s in sessions))
    if feedback is not None:
        return {
            "success": True,
            "sessionId": feedback.session_id,
            "message": "Latest results with feedback found",
            "hasInterviews": True,
            "hasFeedback": True,
        }

    return {
        "success": True,
        "sessionId": sessions[0].id,
        "message": "Most recent session found, feedback will be generated",
        "hasInterviews": True,
        "hasFeedback": False,
    }


# ---------------------------------------------------------------------------
# Setup: resume + job posting
# ---------------------------------------------------------------------------
@app.post("/api/setup/process")
async def process_setup(
    resumeText: Optional[str] = Form(None),
    resume: Optional[UploadFile] = File(None),
    jobUrl: Optional[str] = Form(None),
    jobText: Optional[str] = Form(None),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Store a resume and a job posting, then preview tailored questions.

    The job posting comes from ``jobText`` when given, otherwise it is
    scraped from ``jobUrl``. Scraped content that does not look like a
    job posting is rejected so the user can paste it instead.
    """
    resume_text, filename, size = await _read_resume(resumeText, resume)
    if not resume_text:
        raise HTTPException(status_code=400, detail="Resume text or a .txt resume file is required")
    if not (jobUrl and jobUrl.strip()) and not (jobText and jobText.strip()):
        raise HTTPException(status_code=400, detail="A job URL or job description text is required")

    company_name = None
    job_title = None
    if jobText and jobText.strip():
        job_content = jobText.strip()
    else:
        scraped = await scrape_job(jobUrl.strip())
        job_content = scraped.content
        company_name = scraped.company_name
        job_title = scraped.title

    check = validate_job_content(job_content)
    if not check.valid:
        logger.info("Rejected job content (%s), matched=%s", check.reason, check.matched_categories)
        raise HTTPException(
            status_code=400,
            detail="We couldn't read a job description from that page. Please paste the job description text instead.",
        )

    resume_summary, job_summary, details = await asyncio.gather(
        asyncio.to_thread(summarize, "resume", resume_text),
        asyncio.to_thread(summarize, "job description", job_content),
        asyncio.to_thread(extract_job_details, job_content),
    )
    company_name = details["company_name"] or company_name
    job_title = details["job_title"] or job_title

    resume_row = Resume(
        user_id=user.id,
        filename=filename,
        parsed_content=resume_text,
        parsed_summary=resume_summary,
        file_size_bytes=size,
    )
    job_row = JobDescription(
        user_id=user.id,
        url=jobUrl.strip() if jobUrl else None,
        job_content=job_content,
        job_summary=job_summary,
        company_name=company_name,
        job_title=job_title,
    )
    db.add_all([resume_row, job_row])
    await db.commit()
    logger.info("Stored resume %s and job %s for user %s", resume_row.id, job_row.id, user.id)

    response = {
        "success": True,
        "resumeId": resume_row.id,
        "jobDescriptionId": job_row.id,
        "companyName": company_name,
        "jobTitle": job_title,
    }
    try:
        questions = await asyncio.to_thread(
            generate_questions,
            resume_text=resume_summary,
            job_text=job_summary,
            company_name=company_name,
            job_title=job_title,
            persona=load_persona(None),
            difficulty="medium",
            count=PREVIEW_QUESTION_COUNT,
        )
        response["questions"] = [q.model_dump(by_alias=True) for q in questions]
    except Exception as e:
        logger.warning("Preview question generation failed: %s", e)
        response["questions"] = []
        response["warning"] = "Question generation failed, but files were processed successfully"

    return response


async def _read_resume(resume_text: str | None, upload: UploadFile | None) -> tuple[str, str, int]:
    if resume_text and resume_text.strip():
        text = resume_text.strip()
        return text, "resume.txt", len(text.encode("utf-8"))

    if upload is None:
        return "", "", 0

    filename = upload.filename or "resume.txt"
    if upload.content_type == "application/pdf" or filename.lower().endswith(".pdf"):
        raise HTTPException(
            status_code=400,
            detail="PDF parsing is temporarily disabled. Please upload a text file (.txt) instead.",
        )
    if not filename.lower().endswith(TEXT_RESUME_SUFFIXES):
        raise HTTPException(status_code=400, detail="Please upload a text file (.txt) resume.")

    raw = await upload.read()
    try:
        text = raw.decode("utf-8").strip()
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="Could not extract text from resume")
    return text, filename, len(raw)


# ---------------------------------------------------------------------------
# Interview sessions
# ---------------------------------------------------------------------------
@app.post("/api/interview/create")
async def create_interview(
    request: CreateInterviewRequest,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    resume = await repository.latest_resume(db, user.id)
    if resume is None:
        raise HTTPException(status_code=400, detail="No resume found. Please upload a resume first.")
    job = await repository.latest_job(db, user.id)
    if job is None:
        raise HTTPException(status_code=400, detail="No job description found. Please process a job URL first.")

    persona_id = request.persona or request.interview_type
    persona = load_persona(persona_id)

    session = InterviewSession(
        user_id=user.id,
        resume_id=resume.id,
        job_description_id=job.id,
        difficulty_level=request.difficulty,
        interview_type=persona.persona_id,
        voice_gender=request.voice_gender,
        communication_style=request.communication_style,
        question_count=request.question_count,
        status="pending",
    )
    db.add(session)
    await db.flush()

    try:
        questions = await asyncio.to_thread(
            generate_questions,
            resume_text=resume.parsed_summary or resume.parsed_content or "",
            job_text=job.job_summary or job.job_content or "",
            company_name=job.company_name,
            job_title=job.job_title,
            persona=persona,
            difficulty=request.difficulty,
            count=request.question_count,
        )
    except Exception as e:
        logger.warning("Question generation failed for session %s, using stock questions: %s", session.id, e)
        questions = stock_questions(request.question_count)

    db.add_all(build_question_rows(session.id, questions))
    await db.commit()
    logger.info("Created interview %s with %d questions (persona=%s)", session.id, len(questions), persona.persona_id)

    return {
        "success": True,
        "sessionId": session.id,
        "questions": [q.model_dump(by_alias=True) for q in questions],
    }


@app.get("/api/interview/{session_id}/progress")
async def interview_progress(
    session_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    session = await repository.get_user_session(db, session_id, user.id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    progress = await get_progress(db, session)
    return progress.to_dict()


@app.get("/api/results/{session_id}")
async def interview_results(
    session_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    session = await repository.get_user_session(db, session_id, user.id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return await get_results(db, session)


@app.post("/api/demo/{scenario}")
async def create_demo(
    scenario: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    demo = DEMO_SCENARIOS.get(scenario)
    if demo is None:
        raise HTTPException(status_code=404, detail=f"Unknown demo scenario: {scenario}")

    session = await seed_demo(db, user.id, demo)
    logger.info("Seeded %s demo session %s for user %s", scenario, session.id, user.id)
    return {
        "success": True,
        "sessionId": session.id,
        "message": f"Demo interview created: {demo.job_title} at {demo.company_name}",
    }


# ---------------------------------------------------------------------------
# Voice pipeline
# ---------------------------------------------------------------------------
@app.get("/api/voice-agent", response_class=PlainTextResponse)
async def voice_agent_status():
    return "Webhook endpoint is working!"


@app.post("/api/voice-agent")
async def voice_agent_webhook(
    request: Request,
    interview_session_id: Optional[str] = Query(None),
    store: VoiceSessionStore = Depends(get_voice_store),
    db: AsyncSession = Depends(get_db),
):
    body = await request.body()

    signature = request.headers.get(SIGNATURE_HEADER)
    secret = layercode_webhook_secret()
    if signature and secret and not verify_signature(body, signature, secret):
        logger.warning("Rejected voice webhook with invalid signature")
        raise HTTPException(status_code=401, detail="Invalid signature")

    try:
        event = VoiceWebhookEvent(**json.loads(body or b"{}"))
    except (ValueError, TypeError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid webhook payload: {e}")

    events = await handle_event(event, store=store, db=db, interview_session_id=interview_session_id)

    async def stream():
        for chunk in events:
            yield chunk

    return StreamingResponse(
        stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )


@app.post("/api/voice-auth")
async def voice_auth(request: VoiceAuthRequest):
    try:
        return await authorize_session(request.session_id, request.metadata)
    except Exception as e:
        logger.error("Voice authorization failed: %s", e)
        return JSONResponse(
            status_code=500,
            content={"error": "Voice authorization failed", "message": str(e), "authorized": False},
        )


@app.get("/api/transcription-stream")
async def transcription_stream(
    request: Request,
    sessionId: Optional[str] = Query(None),
    store: VoiceSessionStore = Depends(get_voice_store),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not sessionId:
        raise HTTPException(status_code=400, detail="Session ID required")
    if await repository.get_user_session(db, sessionId, user.id) is None:
        raise HTTPException(status_code=404, detail="Session not found")

    async def stream():
        yield sse_event({"type": "connected"})
        last_seen = 0.0
        loop = asyncio.get_running_loop()
        deadline = loop.time() + TRANSCRIPTION_STREAM_SECONDS
        while loop.time() < deadline:
            if await request.is_disconnected():
                break
            buffer = store.get_transcription(sessionId)
            if buffer.last_update and buffer.last_update != last_seen:
                last_seen = buffer.last_update
                yield sse_event(buffer.to_event())
            await asyncio.sleep(TRANSCRIPTION_POLL_SECONDS)
        logger.info("Transcription stream for %s closed", sessionId)

    return StreamingResponse(
        stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
