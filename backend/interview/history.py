import math
import re

from db.models import InterviewSession, JobDescription

RECENT_INTERVIEWS_LIMIT = 10

_COMPANY_RE = re.compile(r"(?:\bat|@)\s+([A-Z][a-zA-Z\s&]+?)(?:\s|,|\.|$)", re.IGNORECASE)
_TITLE_RE = re.compile(r"\b(?:role|position|job|title)\s*:?\s*([A-Z][a-zA-Z\s&-]+?)(?:\s|,|\.|@|$)", re.IGNORECASE)


def position_parts(job: JobDescription | None) -> tuple[str, str]:
    """Return (job_title, company_name) for display.

    Stored details win. Older rows without them fall back to a loose
    pattern match over the raw posting text.
    """
    title = "Position"
    company = "Company"
    if job is None:
        return title, company

    content = job.job_content or ""
    if job.company_name:
        company = job.company_name
    else:
        match = _COMPANY_RE.search(content)
        if match:
            company = match.group(1).strip()

    if job.job_title:
        title = job.job_title
    else:
        match = _TITLE_RE.search(content)
        if match:
            title = match.group(1).strip()

    return title, company


def build_dashboard(sessions: list[InterviewSession], jobs: dict[str, JobDescription]) -> dict:
    scores = [s.overall_score for s in sessions if s.overall_score is not None]

    recent = []
    for session in sessions[:RECENT_INTERVIEWS_LIMIT]:
        title, company = position_parts(jobs.get(session.job_description_id))
        recent.append({
            "id": session.id,
            "position": f"{title} @ {company}",
            "score": session.overall_score or 0,
            "completed_at": session.completed_at.isoformat() if session.completed_at else None,
            "company_name": company,
            "job_title": title,
        })

    return {
        "stats": {
            "totalInterviews": len(sessions),
            "averageScore": math.floor(sum(scores) / len(scores) + 0.5) if scores else 0,
            "bestScore": max(scores) if scores else 0,
        },
        "recentInterviews": recent,
    }
