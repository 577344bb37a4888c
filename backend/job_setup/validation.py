import re
from dataclasses import dataclass, field

MIN_JOB_CONTENT_CHARS = 100
MIN_MATCHED_CATEGORIES = 2

KEYWORD_CATEGORIES = {
    "role": ("position", "role", "job title", "hiring", "we are looking", "we're looking", "opening"),
    "responsibilities": ("responsibilities", "responsible for", "you will", "duties", "day-to-day", "what you'll do"),
    "requirements": ("requirements", "qualifications", "experience", "skills", "degree", "must have", "years of"),
    "team": ("team", "collaborate", "report to", "reporting to", "cross-functional", "colleagues"),
    "compensation": ("salary", "compensation", "benefits", "equity", "pto", "bonus", "per year", "401k"),
}


@dataclass
class JobContentCheck:
    valid: bool
    matched_categories: list[str] = field(default_factory=list)
    reason: str | None = None


def validate_job_content(content: str | None) -> JobContentCheck:
    """Decide whether text reads like a real job posting.

    Under 100 characters is always rejected. Otherwise the text must hit
    keywords from at least two of the five categories.
    """
    text = (content or "").strip()
    if len(text) < MIN_JOB_CONTENT_CHARS:
        return JobContentCheck(valid=False, reason="Job content is too short")

    lowered = text.lower()
    matched = [
        category
        for category, keywords in KEYWORD_CATEGORIES.items()
        if any(_contains(lowered, keyword) for keyword in keywords)
    ]

    if len(matched) < MIN_MATCHED_CATEGORIES:
        return JobContentCheck(
            valid=False,
            matched_categories=matched,
            reason="Job content does not look like a job description",
        )
    return JobContentCheck(valid=True, matched_categories=matched)


def _contains(text: str, keyword: str) -> bool:
    return re.search(rf"\b{re.escape(keyword)}\b", text) is not None
