import logging

from core.llm import complete_json, complete_text
from job_setup.prompts import get_job_details_prompt, get_summary_prompt

logger = logging.getLogger(__name__)

SUMMARY_FALLBACK_CHARS = 1000


def summarize(document_kind: str, text: str, fallback: str | None = None) -> str:
    """Short summary used as interview context; truncates the text on failure."""
    try:
        summary = complete_text(
            f"{document_kind.replace(' ', '-')}-summary",
            get_summary_prompt(document_kind),
            text[:8000],
            temperature=0.3,
            max_tokens=250,
        )
        if summary:
            return summary
    except Exception as e:
        logger.warning("Summary of %s failed, truncating instead: %s", document_kind, e)

    return fallback or text[:SUMMARY_FALLBACK_CHARS]


def extract_job_details(job_text: str) -> dict:
    """Company and title from posting text; missing values are None."""
    try:
        result = complete_json(
            "job-details",
            get_job_details_prompt(),
            job_text[:5000],
            temperature=0,
            max_tokens=100,
        )
    except Exception as e:
        logger.warning("Job detail extraction failed: %s", e)
        return {"company_name": None, "job_title": None}

    return {
        "company_name": _clean(result.get("company_name")),
        "job_title": _clean(result.get("job_title")),
    }


def _clean(value) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value if value and value.lower() not in ("null", "none", "unknown") else None
