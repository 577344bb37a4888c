from core.prompt_manager import get_prompt

_FALLBACK_SUMMARY = """\
Create a concise {{word_count}}-word summary of this {{document_kind}} for voice interview context.
Keep names, titles, numbers and concrete achievements. No preamble."""

_FALLBACK_JOB_DETAILS = """\
Extract the hiring company and the job title from this job posting.
Return a JSON object: {"company_name": "<company or null>", "job_title": "<title or null>"}
Use null when the posting does not say."""


def get_summary_prompt(document_kind: str, word_count: int = 150) -> str:
    return get_prompt(
        "setup/summary",
        fallback=_FALLBACK_SUMMARY,
        document_kind=document_kind,
        word_count=str(word_count),
    )


def get_job_details_prompt() -> str:
    return get_prompt("setup/job-details", fallback=_FALLBACK_JOB_DETAILS)
