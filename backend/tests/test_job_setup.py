"""
Job posting helpers and POST /api/setup/process.
"""
import httpx
import pytest

from db import repository
from db.session import user_db
from job_setup import scraping
from job_setup.scraping import company_from_url, html_to_text, scrape_job
from job_setup.validation import validate_job_content

JOB_POSTING = """\
Senior Backend Engineer at Globex
We are looking for a backend engineer to join our platform team.
Responsibilities: you will design APIs and own services end to end.
Requirements: 5+ years of experience with Python and PostgreSQL.
Benefits: competitive salary, equity and unlimited PTO.
"""

RESUME = "Jane Doe\nBackend engineer, five years of Python, FastAPI and PostgreSQL."


# =============================================================================
# Content validation
# =============================================================================


def test_short_content_is_invalid():
    check = validate_job_content("Backend engineer role, team of five.")

    assert not check.valid
    assert check.reason == "Job content is too short"


def test_posting_with_several_categories_is_valid():
    check = validate_job_content(JOB_POSTING)

    assert check.valid
    assert {"role", "responsibilities", "requirements", "compensation"} <= set(check.matched_categories)


def test_long_text_without_job_keywords_is_invalid():
    text = "Subscribe to our newsletter for the latest recipes and cooking tips. " * 5

    check = validate_job_content(text)

    assert not check.valid
    assert len(check.matched_categories) < 2


def test_keywords_match_whole_words_only():
    # "teams" and "roles" must not count as "team" and "role"
    text = "Our cooking teams publish roles for recipes in every issue of the magazine we print. " * 2

    assert validate_job_content(text).matched_categories == []


# =============================================================================
# Scraping
# =============================================================================


def test_company_from_url_uses_host():
    assert company_from_url("https://www.acme.com/careers/123") == "Acme"


def test_html_to_text_drops_scripts_and_keeps_title():
    html = (
        "<html><head><title>Staff Engineer</title><style>p{}</style></head>"
        "<body><script>track()</script><h1>Staff Engineer</h1><p>Join   our team.</p></body></html>"
    )

    text, title = html_to_text(html)

    assert "track()" not in text
    assert "Join our team." in text
    assert title == "Staff Engineer"


async def test_scrape_failure_returns_placeholder(monkeypatch):
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    _install_transport(monkeypatch, handler)

    job = await scrape_job("https://jobs.example.com/42")

    assert not job.scraped
    assert job.content == "Job posting from https://jobs.example.com/42"
    assert job.company_name == "Example"


async def test_scrape_truncates_content(monkeypatch):
    body = "<html><body><p>" + ("word " * 3000) + "</p></body></html>"
    _install_transport(monkeypatch, lambda request: httpx.Response(200, text=body))

    job = await scrape_job("https://jobs.example.com/long")

    assert job.scraped
    assert len(job.content) == scraping.MAX_JOB_CONTENT_CHARS


def _install_transport(monkeypatch, handler):
    real_client = httpx.AsyncClient

    def client_factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return real_client(*args, **kwargs)

    monkeypatch.setattr(scraping.httpx, "AsyncClient", client_factory)


# =============================================================================
# POST /api/setup/process
# =============================================================================


async def test_setup_stores_resume_and_job(client, headers, llm):
    llm.on(llm.SUMMARY, "A short summary.")
    llm.on(llm.JOB_DETAILS, {"company_name": "Globex", "job_title": "Senior Backend Engineer"})
    llm.on(llm.QUESTIONS, {"questions": [{"text": "Why Globex?", "type": "behavioral"}]})

    response = await client.post(
        "/api/setup/process",
        data={"resumeText": RESUME, "jobText": JOB_POSTING},
        headers=headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["companyName"] == "Globex"
    assert body["jobTitle"] == "Senior Backend Engineer"
    assert body["questions"][0]["text"] == "Why Globex?"
    assert "warning" not in body

    async with user_db.session() as db:
        resume = await repository.latest_resume(db, "user-1")
        job = await repository.latest_job(db, "user-1")
    assert resume.id == body["resumeId"]
    assert resume.parsed_summary == "A short summary."
    assert job.company_name == "Globex"


async def test_setup_survives_model_outage(client, headers, llm):
    response = await client.post(
        "/api/setup/process",
        data={"resumeText": RESUME, "jobText": JOB_POSTING},
        headers=headers,
    )

    body = response.json()
    assert response.status_code == 200
    assert body["questions"] == []
    assert body["warning"] == "Question generation failed, but files were processed successfully"

    async with user_db.session() as db:
        job = await repository.latest_job(db, "user-1")
    assert job.job_summary == JOB_POSTING.strip()[:1000]


async def test_setup_accepts_text_resume_upload(client, headers, llm):
    response = await client.post(
        "/api/setup/process",
        data={"jobText": JOB_POSTING},
        files={"resume": ("resume.txt", RESUME.encode(), "text/plain")},
        headers=headers,
    )

    assert response.status_code == 200
    async with user_db.session() as db:
        resume = await repository.latest_resume(db, "user-1")
    assert resume.filename == "resume.txt"
    assert resume.parsed_content == RESUME


async def test_setup_rejects_pdf(client, headers, llm):
    response = await client.post(
        "/api/setup/process",
        data={"jobText": JOB_POSTING},
        files={"resume": ("resume.pdf", b"%PDF-1.4", "application/pdf")},
        headers=headers,
    )

    assert response.status_code == 400
    assert "PDF parsing is temporarily disabled" in response.json()["error"]


async def test_setup_rejects_non_job_content(client, headers, llm):
    response = await client.post(
        "/api/setup/process",
        data={"resumeText": RESUME, "jobText": "Just some unrelated words."},
        headers=headers,
    )

    assert response.status_code == 400
    assert "paste the job description" in response.json()["error"]
    assert llm.count() == 0


@pytest.mark.parametrize("data", [{"jobText": JOB_POSTING}, {"resumeText": RESUME}])
async def test_setup_requires_resume_and_job(client, headers, llm, data):
    response = await client.post("/api/setup/process", data=data, headers=headers)

    assert response.status_code == 400
