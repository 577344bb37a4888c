import logging
import re
from dataclasses import dataclass
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

MAX_JOB_CONTENT_CHARS = 5000
SCRAPE_TIMEOUT_SECONDS = 12.0

_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/122.0.0.0 Safari/537.36 LickedIn-Interviews/1.0"
    ),
    "Accept": "text/html,application/xhtml+xml",
}
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass
class ScrapedJob:
    url: str
    content: str
    company_name: str
    title: str | None = None
    scraped: bool = True


def company_from_url(url: str) -> str:
    host = urlparse(url).hostname or ""
    parts = [p for p in host.split(".") if p not in ("www", "jobs", "careers", "boards")]
    return parts[0].capitalize() if parts else "Company"


def html_to_text(html: str) -> tuple[str, str | None]:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript", "nav", "header", "footer", "svg"]):
        tag.decompose()

    title = soup.title.get_text(" ", strip=True) if soup.title else None
    text = _WHITESPACE_RE.sub(" ", soup.get_text(" ", strip=True)).strip()
    return text, title or None


async def scrape_job(url: str) -> ScrapedJob:
    """Fetch a posting and reduce it to text. Never raises; failures yield a placeholder."""
    company = company_from_url(url)
    try:
        async with httpx.AsyncClient(
            timeout=SCRAPE_TIMEOUT_SECONDS, follow_redirects=True, headers=_HEADERS
        ) as client:
            response = await client.get(url)
        response.raise_for_status()
        text, title = html_to_text(response.text)
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
        logger.warning("Job scraping failed for %s: %s", url, e)
        return ScrapedJob(url=url, content=f"Job posting from {url}", company_name=company, scraped=False)

    logger.info("Scraped %d chars from %s", len(text), url)
    return ScrapedJob(url=url, content=text[:MAX_JOB_CONTENT_CHARS], company_name=company, title=title)
