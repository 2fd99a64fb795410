"""Async Firecrawl scrape client."""

from __future__ import annotations

import logging
import re
from collections import Counter
from collections.abc import Awaitable, Callable
from urllib.parse import urlparse

import httpx

from presales_research.errors import (
    ScrapeError,
    ScrapeRateLimitError,
    UnsupportedUrlError,
    is_rate_limit_error,
)
from presales_research.models import ContentMetadata, ScrapedContent
from presales_research.optimization.batching import batch_requests
from presales_research.utils.validation import filter_supported_urls, is_supported_url, is_valid_url

logger = logging.getLogger(__name__)

FIRECRAWL_BASE_URL = "https://api.firecrawl.dev/v0"

STOP_WORDS = {
    "the", "and", "a", "an", "in", "on", "at", "to", "for", "of", "with",
    "by", "about", "as", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "but", "or", "if", "then",
    "this", "that", "these", "those", "it", "its", "they", "them", "their",
    "we", "us", "our", "you", "your", "he", "him", "his", "she", "her",
}

_SUPPORTED_HINT = "Please use company websites, LinkedIn company pages, or news articles"


def extract_keywords(content: str, limit: int = 10) -> list[str]:
    """Most frequent words longer than three letters, minus stop words."""
    if not content:
        return []
    words = re.split(r"\W+", content.lower())
    counts = Counter(w for w in words if len(w) > 3 and w not in STOP_WORDS)
    return [word for word, _ in counts.most_common(limit)]


class FirecrawlClient:
    """Scrapes single pages through the Firecrawl API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = FIRECRAWL_BASE_URL,
        timeout: int = 30,
        batch_size: int = 2,
        batch_delay: float = 1.5,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.batch_size = batch_size
        self.batch_delay = batch_delay

    async def scrape_url(self, url: str) -> ScrapedContent:
        """Scrape one URL and return its markdown content and metadata.

        Raises UnsupportedUrlError for restricted domains and ScrapeError for
        any API failure.
        """
        if not self.api_key:
            raise ScrapeError("Firecrawl API key not configured")

        if not is_supported_url(url):
            hostname = urlparse(url).hostname or url
            raise UnsupportedUrlError(
                f"{hostname} is not supported by Firecrawl. {_SUPPORTED_HINT} instead."
            )

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "url": url,
            "formats": ["markdown", "html"],
            "includeTags": ["title", "meta", "h1", "h2", "h3", "p", "ul", "ol", "li", "table"],
            "excludeTags": ["nav", "footer", "aside", "script", "style", "iframe", "form", "button"],
            "waitFor": 3000,
            "onlyMainContent": True,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/scrape",
                    headers=headers,
                    json=payload,
                )
        except httpx.TimeoutException as e:
            logger.warning("Firecrawl timeout for %s", url[:80])
            raise ScrapeError(f"Firecrawl request timed out for {url}") from e
        except httpx.HTTPError as e:
            logger.warning("Firecrawl error for %s: %s", url[:80], e)
            raise ScrapeError(f"Firecrawl request failed: {e}") from e

        if response.status_code >= 400:
            raise self._status_error(response, url)

        data = response.json()
        if not data.get("success", False):
            raise ScrapeError(f"Scraping failed: {data.get('error') or 'Unknown error'}")

        page = data.get("data") or {}
        meta = page.get("metadata") or {}
        markdown = page.get("markdown") or ""

        keywords = meta.get("keywords") or []
        if isinstance(keywords, str):
            keywords = [k.strip() for k in keywords.split(",") if k.strip()]
        if not keywords and markdown:
            keywords = extract_keywords(markdown)

        return ScrapedContent(
            url=url,
            title=meta.get("title") or "Untitled",
            content=markdown or page.get("html") or "",
            metadata=ContentMetadata(
                description=meta.get("description"),
                keywords=keywords,
                author=meta.get("author"),
                published_date=meta.get("publishedTime"),
            ),
        )

    def _status_error(self, response: httpx.Response, url: str) -> ScrapeError:
        status = response.status_code
        if status == 403:
            hostname = urlparse(url).hostname or url
            return UnsupportedUrlError(
                f"{hostname} is restricted by Firecrawl. Try using the company's "
                "official website or LinkedIn company page instead."
            )
        if status == 429:
            return ScrapeRateLimitError("Rate limit exceeded. Please try again in a few minutes.")

        try:
            detail = response.json().get("error") or "Unknown error"
        except ValueError:
            detail = "Unknown error"
        return ScrapeError(f"Firecrawl API error: {status} - {detail}")

    async def scrape_multiple_urls(
        self,
        urls: list[str],
        scrape_one: Callable[[str], Awaitable[ScrapedContent]] | None = None,
    ) -> list[ScrapedContent]:
        """Scrape every supported URL in small batches.

        ``scrape_one`` replaces scrape_url per URL, e.g. to go through a
        cache and rate limiter. Returns whatever succeeded. When nothing did,
        re-raises the first rate-limit error, or raises ScrapeError listing
        every issue.
        """
        scrape_one = scrape_one or self.scrape_url
        supported, unsupported = filter_supported_urls(urls)
        skipped = [
            f"{u} ({urlparse(u).hostname} not supported)" if is_valid_url(u) else f"{u} (invalid URL format)"
            for u in unsupported
        ]

        if not supported:
            raise ScrapeError(
                f"No supported URLs found. Skipped: {', '.join(skipped)}. {_SUPPORTED_HINT}."
            )

        errors: list[str] = []
        rate_limited: list[Exception] = []

        def scrape_or_record(url: str):
            async def run() -> ScrapedContent | None:
                try:
                    return await scrape_one(url)
                except Exception as e:
                    errors.append(f"{url}: {e}")
                    if is_rate_limit_error(e):
                        rate_limited.append(e)
                    return None
            return run

        pages = await batch_requests(
            [scrape_or_record(u) for u in supported],
            batch_size=self.batch_size,
            delay=self.batch_delay,
        )
        results = [p for p in pages if p is not None]

        if results:
            if errors or skipped:
                logger.warning("Some URLs failed or were skipped: %s", errors + skipped)
            return results

        if rate_limited:
            raise rate_limited[0]
        raise ScrapeError(
            f"All URLs failed to scrape: {'; '.join(errors + skipped)}. "
            "Please try using company websites, LinkedIn company pages, or news articles instead."
        )
