"""Direct page extraction used when no Firecrawl key is configured.

Tier 1: trafilatura (main-content extraction from static HTML)
Tier 2: basic tag stripping (last resort)
"""

from __future__ import annotations

import html as html_lib
import logging
import re
from collections.abc import Awaitable, Callable

import trafilatura

from presales_research.errors import ScrapeError
from presales_research.models import ContentMetadata, ScrapedContent
from presales_research.optimization.batching import batch_requests
from presales_research.scrape.firecrawl_client import extract_keywords
from presales_research.scrape.http_scraper import fetch_html

logger = logging.getLogger(__name__)

MIN_CONTENT_CHARS = 100
_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.I | re.S)
_DESCRIPTION_RE = re.compile(
    r"<meta[^>]+name=[\"']description[\"'][^>]+content=[\"']([^\"']*)[\"']", re.I,
)


class DirectScraper:
    """Fetches pages itself and extracts readable text with trafilatura."""

    def __init__(self, timeout: int = 30, max_chars: int = 15000, min_chars: int = MIN_CONTENT_CHARS):
        self.timeout = timeout
        self.max_chars = max_chars
        self.min_chars = min_chars

    async def scrape_url(self, url: str) -> ScrapedContent:
        html, error = await fetch_html(url, timeout=self.timeout)
        if not html:
            raise ScrapeError(f"Could not fetch {url}: {error or 'empty response'}")

        content = trafilatura.extract(
            html,
            include_tables=True,
            include_links=False,
            include_comments=False,
            favor_recall=True,
            url=url,
        )
        if not content or len(content) < self.min_chars:
            content = basic_html_to_text(html)

        if len(content) < self.min_chars // 2:
            raise ScrapeError(f"No extractable content at {url}")

        content = truncate_content(content, self.max_chars)
        title_match = _TITLE_RE.search(html)
        description_match = _DESCRIPTION_RE.search(html)

        return ScrapedContent(
            url=url,
            title=html_lib.unescape(title_match.group(1).strip()) if title_match else "Untitled",
            content=content,
            metadata=ContentMetadata(
                description=html_lib.unescape(description_match.group(1)) if description_match else None,
                keywords=extract_keywords(content),
            ),
        )

    async def scrape_multiple_urls(
        self,
        urls: list[str],
        scrape_one: Callable[[str], Awaitable[ScrapedContent]] | None = None,
        batch_size: int = 3,
    ) -> list[ScrapedContent]:
        """Scrape all URLs a few at a time; raise only if every one failed."""
        scrape_one = scrape_one or self.scrape_url
        pages = await batch_requests(
            [lambda u=u: scrape_one(u) for u in urls],
            batch_size=batch_size,
            delay=0,
        )
        if not pages and urls:
            raise ScrapeError(f"All URLs failed to scrape: {', '.join(urls)}")
        return pages


def basic_html_to_text(html: str) -> str:
    """Fallback HTML-to-text when trafilatura returns too little."""
    text = re.sub(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", "", html, flags=re.I | re.S)
    text = re.sub(r"<style\b[^<]*(?:(?!</style>)<[^<]*)*</style>", "", text, flags=re.I | re.S)
    text = re.sub(r"<!--[\s\S]*?-->", "", text)
    text = re.sub(r"<[^>]+>", " ", text)
    text = html_lib.unescape(text)
    text = re.sub(r"\s+", " ", text)
    return text.strip()


def truncate_content(text: str, max_chars: int) -> str:
    """Truncate at a sentence boundary if over max length."""
    if len(text) <= max_chars:
        return text

    truncated = text[:max_chars]
    cut_point = max(truncated.rfind(". "), truncated.rfind("\n"))
    if cut_point > max_chars * 0.8:
        return truncated[:cut_point + 1] + " [content truncated]"
    return truncated + "... [content truncated]"
