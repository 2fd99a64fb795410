"""Plain HTTP page fetching for the direct (non-Firecrawl) scraper."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)

USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64; rv:126.0) Gecko/20100101 Firefox/126.0",
]

RETRYABLE_STATUS = (429, 503)
TEXT_CONTENT_TYPES = ("text/html", "application/xhtml+xml", "text/plain")


def browser_headers() -> dict[str, str]:
    return {
        "User-Agent": random.choice(USER_AGENTS),
        "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    }


async def fetch_html(
    url: str,
    timeout: int = 30,
    max_retries: int = 2,
    backoff: float = 2.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> tuple[str | None, str | None]:
    """Fetch a page and return ``(html, None)`` or ``(None, error)``.

    Rate-limited (429), unavailable (503) and timed-out attempts are retried
    up to ``max_retries`` times, waiting ``backoff * attempt`` seconds.
    """
    error: str | None = None

    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True, max_redirects=5) as client:
        for attempt in range(1, max_retries + 2):
            try:
                response = await client.get(url, headers=browser_headers())
            except httpx.TooManyRedirects:
                return None, "too many redirects"
            except httpx.TimeoutException:
                error = "timeout"
            except httpx.HTTPError as e:
                return None, str(e)[:100] or type(e).__name__
            else:
                if response.status_code in RETRYABLE_STATUS:
                    error = f"HTTP {response.status_code}"
                elif response.status_code >= 400:
                    return None, f"HTTP {response.status_code}"
                else:
                    content_type = response.headers.get("content-type", "")
                    if not any(t in content_type for t in TEXT_CONTENT_TYPES):
                        return None, f"Non-HTML content: {content_type[:50]}"
                    return response.text, None

            if attempt <= max_retries:
                logger.debug("Retrying %s after %s (attempt %d)", url[:80], error, attempt)
                await sleep(backoff * attempt)

    logger.debug("Giving up on %s: %s", url[:80], error)
    return None, error
