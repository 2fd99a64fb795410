"""Sequential URL fetching that stops once enough content is collected."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from presales_research.errors import is_rate_limit_error
from presales_research.models import ScrapedContent
from presales_research.utils.helpers import utf16_len

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, float], None]
FetchOne = Callable[[str], Awaitable[ScrapedContent | None]]

EARLY_STOP_MESSAGE = "Sufficient data collected, optimizing costs..."


def has_minimum_required_data(
    results: list[ScrapedContent],
    min_results: int = 2,
    min_chars: int = 5000,
) -> bool:
    """True once there are enough results carrying enough text for a report."""
    if not results:
        return False
    total = sum(utf16_len(r.content) for r in results if r and r.content)
    return total > min_chars and len(results) >= min_results


async def progressive_fetch(
    urls: list[str],
    fetch_one: FetchOne,
    on_progress: ProgressCallback | None = None,
    min_results: int = 2,
    min_chars: int = 5000,
) -> list[ScrapedContent]:
    """Fetch ``urls`` in order, stopping early when the content budget is met.

    ``urls`` should already be prioritized. Per-URL failures are logged and
    skipped. Later URLs may still be served from cache after a rate limit
    is hit, so the loop carries on and the rate-limit error is re-raised
    only when nothing was fetched.
    """
    results: list[ScrapedContent] = []
    if not urls:
        return results
    rate_limited: Exception | None = None

    total = len(urls)
    for i, url in enumerate(urls):
        if on_progress:
            on_progress(f"Processing {url}...", (i + 1) / total * 100)

        if len(results) >= min_results and has_minimum_required_data(results, min_results, min_chars):
            if on_progress:
                on_progress(EARLY_STOP_MESSAGE, 100)
            logger.info("Early stop after %d of %d URLs", i, total)
            break

        try:
            result = await fetch_one(url)
        except Exception as e:
            if is_rate_limit_error(e):
                logger.warning("Rate limited at %s: %s", url, e)
                rate_limited = rate_limited or e
            else:
                logger.error("Failed to process %s: %s", url, e)
            continue
        if result:
            results.append(result)

    if not results and rate_limited is not None:
        raise rate_limited
    return results
