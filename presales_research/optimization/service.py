"""Cost-optimization layer: cache, rate limits and progressive fetching in one place."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from presales_research.cache.store import ContentCache, cache_key
from presales_research.models import ScrapedContent, UsageEfficiency, UsageStats
from presales_research.optimization.batching import with_fallback
from presales_research.optimization.dedup import deduplicate_content
from presales_research.optimization.prioritizer import prioritize_urls
from presales_research.optimization.progressive import ProgressCallback, progressive_fetch
from presales_research.optimization.ratelimit import RateLimiter, Service
from presales_research.utils.validation import filter_supported_urls

logger = logging.getLogger(__name__)

T = TypeVar("T")

Scraper = Callable[[str], Awaitable[ScrapedContent]]

DEFAULT_TTL = 3600.0
URL_CONTENT_TTL = 7200.0


class CostOptimizationService:
    """Owns one cache and one rate limiter for the whole process.

    ``scraper`` is the URL -> ScrapedContent capability. When ``metered`` is
    set, every scrape goes through the firecrawl budget and is tracked.
    """

    def __init__(
        self,
        scraper: Scraper,
        cache: ContentCache | None = None,
        limiter: RateLimiter | None = None,
        metered: bool = True,
        url_ttl: float = URL_CONTENT_TTL,
        default_ttl: float = DEFAULT_TTL,
        early_stop_results: int = 2,
        early_stop_chars: int = 5000,
    ):
        self.scraper = scraper
        self.cache = cache if cache is not None else ContentCache()
        self.limiter = limiter if limiter is not None else RateLimiter()
        self.metered = metered
        self.url_ttl = url_ttl
        self.default_ttl = default_ttl
        self.early_stop_results = early_stop_results
        self.early_stop_chars = early_stop_chars

    # --- Caching ---

    async def with_cache(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[T]],
        ttl: float | None = None,
    ) -> T:
        return await self.cache.get_or_fetch(key, fetcher, self.default_ttl if ttl is None else ttl)

    # --- Rate limiting / cost ---

    async def enforce_rate_limit(self, service: Service) -> None:
        await self.limiter.enforce(service)

    def track_request(self, service: Service, success: bool = True, actual_cost: float | None = None) -> None:
        self.limiter.track(service, success, actual_cost)

    async def with_fallback(
        self,
        primary: Callable[[], Awaitable[T]],
        fallback: Callable[[], Awaitable[T]],
        condition: Callable[[Exception], bool] = lambda exc: True,
    ) -> T:
        return await with_fallback(primary, fallback, condition)

    def usage_stats(self) -> UsageStats:
        total = self.limiter.total
        metrics = self.limiter.metrics
        return UsageStats(
            firecrawl=metrics["firecrawl"].model_copy(),
            ai=metrics["ai"].model_copy(),
            openai=metrics["openai"].model_copy(),
            total=total.model_copy(),
            efficiency=UsageEfficiency(
                cache_hit_rate=self.cache.hit_rate,
                avg_cost_per_report=total.costs / max(1, total.count),
                projected_monthly_cost=total.costs * 30,
            ),
        )

    # --- URL processing ---

    async def process_url(self, url: str) -> ScrapedContent:
        """Scrape one URL through the cache, enforcing the scrape budget on a miss."""
        async def fetch() -> ScrapedContent:
            if not self.metered:
                return await self.scraper(url)

            await self.limiter.acquire("firecrawl")
            try:
                content = await self.scraper(url)
            except Exception:
                self.limiter.release("firecrawl", success=False)
                raise
            self.limiter.release("firecrawl")
            return content

        return await self.with_cache(cache_key("url-content", {"url": url}), fetch, self.url_ttl)

    async def optimize_and_fetch(
        self,
        urls: list[str],
        on_progress: ProgressCallback | None = None,
    ) -> list[ScrapedContent]:
        """Supported URLs -> prioritized -> fetched progressively -> deduplicated."""
        supported, unsupported = filter_supported_urls(urls)
        if unsupported:
            logger.info("Skipping unsupported URLs: %s", ", ".join(unsupported))

        prioritized = prioritize_urls(supported)
        if not prioritized:
            logger.info("No high-value URLs among %d supported", len(supported))
            return []

        fetched = await progressive_fetch(
            prioritized,
            self.process_url,
            on_progress=on_progress,
            min_results=self.early_stop_results,
            min_chars=self.early_stop_chars,
        )
        unique = deduplicate_content(fetched)
        if len(unique) < len(fetched):
            logger.info("Dropped %d duplicate sources", len(fetched) - len(unique))
        return unique

    def describe(self) -> dict[str, Any]:
        return {
            "cached_entries": len(self.cache),
            "metered": self.metered,
            "firecrawl_remaining": self.limiter.remaining("firecrawl"),
        }
