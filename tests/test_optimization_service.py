import asyncio

import pytest

from presales_research.cache.store import cache_key
from presales_research.errors import RateLimitExceeded, ScrapeError, ScrapeRateLimitError
from presales_research.optimization.ratelimit import RateLimiter
from presales_research.optimization.service import CostOptimizationService


class FakeScraper:
    def __init__(self, make_page, content_size=3000, failing=()):
        self.make_page = make_page
        self.content_size = content_size
        self.failing = set(failing)
        self.calls = []

    async def __call__(self, url):
        self.calls.append(url)
        if url in self.failing:
            raise ScrapeError(f"could not scrape {url}")
        return self.make_page(url, f"{url} " + "x" * self.content_size)


def _limiter():
    async def no_sleep(seconds):
        return None
    return RateLimiter(sleep=no_sleep)


@pytest.mark.asyncio
async def test_optimize_and_fetch_filters_prioritizes_and_stops_early(make_page):
    scraper = FakeScraper(make_page)
    service = CostOptimizationService(scraper, limiter=_limiter())

    urls = [
        "  ",
        "not a url",
        "https://instagram.com/acme",
        "https://acme.io/blog",
        "https://linkedin.com/company/acme",
        "https://acme.com",
    ]
    pages = await service.optimize_and_fetch(urls)

    assert [p.url for p in pages] == ["https://linkedin.com/company/acme", "https://acme.com"]
    assert scraper.calls == ["https://linkedin.com/company/acme", "https://acme.com"]
    assert service.limiter.metrics["firecrawl"].count == 2


@pytest.mark.asyncio
async def test_optimize_and_fetch_without_high_value_urls(make_page):
    scraper = FakeScraper(make_page)
    service = CostOptimizationService(scraper, limiter=_limiter())

    assert await service.optimize_and_fetch(["https://acme.io/pricing"]) == []
    assert scraper.calls == []


@pytest.mark.asyncio
async def test_process_url_is_cached(make_page):
    scraper = FakeScraper(make_page)
    service = CostOptimizationService(scraper, limiter=_limiter())

    first = await service.process_url("https://acme.com")
    second = await service.process_url("https://acme.com")

    assert first == second
    assert scraper.calls == ["https://acme.com"]
    assert service.cache.hits == 1
    assert service.limiter.metrics["firecrawl"].count == 1


@pytest.mark.asyncio
async def test_failed_scrape_is_not_cached_or_counted(make_page):
    scraper = FakeScraper(make_page, failing={"https://acme.com"})
    service = CostOptimizationService(scraper, limiter=_limiter())

    with pytest.raises(ScrapeError):
        await service.process_url("https://acme.com")
    assert len(service.cache) == 0
    assert service.limiter.metrics["firecrawl"].count == 0


@pytest.mark.asyncio
async def test_unmetered_scraper_skips_rate_limits(make_page):
    scraper = FakeScraper(make_page)
    service = CostOptimizationService(scraper, limiter=_limiter(), metered=False)

    await service.process_url("https://acme.com")
    assert service.limiter.total.count == 0


@pytest.mark.asyncio
async def test_duplicate_pages_are_dropped(make_page):
    async def same_content(url):
        return make_page(url, "identical body " * 400)

    service = CostOptimizationService(same_content, limiter=_limiter(), early_stop_chars=100000)
    pages = await service.optimize_and_fetch(["https://acme.com", "https://acme.io/news"])

    assert [p.url for p in pages] == ["https://acme.com"]


@pytest.mark.asyncio
async def test_with_cache_uses_default_ttl(make_page):
    service = CostOptimizationService(FakeScraper(make_page), default_ttl=60)
    calls = []

    async def fetcher():
        calls.append(1)
        return "value"

    assert await service.with_cache("k", fetcher) == "value"
    assert await service.with_cache("k", fetcher) == "value"
    assert calls == [1]


def test_usage_stats_efficiency(make_page):
    service = CostOptimizationService(FakeScraper(make_page), limiter=_limiter())
    service.track_request("firecrawl")
    service.track_request("openai")
    service.track_request("ai", success=False)

    stats = service.usage_stats()

    assert stats.firecrawl.count == 1
    assert stats.ai.count == 0
    assert stats.total.count == 2
    assert stats.total.costs == pytest.approx(0.015)
    assert stats.efficiency.avg_cost_per_report == pytest.approx(0.0075)
    assert stats.efficiency.projected_monthly_cost == pytest.approx(0.45)
    assert stats.efficiency.cache_hit_rate == 0.0


def test_usage_stats_with_no_requests(make_page):
    stats = CostOptimizationService(FakeScraper(make_page)).usage_stats()
    assert stats.efficiency.avg_cost_per_report == 0.0
    assert stats.efficiency.projected_monthly_cost == 0.0


@pytest.mark.asyncio
async def test_cached_urls_are_served_after_budget_is_spent(make_page):
    careers = "https://acme.com/careers"
    scraper = FakeScraper(make_page)
    service = CostOptimizationService(scraper, limiter=_limiter())
    service.cache.set(cache_key("url-content", {"url": careers}), make_page(careers, "jobs"), 7200)
    service.limiter.metrics["firecrawl"].count = 100

    pages = await service.optimize_and_fetch(["https://acme.com/news", "https://acme.com/blog", careers])

    assert [p.url for p in pages] == [careers]
    assert scraper.calls == []


@pytest.mark.asyncio
async def test_spent_budget_with_nothing_cached_raises(make_page):
    service = CostOptimizationService(FakeScraper(make_page), limiter=_limiter())
    service.limiter.metrics["firecrawl"].count = 100

    with pytest.raises(RateLimitExceeded):
        await service.optimize_and_fetch(["https://acme.com/news"])


@pytest.mark.asyncio
async def test_provider_429_is_raised_and_not_counted(make_page):
    async def throttled(url):
        raise ScrapeRateLimitError("Rate limit exceeded. Please try again in a few minutes.")

    service = CostOptimizationService(throttled, limiter=_limiter())

    with pytest.raises(ScrapeRateLimitError):
        await service.optimize_and_fetch(["https://acme.com", "https://acme.com/news"])
    assert service.limiter.metrics["firecrawl"].count == 0


@pytest.mark.asyncio
async def test_concurrent_scrapes_share_the_last_slot(make_page):
    async def slow(url):
        await asyncio.sleep(0)
        return make_page(url, "content")

    service = CostOptimizationService(slow, limiter=_limiter())
    service.limiter.metrics["firecrawl"].count = 99

    outcomes = await asyncio.gather(
        service.process_url("https://acme.com"),
        service.process_url("https://acme.com/news"),
        return_exceptions=True,
    )

    assert sum(isinstance(o, RateLimitExceeded) for o in outcomes) == 1
    assert service.limiter.metrics["firecrawl"].count == 100
    assert service.limiter.remaining("firecrawl") == 0
