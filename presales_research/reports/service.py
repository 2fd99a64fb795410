"""Report generation: validate URLs, fetch content, analyze, persist."""

from __future__ import annotations

import logging
import sqlite3
import time
from datetime import datetime

from presales_research.analysis.analyzer import analyze_content
from presales_research.cache.store import ContentCache
from presales_research.config import Config
from presales_research.errors import (
    AnalysisError,
    PresalesError,
    ReportGenerationError,
    ScrapeError,
    is_rate_limit_error,
)
from presales_research.models import AnalysisContext, AnalysisResult, Report, ScrapedContent
from presales_research.optimization.progressive import ProgressCallback
from presales_research.optimization.ratelimit import RateLimiter
from presales_research.optimization.service import CostOptimizationService
from presales_research.reports.store import ReportStore
from presales_research.scrape.extractor import DirectScraper
from presales_research.scrape.firecrawl_client import FirecrawlClient
from presales_research.scrape.placeholder import placeholder_content
from presales_research.utils.validation import validate_company_name

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "API rate limit exceeded. Please try again in a few minutes."
ANALYSIS_FAILED_MESSAGE = "Failed to analyze content. Please try again or use different URLs."

# Fetch progress from the optimizer (0-100) is mapped into this window
_FETCH_PROGRESS_START = 25
_FETCH_PROGRESS_END = 60


def build_scraper(config: Config) -> FirecrawlClient | DirectScraper:
    """Firecrawl when a key is configured, otherwise direct fetch + trafilatura."""
    if config.firecrawl_enabled:
        return FirecrawlClient(
            config.firecrawl_api_key,
            base_url=config.firecrawl_base_url,
            timeout=config.scrape_timeout,
            batch_size=config.scrape_batch_size,
            batch_delay=config.scrape_batch_delay,
        )
    return DirectScraper(timeout=config.scrape_timeout, min_chars=config.min_content_length)


def build_optimizer(
    config: Config,
    scraper: FirecrawlClient | DirectScraper | None = None,
) -> CostOptimizationService:
    scraper = scraper if scraper is not None else build_scraper(config)
    return CostOptimizationService(
        scraper.scrape_url,
        cache=ContentCache(),
        limiter=RateLimiter(),
        metered=isinstance(scraper, FirecrawlClient),
        url_ttl=config.url_cache_ttl_seconds,
        default_ttl=config.cache_ttl_seconds,
        early_stop_results=config.early_stop_results,
        early_stop_chars=config.early_stop_chars,
    )


def _is_rate_limit(error: Exception) -> bool:
    if is_rate_limit_error(error):
        return True
    message = str(error).lower()
    return "rate limit" in message or "429" in message


class ReportService:
    """Runs one report end to end and reports progress as (message, percent)."""

    def __init__(
        self,
        config: Config,
        optimizer: CostOptimizationService,
        scraper: FirecrawlClient | DirectScraper,
        store: ReportStore | None = None,
    ):
        self.config = config
        self.optimizer = optimizer
        self.scraper = scraper
        self.store = store

    @classmethod
    def from_config(
        cls,
        config: Config,
        store: ReportStore | None = None,
        optimizer: CostOptimizationService | None = None,
    ) -> ReportService:
        scraper = build_scraper(config)
        if optimizer is None:
            optimizer = build_optimizer(config, scraper)
        return cls(config, optimizer, scraper, store)

    async def generate_report(
        self,
        company_name: str,
        urls: list[str],
        on_progress: ProgressCallback | None = None,
        report_purpose: str | None = None,
        user_id: str | None = None,
        full: bool | None = None,
    ) -> Report:
        """Generate and save a report.

        ``full`` scrapes every URL in batches instead of the prioritized,
        early-stopping fetch; it defaults to the inverse of the
        ``progressive_fetch`` setting. Every failure is raised as
        ReportGenerationError.
        """
        def progress(message: str, pct: float) -> None:
            if on_progress:
                on_progress(message, pct)

        if full is None:
            full = not self.config.progressive_fetch

        try:
            progress("Validating URLs...", 10)

            name_error = validate_company_name(company_name)
            if name_error:
                raise PresalesError(name_error)
            company_name = company_name.strip()

            valid_urls = [u.strip() for u in urls if u and u.strip()][:self.config.max_urls_per_report]
            if not valid_urls:
                raise PresalesError("No valid URLs provided. Please enter at least one valid URL.")

            progress("Extracting content from web sources...", _FETCH_PROGRESS_START)
            pages = await self._extract_content(company_name, valid_urls, full, progress)

            progress("Performing AI analysis...", _FETCH_PROGRESS_END)
            context = AnalysisContext(report_purpose=report_purpose) if report_purpose else None
            try:
                analysis = await analyze_content(
                    company_name, pages, self.config, context, self.optimizer.limiter,
                )
            except Exception as e:
                logger.error("AI analysis error: %s", e)
                raise AnalysisError(ANALYSIS_FAILED_MESSAGE) from e

            progress("Generating comprehensive report...", 80)

            progress("Finalizing and saving report...", 95)
            report = self._save(analysis, valid_urls, report_purpose or "", user_id)

            progress("Report generated successfully!", 100)
            return report

        except Exception as e:
            logger.error("Error generating report for %s: %s", company_name, e)
            raise ReportGenerationError(f"Failed to generate report: {e}") from e

    async def _extract_content(
        self,
        company_name: str,
        urls: list[str],
        full: bool,
        progress: ProgressCallback,
    ) -> list[ScrapedContent]:
        """Fetch page content; substitutes placeholder pages for anything but rate limiting."""
        def fetch_progress(message: str, pct: float) -> None:
            span = _FETCH_PROGRESS_END - _FETCH_PROGRESS_START
            progress(message, _FETCH_PROGRESS_START + pct / 100 * span)

        try:
            if full:
                pages = await self._scrape_all(urls)
            else:
                pages = await self.optimizer.optimize_and_fetch(urls, fetch_progress)
            if not pages:
                raise ScrapeError("No content could be extracted from the provided URLs")
            return pages
        except Exception as e:
            if _is_rate_limit(e):
                raise PresalesError(RATE_LIMIT_MESSAGE) from e
            if not self.config.use_placeholder_content:
                raise
            logger.warning("Scraping failed, using placeholder content: %s", e)
            return placeholder_content(company_name, urls)

    async def _scrape_all(self, urls: list[str]) -> list[ScrapedContent]:
        """Every URL, batched by the scraper, each through the optimizer's cache and budget."""
        return await self.scraper.scrape_multiple_urls(urls, scrape_one=self.optimizer.process_url)

    def _save(
        self,
        analysis: AnalysisResult,
        source_urls: list[str],
        report_purpose: str,
        user_id: str | None,
    ) -> Report:
        if self.store is not None:
            try:
                return self.store.create(analysis, source_urls, report_purpose, user_id)
            except sqlite3.Error as e:
                logger.error("Database error, keeping report locally: %s", e)
        return create_local_report(analysis, source_urls, report_purpose, user_id)


def create_local_report(
    analysis: AnalysisResult,
    source_urls: list[str],
    report_purpose: str = "",
    user_id: str | None = None,
) -> Report:
    return Report(
        id=f"local-{int(time.time() * 1000)}",
        user_id=user_id,
        company_name=analysis.company_name,
        generated_at=datetime.now().isoformat(),
        summary=analysis.summary,
        company_info=analysis.company_info,
        pain_points=analysis.pain_points,
        conversation_starters=analysis.conversation_starters,
        key_insights=analysis.key_insights,
        recommendations=analysis.recommendations,
        source_urls=source_urls,
        report_purpose=report_purpose,
        is_local=True,
    )
