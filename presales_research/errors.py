"""Exception types raised across the research pipeline."""

from __future__ import annotations


class PresalesError(Exception):
    """Base class for errors with a user-facing message."""


class RateLimitExceeded(PresalesError):
    """A per-service hourly request budget is used up."""

    def __init__(self, service: str, retry_in_minutes: int):
        self.service = service
        self.retry_in_minutes = retry_in_minutes
        super().__init__(
            f"Rate limit exceeded for {service}. Try again in {retry_in_minutes} minutes."
        )


class ScrapeError(PresalesError):
    """Scraping a URL failed."""


class UnsupportedUrlError(ScrapeError):
    """The URL's domain is blocked by the scraping provider."""


class AnalysisError(PresalesError):
    """The LLM analysis could not be produced."""


class ReportGenerationError(PresalesError):
    """Report generation failed end to end."""


class ScrapeRateLimitError(ScrapeError):
    """The scraping provider itself answered with HTTP 429."""


def is_rate_limit_error(error: BaseException) -> bool:
    """True for our own budget errors and for a provider's 429."""
    return isinstance(error, (RateLimitExceeded, ScrapeRateLimitError))
