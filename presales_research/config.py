"""Configuration management via environment variables and .env file."""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class Config(BaseModel):
    """Application configuration loaded from environment."""

    app_name: str = "PreSales AI Research Agent"

    # API keys (all optional: missing keys select fallbacks)
    firecrawl_api_key: str = ""
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    # Firecrawl
    firecrawl_base_url: str = "https://api.firecrawl.dev/v0"
    scrape_timeout: int = 30
    scrape_batch_size: int = 2
    scrape_batch_delay: float = 1.5

    # OpenAI model settings
    openai_model: str = "gpt-4o-mini"
    openai_max_tokens: int = 2000
    openai_temperature: float = 0.5

    # Anthropic (secondary provider)
    anthropic_model: str = "claude-3-5-haiku-latest"

    # Report generation
    max_urls_per_report: int = 10
    min_content_length: int = 100
    progressive_fetch: bool = True
    early_stop_chars: int = 5000
    early_stop_results: int = 2
    use_placeholder_content: bool = True

    # Cache
    cache_ttl_seconds: int = 3600     # default for with_cache
    url_cache_ttl_seconds: int = 7200  # scraped URL content

    # Storage
    db_path: str = ".presales_research.db"

    # Web server
    web_host: str = "127.0.0.1"
    web_port: int = 8000

    @property
    def firecrawl_enabled(self) -> bool:
        return bool(self.firecrawl_api_key)

    @property
    def openai_enabled(self) -> bool:
        return bool(self.openai_api_key)

    @property
    def anthropic_enabled(self) -> bool:
        return bool(self.anthropic_api_key)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_config() -> Config:
    """Load configuration from .env file and environment variables.

    Environment variables override .env values. No key is mandatory:
    without FIRECRAWL_API_KEY pages are fetched directly, without an LLM
    key the heuristic analyzer is used.
    """
    load_dotenv()

    config = Config(
        firecrawl_api_key=os.getenv("FIRECRAWL_API_KEY", ""),
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
        firecrawl_base_url=os.getenv("FIRECRAWL_BASE_URL", "https://api.firecrawl.dev/v0"),
        scrape_timeout=int(os.getenv("SCRAPE_TIMEOUT", "30")),
        scrape_batch_size=int(os.getenv("SCRAPE_BATCH_SIZE", "2")),
        scrape_batch_delay=float(os.getenv("SCRAPE_BATCH_DELAY", "1.5")),
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        openai_max_tokens=int(os.getenv("OPENAI_MAX_TOKENS", "2000")),
        anthropic_model=os.getenv("ANTHROPIC_MODEL", "claude-3-5-haiku-latest"),
        max_urls_per_report=int(os.getenv("MAX_URLS_PER_REPORT", "10")),
        progressive_fetch=_env_bool("PROGRESSIVE_FETCH", True),
        early_stop_chars=int(os.getenv("EARLY_STOP_CHARS", "5000")),
        use_placeholder_content=_env_bool("USE_PLACEHOLDER_CONTENT", True),
        cache_ttl_seconds=int(os.getenv("CACHE_TTL_SECONDS", "3600")),
        url_cache_ttl_seconds=int(os.getenv("URL_CACHE_TTL_SECONDS", "7200")),
        db_path=os.getenv("DB_PATH", ".presales_research.db"),
        web_host=os.getenv("WEB_HOST", "127.0.0.1"),
        web_port=int(os.getenv("WEB_PORT", "8000")),
    )

    # Missing keys are non-fatal
    if not config.firecrawl_enabled:
        logger.info("FIRECRAWL_API_KEY not set, fetching pages directly")
    if not config.openai_enabled and not config.anthropic_enabled:
        logger.info("No LLM key set, reports use heuristic analysis")

    return config
