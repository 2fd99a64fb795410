"""Usage/cost statistics and service status."""

from __future__ import annotations

import logging
import sqlite3

from fastapi import APIRouter

from presales_research.analysis.llm_client import check_connection, estimate_cost, get_active_provider
from presales_research.web.deps import get_config, get_optimizer, get_store

logger = logging.getLogger(__name__)
router = APIRouter(tags=["usage"])


@router.get("/usage")
async def usage(content_chars: int = 10000):
    """Per-service counters, efficiency figures and a per-report cost estimate."""
    optimizer = get_optimizer()
    stats = optimizer.usage_stats()
    return {
        **stats.model_dump(),
        "optimizer": optimizer.describe(),
        "estimated_analysis_cost": estimate_cost(content_chars),
    }


@router.get("/status")
async def status(check: bool = False):
    """Which scraper and analyzer are in use, and whether the database answers.

    With ``check=true`` the OpenAI key is verified with a live call.
    """
    config = get_config()

    openai_ok: bool | None = None
    if check and config.openai_enabled:
        openai_ok = await check_connection(config.openai_api_key, config.openai_model)

    try:
        report_count = get_store().count()
        database = {"connected": True, "reports": report_count}
    except sqlite3.Error as e:
        logger.error("Database status check failed: %s", e)
        database = {"connected": False, "error": str(e)}

    if config.openai_enabled or config.anthropic_enabled:
        analyzer_provider = get_active_provider() if config.openai_enabled else "anthropic"
    else:
        analyzer_provider = "heuristic"

    return {
        "scraper": {
            "provider": "firecrawl" if config.firecrawl_enabled else "direct",
            "configured": config.firecrawl_enabled,
        },
        "analyzer": {
            "provider": analyzer_provider,
            "openai": config.openai_enabled,
            "anthropic": config.anthropic_enabled,
            "openai_connection": openai_ok,
        },
        "database": database,
    }
