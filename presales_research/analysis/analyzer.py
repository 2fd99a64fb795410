"""Turns scraped pages into structured sales insights.

The LLM path builds one prompt from every page, asks for a JSON object and
validates it field by field. When no LLM key is configured, or every
provider failed, the keyword heuristic produces the report instead.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from presales_research.analysis.heuristic import generate_heuristic_analysis
from presales_research.analysis.llm_client import llm_complete
from presales_research.analysis.prompts import (
    SYSTEM_PROMPT,
    build_analysis_prompt,
    prepare_content_for_analysis,
)
from presales_research.config import Config
from presales_research.errors import AnalysisError
from presales_research.models import AnalysisContext, AnalysisResult, ScrapedContent
from presales_research.optimization.batching import with_fallback
from presales_research.optimization.ratelimit import RateLimiter

logger = logging.getLogger(__name__)

MAX_LIST_ITEMS = 5


def _default_pain_points(company_name: str) -> list[str]:
    return [
        f"Scaling operations efficiently as {company_name} grows",
        "Staying competitive in a rapidly changing market",
        "Turning data into timely business decisions",
    ]


def _default_starters(company_name: str) -> list[str]:
    return [
        f"What are {company_name}'s top priorities for the coming year?",
        "Which challenges are taking most of your team's time right now?",
        "How do you measure success for your current initiatives?",
    ]


def _default_insights(company_name: str) -> list[str]:
    return [
        f"{company_name} is investing in its market presence",
        "Operational efficiency appears to be a strategic focus",
        "Customer experience is central to their positioning",
    ]


def _clean_list(value: Any, defaults: list[str]) -> list[str]:
    """Keep non-blank strings, at most five; fall back to ``defaults`` when empty."""
    if not isinstance(value, list):
        return defaults
    items = [str(v).strip() for v in value if isinstance(v, (str, int, float)) and str(v).strip()]
    return items[:MAX_LIST_ITEMS] or defaults


def _clean_text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def validate_and_clean_response(data: Any, company_name: str) -> AnalysisResult:
    """Coerce a raw LLM JSON object into an AnalysisResult with sane defaults.

    Accepts both the camelCase keys the prompt asks for and snake_case.
    """
    if not isinstance(data, dict):
        data = {}

    def pick(camel: str, snake: str) -> Any:
        return data.get(camel, data.get(snake))

    return AnalysisResult(
        company_name=company_name,
        summary=_clean_text(
            data.get("summary"),
            f"{company_name} is a company whose public sources were analyzed for this report.",
        ),
        company_info=_clean_text(
            pick("companyInfo", "company_info"),
            f"Limited public information was available about {company_name}.",
        ),
        pain_points=_clean_list(pick("painPoints", "pain_points"), _default_pain_points(company_name)),
        conversation_starters=_clean_list(
            pick("conversationStarters", "conversation_starters"), _default_starters(company_name),
        ),
        key_insights=_clean_list(pick("keyInsights", "key_insights"), _default_insights(company_name)),
        recommendations=_clean_text(
            data.get("recommendations"),
            f"Open with discovery questions to learn {company_name}'s current priorities "
            "before positioning a solution.",
        ),
    )


async def analyze_with_llm(
    company_name: str,
    pages: list[ScrapedContent],
    config: Config,
    context: AnalysisContext | None = None,
    limiter: RateLimiter | None = None,
) -> AnalysisResult:
    """Single LLM call over all pages. Raises AnalysisError on any failure."""
    content_summary = prepare_content_for_analysis(pages)
    prompt = build_analysis_prompt(
        company_name, content_summary, context.report_purpose if context else None,
    )

    text = await llm_complete(
        prompt,
        SYSTEM_PROMPT,
        api_key_openai=config.openai_api_key,
        api_key_anthropic=config.anthropic_api_key,
        model_openai=config.openai_model,
        model_anthropic=config.anthropic_model,
        max_tokens=config.openai_max_tokens,
        temperature=config.openai_temperature,
        limiter=limiter,
    )

    try:
        data = json.loads(_strip_code_fence(text))
    except json.JSONDecodeError as e:
        raise AnalysisError(f"Failed to parse analysis response: {e}") from e

    return validate_and_clean_response(data, company_name)


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        text = text.rsplit("```", 1)[0]
    return text.strip()


async def analyze_content(
    company_name: str,
    pages: list[ScrapedContent],
    config: Config,
    context: AnalysisContext | None = None,
    limiter: RateLimiter | None = None,
) -> AnalysisResult:
    """Analyze scraped pages, preferring the LLM and falling back to heuristics."""
    if not pages:
        raise AnalysisError("No content to analyze")

    async def heuristic() -> AnalysisResult:
        return generate_heuristic_analysis(company_name, pages, context)

    if not (config.openai_enabled or config.anthropic_enabled):
        logger.info("No LLM configured, using heuristic analysis for %s", company_name)
        return await heuristic()

    async def llm() -> AnalysisResult:
        return await analyze_with_llm(company_name, pages, config, context, limiter)

    return await with_fallback(llm, heuristic, lambda exc: isinstance(exc, AnalysisError))
