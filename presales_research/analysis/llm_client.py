"""Unified LLM client: routes to OpenAI (primary) or Anthropic (fallback)."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable

import anthropic
import openai
from openai import AsyncOpenAI

from presales_research.errors import AnalysisError
from presales_research.optimization.ratelimit import RateLimiter

logger = logging.getLogger(__name__)

# Maximum time (seconds) to wait for a single LLM call before giving up
_LLM_TIMEOUT = 120

# gpt-4o-mini pricing, USD per million tokens
_INPUT_COST_PER_M = 0.15
_OUTPUT_COST_PER_M = 0.60
_ESTIMATED_OUTPUT_TOKENS = 500

# Track which provider is active (sticky after an auth failure)
_active_provider: str | None = None
_openai_failed: bool = False


async def llm_complete(
    prompt: str,
    system: str,
    api_key_openai: str,
    api_key_anthropic: str = "",
    model_openai: str = "gpt-4o-mini",
    model_anthropic: str = "claude-3-5-haiku-latest",
    max_tokens: int = 2000,
    temperature: float = 0.5,
    limiter: RateLimiter | None = None,
) -> str:
    """Send a prompt to an LLM and return the response text (a JSON object).

    Tries OpenAI first. If OpenAI rejects the key (401), switches to
    Anthropic for this call AND all future calls in this session. Other
    OpenAI failures fall back to Anthropic for this call only.
    """
    global _active_provider, _openai_failed

    if not _openai_failed and api_key_openai:
        try:
            if limiter:
                await limiter.enforce("openai")
            text = await asyncio.wait_for(
                _call_openai(prompt, system, api_key_openai, model_openai, max_tokens, temperature),
                timeout=_LLM_TIMEOUT,
            )
            if limiter:
                limiter.track("openai")
            _active_provider = "openai"
            return text
        except asyncio.TimeoutError as e:
            logger.warning("OpenAI call timed out after %ds", _LLM_TIMEOUT)
            if not api_key_anthropic:
                raise AnalysisError(f"OpenAI call timed out after {_LLM_TIMEOUT}s") from e
        except openai.APIStatusError as e:
            if limiter:
                limiter.track("openai", success=False)
            error = _describe_openai_error(e)
            if e.status_code == 401:
                logger.warning("OpenAI authentication failed, switching to Anthropic for all future calls")
                _openai_failed = True
            else:
                logger.error("OpenAI error: %s", e)
            if not api_key_anthropic:
                raise error from e
        except openai.OpenAIError as e:
            logger.error("OpenAI error: %s", e)
            if not api_key_anthropic:
                raise AnalysisError(f"OpenAI API error: {e}") from e
        except AnalysisError as e:
            logger.error("OpenAI error: %s", e)
            if not api_key_anthropic:
                raise

        logger.info("Falling back to Anthropic for this call")

    if api_key_anthropic:
        if limiter:
            await limiter.enforce("ai")
        try:
            text = await asyncio.wait_for(
                _call_anthropic(prompt, system, api_key_anthropic, model_anthropic, max_tokens, temperature),
                timeout=_LLM_TIMEOUT,
            )
        except asyncio.TimeoutError as e:
            raise AnalysisError(f"Anthropic call timed out after {_LLM_TIMEOUT}s") from e
        except anthropic.APIError as e:
            raise AnalysisError(f"Anthropic API error: {e}") from e
        if limiter:
            limiter.track("ai")
        if _active_provider != "anthropic":
            _active_provider = "anthropic"
            logger.info("Using Anthropic (%s) for analysis", model_anthropic)
        return text

    raise AnalysisError(
        "No LLM provider available. Set OPENAI_API_KEY (or ANTHROPIC_API_KEY) "
        "in your .env file to enable AI analysis."
    )


def _describe_openai_error(e: openai.APIStatusError) -> AnalysisError:
    if e.status_code == 429:
        return AnalysisError("OpenAI rate limit exceeded. Please try again in a few minutes.")
    if e.status_code == 400:
        return AnalysisError("Invalid request to OpenAI. Please try with different content.")
    if e.status_code == 401:
        return AnalysisError("OpenAI authentication failed. Please check your API key.")
    return AnalysisError(f"OpenAI API error: {e.message}")


async def _call_openai(
    prompt: str,
    system: str,
    api_key: str,
    model: str,
    max_tokens: int,
    temperature: float,
) -> str:
    """Call the OpenAI chat completions API in JSON mode."""
    client = AsyncOpenAI(api_key=api_key)
    response = await client.chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ],
        temperature=temperature,
        max_tokens=max_tokens,
        response_format={"type": "json_object"},
    )
    content = response.choices[0].message.content if response.choices else None
    if not content:
        raise AnalysisError("No response from OpenAI")
    return content


async def _call_anthropic(
    prompt: str,
    system: str,
    api_key: str,
    model: str,
    max_tokens: int,
    temperature: float,
) -> str:
    """Call Anthropic Claude API."""
    client = anthropic.AsyncAnthropic(api_key=api_key)
    response = await client.messages.create(
        model=model,
        max_tokens=max_tokens,
        temperature=temperature,
        system=system,
        messages=[{"role": "user", "content": prompt}],
    )
    return response.content[0].text


async def check_connection(
    api_key: str,
    model: str = "gpt-4o-mini",
    max_retries: int = 3,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> bool:
    """Ping OpenAI; retries rate-limited attempts with exponential backoff."""
    if not api_key:
        return False

    client = AsyncOpenAI(api_key=api_key)
    for attempt in range(1, max_retries + 1):
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": 'Test connection. Respond with "OK".'}],
                max_tokens=5,
            )
            content = response.choices[0].message.content if response.choices else ""
            return "OK" in (content or "")
        except openai.APIStatusError as e:
            if e.status_code == 429 and attempt < max_retries:
                wait = 2 ** attempt
                logger.info("Rate limit hit, retrying in %ds (attempt %d/%d)", wait, attempt, max_retries)
                await sleep(wait)
                continue
            logger.error("OpenAI connection test failed: %s", e)
            return False
        except openai.OpenAIError as e:
            logger.error("OpenAI connection test failed: %s", e)
            return False
    return False


def estimate_cost(content_length: int) -> float:
    """Rough USD cost of analysing ``content_length`` characters (~4 chars/token)."""
    input_tokens = math.ceil(content_length / 4)
    input_cost = input_tokens / 1_000_000 * _INPUT_COST_PER_M
    output_cost = _ESTIMATED_OUTPUT_TOKENS / 1_000_000 * _OUTPUT_COST_PER_M
    return input_cost + output_cost


def get_active_provider() -> str:
    """Return the currently active LLM provider name."""
    return _active_provider or "openai"


def reset_provider_state() -> None:
    """Reset provider state (for testing)."""
    global _active_provider, _openai_failed
    _active_provider = None
    _openai_failed = False
