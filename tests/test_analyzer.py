import json

import pytest

from presales_research.analysis import analyzer
from presales_research.analysis.analyzer import analyze_content, validate_and_clean_response
from presales_research.analysis.heuristic import detect_industry, generate_heuristic_analysis
from presales_research.analysis.prompts import build_analysis_prompt, prepare_content_for_analysis
from presales_research.config import Config
from presales_research.errors import AnalysisError
from presales_research.models import AnalysisContext


def test_validate_and_clean_response_trims_lists_and_fills_defaults():
    raw = {
        "summary": "  Acme is growing fast.  ",
        "painPoints": ["one", "", "  ", "two", "three", "four", "five", "six"],
        "conversationStarters": [],
        "keyInsights": "not a list",
        "recommendations": "",
    }
    result = validate_and_clean_response(raw, "Acme")

    assert result.company_name == "Acme"
    assert result.summary == "Acme is growing fast."
    assert result.pain_points == ["one", "two", "three", "four", "five"]
    assert len(result.conversation_starters) == 3
    assert all(s.strip() for s in result.conversation_starters)
    assert len(result.key_insights) == 3
    assert "Acme" in result.company_info
    assert "Acme" in result.recommendations


def test_validate_accepts_snake_case_and_garbage():
    result = validate_and_clean_response({"company_info": "Founded 2001", "key_insights": ["a"]}, "Acme")
    assert result.company_info == "Founded 2001"
    assert result.key_insights == ["a"]

    empty = validate_and_clean_response(None, "Acme")
    assert empty.summary and empty.pain_points and empty.recommendations


def test_prepare_content_lists_every_source(make_page):
    pages = [
        make_page("https://acme.com", "<h2>About Us</h2><p>Rockets</p>", title="Acme",
                  description="Rocket maker", keywords=["rockets", "space"], published_date="2025-01-01"),
        make_page("https://acme.com/news", "Plain news text", title="News"),
    ]
    text = prepare_content_for_analysis(pages)

    assert "SOURCE 1: https://acme.com" in text
    assert "TITLE: Acme" in text
    assert "DESCRIPTION: Rocket maker" in text
    assert "KEYWORDS: rockets, space" in text
    assert "PUBLISHED: 2025-01-01" in text
    assert "SOURCE 2: https://acme.com/news" in text
    assert "CONTENT: Plain news text" in text


def test_prompt_includes_purpose_only_when_given():
    assert "REPORT PURPOSE" not in build_analysis_prompt("Acme", "content")
    prompt = build_analysis_prompt("Acme", "content", "Preparing for a sales call")
    assert "REPORT PURPOSE:\nPreparing for a sales call" in prompt
    assert '"painPoints"' in prompt


def test_detect_industry():
    assert detect_industry("Cloud software platform for data teams") == "technology"
    assert detect_industry("Hospital and patient care services") == "healthcare"
    assert detect_industry("We make chairs") == "business"


def test_heuristic_analysis_uses_sources_and_purpose(make_page):
    pages = [
        make_page("https://linkedin.com/company/acme", "Acme is a cloud software platform focused on growth"),
        make_page("https://acme.com", "Our customers rely on our digital technology"),
    ]
    result = generate_heuristic_analysis("Acme", pages, AnalysisContext(report_purpose="Competitive analysis"))

    assert "technology" in result.summary
    assert any("LinkedIn" in insight for insight in result.key_insights)
    assert any("competitors" in q for q in result.conversation_starters)
    assert "competitors" in result.recommendations
    assert 3 <= len(result.pain_points) <= 5
    assert len(result.conversation_starters) == 5


def test_heuristic_meeting_purpose(make_page):
    pages = [make_page("https://acme.com", "Industrial manufacturing and supply chain services")]
    result = generate_heuristic_analysis("Acme", pages, AnalysisContext(report_purpose="Prep for a meeting"))

    assert "manufacturing" in result.summary
    assert result.recommendations.startswith("For your upcoming meeting with Acme")


@pytest.mark.asyncio
async def test_analyze_content_without_llm_uses_heuristics(make_page):
    pages = [make_page("https://acme.com", "Cloud software for retailers")]
    result = await analyze_content("Acme", pages, Config())
    assert result.company_name == "Acme"
    assert result.key_insights


@pytest.mark.asyncio
async def test_analyze_content_parses_llm_json(make_page, monkeypatch):
    payload = {
        "summary": "LLM summary",
        "companyInfo": "LLM info",
        "painPoints": ["p1"],
        "conversationStarters": ["q1"],
        "keyInsights": ["i1"],
        "recommendations": "LLM recs",
    }
    prompts = []

    async def fake_complete(prompt, system, **kwargs):
        prompts.append(prompt)
        return "```json\n" + json.dumps(payload) + "\n```"

    monkeypatch.setattr(analyzer, "llm_complete", fake_complete)
    pages = [make_page("https://acme.com", "content")]

    result = await analyze_content(
        "Acme", pages, Config(openai_api_key="sk"), AnalysisContext(report_purpose="pitch"),
    )

    assert result.summary == "LLM summary"
    assert result.pain_points == ["p1"]
    assert "REPORT PURPOSE:\npitch" in prompts[0]


@pytest.mark.asyncio
async def test_analyze_content_falls_back_on_llm_failure(make_page, monkeypatch):
    async def failing(prompt, system, **kwargs):
        raise AnalysisError("OpenAI rate limit exceeded")

    monkeypatch.setattr(analyzer, "llm_complete", failing)
    pages = [make_page("https://acme.com", "Banking and payment services")]

    result = await analyze_content("Acme", pages, Config(openai_api_key="sk"))
    assert "finance" in result.summary


@pytest.mark.asyncio
async def test_analyze_content_falls_back_on_unparseable_json(make_page, monkeypatch):
    async def garbage(prompt, system, **kwargs):
        return "not json at all"

    monkeypatch.setattr(analyzer, "llm_complete", garbage)
    result = await analyze_content("Acme", [make_page("https://acme.com", "text")], Config(openai_api_key="sk"))
    assert result.company_name == "Acme"


@pytest.mark.asyncio
async def test_analyze_content_requires_pages():
    with pytest.raises(AnalysisError):
        await analyze_content("Acme", [], Config())
