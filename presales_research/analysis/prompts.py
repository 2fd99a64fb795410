"""Prompt templates for the pre-sales research analysis."""

from __future__ import annotations

from presales_research.models import ScrapedContent
from presales_research.optimization.content import optimize_content_for_analysis

SYSTEM_PROMPT = (
    "You are an expert sales research analyst with 15+ years of experience in B2B sales. "
    "Your analysis is always concise, actionable, and focused on business value. You identify "
    "specific pain points that can be addressed by solutions, and provide strategic conversation "
    "starters that demonstrate deep industry knowledge. Your insights are evidence-based, drawing "
    "directly from the source material provided."
)

# ---------------------------------------------------------------------------
# Analysis prompt
# ---------------------------------------------------------------------------

ANALYSIS_PROMPT = """
Analyze the following information about "{company_name}" and provide a concise, actionable pre-sales research report.

COMPANY INFORMATION:
{content_summary}
{purpose_block}
Provide a JSON response with the following structure:

{{
  "summary": "A concise 2-3 sentence executive summary focusing on the company's current market position, strategic priorities, and business challenges",

  "companyInfo": "Factual information about the company including size, industry, key offerings, and recent developments (2-3 sentences, be specific and avoid generalities)",

  "painPoints": [
    "3-5 specific business challenges this company faces, based on evidence from the content",
    "Each pain point should be concrete, specific to this company (not generic), and actionable",
    "Focus on operational, strategic, or market challenges that a solution provider could address"
  ],

  "conversationStarters": [
    "3-5 insightful questions that demonstrate research knowledge and industry expertise",
    "Questions should be specific to this company's situation, not generic sales questions",
    "Each question should connect to a specific pain point or strategic initiative mentioned in the content"
  ],

  "keyInsights": [
    "3-5 strategic insights about the company that would be valuable for sales preparation",
    "Each insight should be evidence-based, drawing from specific content in the sources",
    "Include competitive positioning, market trends, or strategic initiatives when evident"
  ],

  "recommendations": "Specific, actionable advice for approaching this company, including value proposition positioning, timing considerations, and key stakeholders to target (2-3 sentences)"
}}

CRITICAL GUIDELINES:
1. Be extremely specific and avoid generic statements that could apply to any company
2. Base all insights directly on evidence from the provided content
3. Focus on business value and strategic implications, not technical details
4. Keep all points concise, clear, and actionable
5. Prioritize quality over quantity - fewer high-quality insights are better than many generic ones
6. Ensure recommendations are specific to this company's situation and challenges
"""

PURPOSE_BLOCK = """
REPORT PURPOSE:
{report_purpose}

This report will be used for the purpose described above. Please tailor your analysis to be most useful for this specific purpose.
"""


def prepare_content_for_analysis(pages: list[ScrapedContent]) -> str:
    """One SOURCE block per page, each trimmed by the content optimizer."""
    blocks = []
    for i, page in enumerate(pages, start=1):
        lines = [
            f"SOURCE {i}: {page.url}",
            f"TITLE: {page.title}",
            f"CONTENT: {optimize_content_for_analysis(page.content)}",
        ]
        meta = page.metadata
        if meta.description:
            lines.append(f"DESCRIPTION: {meta.description}")
        if meta.keywords:
            lines.append(f"KEYWORDS: {', '.join(meta.keywords)}")
        if meta.published_date:
            lines.append(f"PUBLISHED: {meta.published_date}")
        lines.append("---")
        blocks.append("\n".join(lines))
    return "\n".join(blocks)


def build_analysis_prompt(
    company_name: str,
    content_summary: str,
    report_purpose: str | None = None,
) -> str:
    purpose_block = PURPOSE_BLOCK.format(report_purpose=report_purpose) if report_purpose else ""
    return ANALYSIS_PROMPT.format(
        company_name=company_name,
        content_summary=content_summary,
        purpose_block=purpose_block,
    )
