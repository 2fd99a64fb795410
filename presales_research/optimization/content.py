"""Trim scraped content down to the sections worth sending to the LLM."""

from __future__ import annotations

import re

from presales_research.utils.helpers import utf16_truncate

MAX_ANALYSIS_CHARS = 10000
MIN_PARAGRAPH_CHARS = 100

# Blocks that never carry company information
_NOISE_PATTERNS = [
    re.compile(r"<script[^>]*>[\s\S]*?</script>", re.I),
    re.compile(r"<style[^>]*>[\s\S]*?</style>", re.I),
    re.compile(r"<!--[\s\S]*?-->"),
    re.compile(r"<nav[^>]*>[\s\S]*?</nav>", re.I),
    re.compile(r"<footer[^>]*>[\s\S]*?</footer>", re.I),
    re.compile(r"<aside[^>]*>[\s\S]*?</aside>", re.I),
    re.compile(r"<form[^>]*>[\s\S]*?</form>", re.I),
    re.compile(r"<iframe[^>]*>[\s\S]*?</iframe>", re.I),
]

_HEADER_RE = re.compile(r"<h[1-3][^>]*>(.*?)</h[1-3]>", re.I)
_PARAGRAPH_SPLIT_RE = re.compile(r"<p[^>]*>|</p>")
_TAG_RE = re.compile(r"<[^>]*>")

PRIORITY_KEYWORDS = [
    "about us", "company", "mission", "vision", "values", "team", "leadership",
    "products", "services", "solutions", "offerings", "features",
    "customers", "clients", "partners", "testimonials",
    "industry", "market", "technology", "innovation",
    "challenges", "problems", "issues", "pain points",
    "strategy", "growth", "expansion", "roadmap",
    "news", "press release", "announcement",
]


def _has_priority_keyword(*texts: str) -> bool:
    lowered = [t.lower() for t in texts]
    return any(kw in t for kw in PRIORITY_KEYWORDS for t in lowered)


def extract_relevant_sections(content: str) -> list[str]:
    """Pull out header sections (h1-h3) mentioning a priority keyword.

    A section runs from the end of its header to the start of the next one.
    Falls back to long keyword-bearing paragraphs when no section qualifies.
    """
    sections: list[str] = []

    headers = list(_HEADER_RE.finditer(content))
    for i, match in enumerate(headers):
        header_text = _TAG_RE.sub("", match.group(1)).strip()
        end = headers[i + 1].start() if i + 1 < len(headers) else len(content)
        body = content[match.end():end].strip()

        if _has_priority_keyword(header_text, body):
            sections.append(f"{header_text}:\n{_TAG_RE.sub(' ', body)}")

    if sections:
        return sections

    for paragraph in _PARAGRAPH_SPLIT_RE.split(content):
        if len(paragraph.strip()) <= MIN_PARAGRAPH_CHARS:
            continue
        if _has_priority_keyword(paragraph):
            sections.append(_TAG_RE.sub(" ", paragraph).strip())

    return sections


def optimize_content_for_analysis(content: object, max_chars: int = MAX_ANALYSIS_CHARS) -> str:
    """Strip noise blocks, keep relevant sections and cap the length."""
    if not content or not isinstance(content, str):
        return ""

    optimized = content
    for pattern in _NOISE_PATTERNS:
        optimized = pattern.sub("", optimized)
    optimized = re.sub(r"\s+", " ", optimized).strip()

    sections = extract_relevant_sections(optimized)
    final = "\n\n".join(sections) if sections else optimized
    return utf16_truncate(final, max_chars)
