"""URL scoring and ranking by substring heuristics."""

from __future__ import annotations

import re

MAX_PRIORITIZED_URLS = 5

# Points awarded for every pattern a URL contains
URL_PRIORITY: dict[str, int] = {
    "linkedin.com/company": 10,
    "about.": 9,
    "company.": 8,
    ".com": 7,
    "news": 6,
    "blog": 5,
    "press": 4,
    "investor": 3,
    "careers": 2,
}

HIGH_VALUE_PATTERNS = [
    re.compile(r"linkedin\.com/company"),
    re.compile(r"about\."),
    re.compile(r"company\."),
    re.compile(r"\.com$"),
    re.compile(r"news"),
    re.compile(r"blog"),
    re.compile(r"press"),
    re.compile(r"investor"),
    re.compile(r"careers"),
]


def is_high_value_url(url: object) -> bool:
    """Check whether a URL matches any of the high-value patterns."""
    if not url or not isinstance(url, str):
        return False
    return any(pattern.search(url) for pattern in HIGH_VALUE_PATTERNS)


def score_url(url: str) -> int:
    return sum(points for pattern, points in URL_PRIORITY.items() if pattern in url)


def prioritize_urls(urls: object, limit: int = MAX_PRIORITIZED_URLS) -> list[str]:
    """Filter to high-value URLs, rank by score and keep the top ``limit``.

    Ties keep their input order.
    """
    if not isinstance(urls, (list, tuple)):
        return []

    candidates = [u for u in urls if is_high_value_url(u)]
    ranked = sorted(candidates, key=score_url, reverse=True)
    return ranked[:limit]
