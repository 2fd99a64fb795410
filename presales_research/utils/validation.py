"""URL, form and report-data validation helpers."""

from __future__ import annotations

import re
from urllib.parse import urlparse

# Domains the scraping provider refuses to crawl
RESTRICTED_DOMAINS = [
    "instagram.com",
    "facebook.com",
    "twitter.com",
    "x.com",
    "tiktok.com",
    "snapchat.com",
    "pinterest.com",
    "reddit.com",
    "youtube.com",
    "discord.com",
    "telegram.org",
    "whatsapp.com",
]

SUPPORTED_URL_EXAMPLES = [
    "https://company.com",
    "https://linkedin.com/company/company-name",
    "https://news.site.com/article",
    "https://blog.company.com",
    "https://about.company.com",
]

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _hostname(url: str) -> str | None:
    try:
        return urlparse(url).hostname
    except ValueError:
        return None


def is_valid_url(url: object) -> bool:
    """An absolute http(s) URL with a host."""
    if not url or not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.hostname)


def is_restricted_host(hostname: str) -> bool:
    hostname = hostname.lower()
    return any(hostname == d or hostname.endswith(f".{d}") for d in RESTRICTED_DOMAINS)


def is_supported_url(url: object) -> bool:
    """Valid and not on a restricted domain (exact host or any subdomain)."""
    if not is_valid_url(url):
        return False
    hostname = _hostname(url.strip())  # type: ignore[union-attr]
    return bool(hostname) and not is_restricted_host(hostname)


def validation_message(url: str) -> str | None:
    """User-facing problem with a URL, or None if it is fine (or blank)."""
    if not url or not url.strip():
        return None

    if not is_valid_url(url):
        return "Please enter a valid URL starting with http:// or https://"

    if not is_supported_url(url):
        hostname = _hostname(url.strip())
        if hostname:
            return f"{hostname} is not supported. Try company websites, LinkedIn pages, or news articles."
        return "This URL is not supported. Try company websites, LinkedIn pages, or news articles."

    return None


def filter_supported_urls(urls: object) -> tuple[list[str], list[str]]:
    """Split URLs into (supported, unsupported). Blank entries are dropped."""
    supported: list[str] = []
    unsupported: list[str] = []
    if not isinstance(urls, (list, tuple)):
        return supported, unsupported

    for url in urls:
        if not url or not isinstance(url, str):
            continue
        trimmed = url.strip()
        if not trimmed:
            continue
        if is_supported_url(trimmed):
            supported.append(trimmed)
        else:
            unsupported.append(trimmed)
    return supported, unsupported


# --- Forms ---

def validate_company_name(name: str) -> str | None:
    if not name.strip():
        return "Company name is required"
    if len(name) < 2:
        return "Company name must be at least 2 characters"
    if len(name) > 100:
        return "Company name must be less than 100 characters"
    return None


def validate_email(email: str) -> str | None:
    if not email.strip():
        return "Email is required"
    if not _EMAIL_RE.match(email):
        return "Please enter a valid email address"
    return None


# --- Report data ---

def validate_report_data(data: dict) -> list[str]:
    errors = []
    if not data.get("company_name"):
        errors.append("Company name is required")
    if not data.get("source_urls"):
        errors.append("At least one source URL is required")
    if not data.get("summary"):
        errors.append("Summary is required")
    return errors


def sanitize_text(text: str) -> str:
    return re.sub(r"\s+", " ", text.strip())


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."
