"""Small text, list and date helpers shared by the CLI and web views."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Iterable, TypeVar
from urllib.parse import urlparse

T = TypeVar("T")


def chunk(items: list[T], size: int) -> list[list[T]]:
    """Split into consecutive slices of ``size`` (the last may be shorter)."""
    if size < 1:
        raise ValueError("chunk size must be at least 1")
    return [items[i:i + size] for i in range(0, len(items), size)]


def unique(items: Iterable[T]) -> list[T]:
    """Remove duplicates, keeping first occurrences in order."""
    return list(dict.fromkeys(items))


def slugify(text: str) -> str:
    text = text.lower()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_-]+", "-", text)
    return text.strip("-")


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def extract_domain(url: str) -> str:
    """Hostname of a URL, or the input unchanged if it has none."""
    try:
        host = urlparse(url).hostname
    except ValueError:
        return url
    return host or url


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    if count == 1:
        return f"{count} {singular}"
    return f"{count} {plural or singular + 's'}"


def relative_time(when: datetime | str, now: datetime | None = None) -> str:
    if isinstance(when, str):
        when = datetime.fromisoformat(when)
    now = now or datetime.now()
    days = (now - when).days

    if days <= 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    if days < 30:
        return f"{days // 7} weeks ago"
    return f"{days // 30} months ago"


def format_date(when: datetime | str) -> str:
    """e.g. 'January 5, 2025 at 02:30 PM' (first zero-padded field unpadded)."""
    if isinstance(when, str):
        when = datetime.fromisoformat(when)
    return when.strftime("%B %d, %Y at %I:%M %p").replace(" 0", " ", 1)


def utf16_len(text: str) -> int:
    """Length in UTF-16 code units; astral characters such as emoji count twice."""
    return len(text.encode("utf-16-le")) // 2


def utf16_truncate(text: str, max_units: int) -> str:
    """First ``max_units`` UTF-16 code units of text, never splitting a surrogate pair."""
    if utf16_len(text) <= max_units:
        return text
    return text.encode("utf-16-le")[:max_units * 2].decode("utf-16-le", errors="ignore")
