"""Near-duplicate detection over scraped content prefixes."""

from __future__ import annotations

from presales_research.models import ScrapedContent

PREFIX_LENGTH = 1000


def _code_units(text: str) -> list[int]:
    """UTF-16 code units of text (astral characters become surrogate pairs)."""
    raw = text.encode("utf-16-le")
    return [int.from_bytes(raw[i:i + 2], "little") for i in range(0, len(raw), 2)]


def simple_hash(text: str, limit: int | None = None) -> str:
    """32-bit signed rolling hash (h * 31 + c) as a decimal string.

    With ``limit`` only the first ``limit`` code units are hashed.
    """
    if not text or not isinstance(text, str):
        return "0"

    units = _code_units(text)
    if limit is not None:
        units = units[:limit]

    h = 0
    for unit in units:
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return str(h)


def deduplicate_content(contents: object) -> list[ScrapedContent]:
    """Drop items whose first 1000 characters hash like an earlier item.

    Items without content are skipped; input order is preserved.
    """
    if not isinstance(contents, (list, tuple)):
        return []

    seen: set[str] = set()
    unique: list[ScrapedContent] = []
    for item in contents:
        if not isinstance(item, ScrapedContent) or not item.content:
            continue
        digest = simple_hash(item.content, limit=PREFIX_LENGTH)
        if digest in seen:
            continue
        seen.add(digest)
        unique.append(item)
    return unique
