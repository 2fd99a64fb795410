"""Markdown and JSON renderings of a Report for the CLI."""

from __future__ import annotations

from pathlib import Path

from presales_research.models import Report
from presales_research.utils.helpers import extract_domain, format_date


def _bullets(items: list[str]) -> list[str]:
    return [f"- {item}" for item in items] or ["- _None identified_"]


def report_to_markdown(report: Report) -> str:
    lines = [
        f"# {report.company_name}: Pre-Sales Research Report",
        "",
        f"_Generated {format_date(report.generated_at)}_",
    ]
    if report.report_purpose:
        lines += ["", f"**Purpose:** {report.report_purpose}"]
    if report.is_local:
        lines += ["", "> This report was not saved to the database."]

    lines += ["", "## Executive Summary", "", report.summary]
    lines += ["", "## Company Information", "", report.company_info]
    lines += ["", "## Pain Points", "", *_bullets(report.pain_points)]
    lines += ["", "## Conversation Starters", ""]
    lines += [f"{i}. {q}" for i, q in enumerate(report.conversation_starters, start=1)]
    lines += ["", "## Key Insights", "", *_bullets(report.key_insights)]
    lines += ["", "## Recommendations", "", report.recommendations]

    if report.source_urls:
        lines += ["", "## Sources", ""]
        lines += [f"- [{extract_domain(u)}]({u})" for u in report.source_urls]

    return "\n".join(lines) + "\n"


def write_report(report: Report, path: str | Path) -> Path:
    """Write JSON when the path ends in .json, Markdown otherwise."""
    path = Path(path)
    if path.suffix.lower() == ".json":
        path.write_text(report.model_dump_json(indent=2), encoding="utf-8")
    else:
        path.write_text(report_to_markdown(report), encoding="utf-8")
    return path
