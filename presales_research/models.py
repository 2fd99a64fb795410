"""Pydantic data models for the sales research pipeline."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# Scraping models
# ---------------------------------------------------------------------------

class ContentMetadata(BaseModel):
    description: str | None = None
    keywords: list[str] = Field(default_factory=list)
    author: str | None = None
    published_date: str | None = None


class ScrapedContent(BaseModel):
    """Content extracted from a single URL."""
    url: str
    title: str = ""
    content: str = ""
    metadata: ContentMetadata = Field(default_factory=ContentMetadata)


# ---------------------------------------------------------------------------
# Analysis models
# ---------------------------------------------------------------------------

class AnalysisContext(BaseModel):
    report_purpose: str | None = None


class AnalysisResult(BaseModel):
    """Structured insights produced by the analyzer."""
    company_name: str
    summary: str = ""
    company_info: str = ""
    pain_points: list[str] = Field(default_factory=list)
    conversation_starters: list[str] = Field(default_factory=list)
    key_insights: list[str] = Field(default_factory=list)
    recommendations: str = ""


# ---------------------------------------------------------------------------
# Report + feedback models
# ---------------------------------------------------------------------------

class Report(BaseModel):
    """The structured research record shown to the user."""
    id: str
    user_id: str | None = None
    company_name: str
    generated_at: str = Field(default_factory=lambda: datetime.now().isoformat())
    summary: str = ""
    company_info: str = ""
    pain_points: list[str] = Field(default_factory=list)
    conversation_starters: list[str] = Field(default_factory=list)
    key_insights: list[str] = Field(default_factory=list)
    recommendations: str = ""
    source_urls: list[str] = Field(default_factory=list)
    report_purpose: str = ""
    is_local: bool = False  # True when the report could not be persisted


class ReportFeedback(BaseModel):
    report_id: str
    user_id: str | None = None
    rating: int = Field(ge=1, le=5)
    comment: str = ""
    helpful: bool = True
    created_at: str | None = None


class InsightFeedback(BaseModel):
    report_id: str
    insight_id: str
    user_id: str | None = None
    type: Literal["positive", "negative"]
    comment: str | None = None
    created_at: str | None = None

    @field_validator("insight_id", mode="before")
    @classmethod
    def coerce_insight_id(cls, v):
        return str(v)


# ---------------------------------------------------------------------------
# Usage tracking
# ---------------------------------------------------------------------------

class ServiceMetrics(BaseModel):
    count: int = 0
    last_reset: float = 0.0
    costs: float = 0.0


class UsageEfficiency(BaseModel):
    cache_hit_rate: float = 0.0
    avg_cost_per_report: float = 0.0
    projected_monthly_cost: float = 0.0


class UsageStats(BaseModel):
    firecrawl: ServiceMetrics
    ai: ServiceMetrics
    openai: ServiceMetrics
    total: ServiceMetrics
    efficiency: UsageEfficiency
