"""Feedback API: report ratings and per-insight thumbs up/down."""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from presales_research.models import InsightFeedback, ReportFeedback
from presales_research.web.deps import get_store

logger = logging.getLogger(__name__)
router = APIRouter(tags=["feedback"])


class ReportFeedbackRequest(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: str = ""
    helpful: bool = True
    user_id: str | None = None


class InsightFeedbackRequest(BaseModel):
    type: Literal["positive", "negative"]
    comment: str | None = None
    user_id: str | None = None


def _require_report(report_id: str) -> None:
    if get_store().get(report_id) is None:
        raise HTTPException(status_code=404, detail="Report not found")


@router.post("/reports/{report_id}/feedback")
async def submit_feedback(report_id: str, req: ReportFeedbackRequest):
    _require_report(report_id)
    saved = get_store().add_feedback(ReportFeedback(report_id=report_id, **req.model_dump()))
    logger.info("Feedback for report %s: %d/5", report_id, saved.rating)
    return saved.model_dump()


@router.get("/reports/{report_id}/feedback")
async def list_feedback(report_id: str):
    _require_report(report_id)
    store = get_store()
    return {
        "report_feedback": [f.model_dump() for f in store.list_feedback(report_id)],
        "insight_feedback": [f.model_dump() for f in store.list_insight_feedback(report_id)],
    }


@router.post("/reports/{report_id}/insights/{insight_id}/feedback")
async def submit_insight_feedback(report_id: str, insight_id: str, req: InsightFeedbackRequest):
    _require_report(report_id)
    saved = get_store().add_insight_feedback(
        InsightFeedback(report_id=report_id, insight_id=insight_id, **req.model_dump()),
    )
    return saved.model_dump()
