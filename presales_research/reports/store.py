"""Report and feedback persistence on top of the SQLite Database."""

from __future__ import annotations

import logging
import sqlite3
import uuid
from datetime import datetime

from presales_research.db.database import Database, from_json, to_json
from presales_research.models import AnalysisResult, InsightFeedback, Report, ReportFeedback

logger = logging.getLogger(__name__)

_LIST_COLUMNS = ("pain_points", "conversation_starters", "key_insights", "source_urls")


def _row_to_report(row: sqlite3.Row) -> Report:
    data = dict(row)
    for col in _LIST_COLUMNS:
        data[col] = from_json(data.get(col), [])
    data["generated_at"] = data.pop("created_at")
    return Report(**data)


class ReportStore:
    """CRUD for reports plus report- and insight-level feedback."""

    def __init__(self, db: Database):
        self.db = db

    # --- Reports ---

    def create(
        self,
        result: AnalysisResult,
        source_urls: list[str],
        report_purpose: str = "",
        user_id: str | None = None,
    ) -> Report:
        report = Report(
            id=str(uuid.uuid4()),
            user_id=user_id,
            company_name=result.company_name,
            generated_at=datetime.now().isoformat(),
            summary=result.summary,
            company_info=result.company_info,
            pain_points=result.pain_points,
            conversation_starters=result.conversation_starters,
            key_insights=result.key_insights,
            recommendations=result.recommendations,
            source_urls=source_urls,
            report_purpose=report_purpose,
        )
        self.db.write(
            "INSERT INTO reports (id, user_id, company_name, summary, company_info, pain_points, "
            "conversation_starters, key_insights, recommendations, source_urls, report_purpose, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                report.id,
                report.user_id,
                report.company_name,
                report.summary,
                report.company_info,
                to_json(report.pain_points),
                to_json(report.conversation_starters),
                to_json(report.key_insights),
                report.recommendations,
                to_json(report.source_urls),
                report.report_purpose,
                report.generated_at,
            ),
        )
        logger.info("Saved report %s for %s", report.id, report.company_name)
        return report

    def get(self, report_id: str) -> Report | None:
        row = self.db.fetchone("SELECT * FROM reports WHERE id = ?", (report_id,))
        return _row_to_report(row) if row else None

    def list_reports(self, user_id: str | None = None, limit: int = 50) -> list[Report]:
        """Newest first; restricted to ``user_id`` when given."""
        if user_id is None:
            rows = self.db.fetchall(
                "SELECT * FROM reports ORDER BY created_at DESC, rowid DESC LIMIT ?", (limit,),
            )
        else:
            rows = self.db.fetchall(
                "SELECT * FROM reports WHERE user_id = ? ORDER BY created_at DESC, rowid DESC LIMIT ?",
                (user_id, limit),
            )
        return [_row_to_report(r) for r in rows]

    def delete(self, report_id: str) -> bool:
        deleted = self.db.write("DELETE FROM reports WHERE id = ?", (report_id,))
        return deleted > 0

    def count(self) -> int:
        return self.db.fetchone("SELECT COUNT(*) AS cnt FROM reports")["cnt"]

    # --- Feedback ---

    def add_feedback(self, feedback: ReportFeedback) -> ReportFeedback:
        created_at = feedback.created_at or datetime.now().isoformat()
        self.db.write(
            "INSERT INTO report_feedback (report_id, user_id, rating, comment, helpful, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (
                feedback.report_id,
                feedback.user_id,
                feedback.rating,
                feedback.comment,
                int(feedback.helpful),
                created_at,
            ),
        )
        return feedback.model_copy(update={"created_at": created_at})

    def list_feedback(self, report_id: str) -> list[ReportFeedback]:
        rows = self.db.fetchall(
            "SELECT report_id, user_id, rating, comment, helpful, created_at "
            "FROM report_feedback WHERE report_id = ? ORDER BY created_at DESC, id DESC",
            (report_id,),
        )
        return [ReportFeedback(**{**dict(r), "helpful": bool(r["helpful"])}) for r in rows]

    def add_insight_feedback(self, feedback: InsightFeedback) -> InsightFeedback:
        created_at = feedback.created_at or datetime.now().isoformat()
        self.db.write(
            "INSERT INTO insight_feedback (report_id, insight_id, user_id, type, comment, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (
                feedback.report_id,
                feedback.insight_id,
                feedback.user_id,
                feedback.type,
                feedback.comment,
                created_at,
            ),
        )
        return feedback.model_copy(update={"created_at": created_at})

    def list_insight_feedback(self, report_id: str) -> list[InsightFeedback]:
        rows = self.db.fetchall(
            "SELECT report_id, insight_id, user_id, type, comment, created_at "
            "FROM insight_feedback WHERE report_id = ? ORDER BY id",
            (report_id,),
        )
        return [InsightFeedback(**dict(r)) for r in rows]
