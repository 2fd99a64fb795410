import sqlite3

import pytest

from presales_research.db.migrations import run_migrations
from presales_research.models import AnalysisResult, InsightFeedback, ReportFeedback


def _analysis(company="Acme"):
    return AnalysisResult(
        company_name=company,
        summary="Summary",
        company_info="Info",
        pain_points=["Scaling"],
        conversation_starters=["What next?"],
        key_insights=["Growing"],
        recommendations="Call them",
    )


def test_migrations_are_applied_once(db):
    assert run_migrations(db) == []
    tables = {r["name"] for r in db.fetchall("SELECT name FROM sqlite_master WHERE type = 'table'")}
    assert {"reports", "report_feedback", "insight_feedback", "_migrations"} <= tables


def test_create_and_get_round_trip(store):
    report = store.create(_analysis(), ["https://acme.com"], "sales call", user_id="u1")

    loaded = store.get(report.id)
    assert loaded == report
    assert loaded.pain_points == ["Scaling"]
    assert loaded.source_urls == ["https://acme.com"]
    assert store.get("missing") is None


def test_list_reports_newest_first_and_by_user(store):
    first = store.create(_analysis("First"), [], user_id="u1")
    second = store.create(_analysis("Second"), [], user_id="u2")
    third = store.create(_analysis("Third"), [], user_id="u1")

    assert [r.id for r in store.list_reports()] == [third.id, second.id, first.id]
    assert [r.id for r in store.list_reports(user_id="u1")] == [third.id, first.id]
    assert [r.id for r in store.list_reports(limit=1)] == [third.id]
    assert store.count() == 3


def test_delete_cascades_feedback(store):
    report = store.create(_analysis(), [])
    store.add_feedback(ReportFeedback(report_id=report.id, rating=4))

    assert store.delete(report.id)
    assert not store.delete(report.id)
    assert store.list_feedback(report.id) == []


def test_feedback_round_trip(store):
    report = store.create(_analysis(), [])

    saved = store.add_feedback(ReportFeedback(report_id=report.id, rating=5, comment="Great", helpful=True))
    store.add_insight_feedback(InsightFeedback(report_id=report.id, insight_id=0, type="positive"))
    store.add_insight_feedback(InsightFeedback(report_id=report.id, insight_id="2", type="negative", comment="Wrong"))

    assert saved.created_at
    feedback = store.list_feedback(report.id)
    assert len(feedback) == 1
    assert feedback[0].rating == 5 and feedback[0].helpful is True

    insights = store.list_insight_feedback(report.id)
    assert [(f.insight_id, f.type) for f in insights] == [("0", "positive"), ("2", "negative")]


def test_feedback_for_unknown_report_is_rejected(store):
    with pytest.raises(sqlite3.IntegrityError):
        store.add_feedback(ReportFeedback(report_id="missing", rating=3))


def test_rating_must_be_in_range():
    with pytest.raises(ValueError):
        ReportFeedback(report_id="r", rating=6)


def test_closed_database_raises_sqlite_error(store):
    store.db.close()
    with pytest.raises(sqlite3.ProgrammingError, match="not open"):
        store.create(_analysis(), ["https://acme.com"])
