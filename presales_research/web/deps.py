"""Dependency injection for FastAPI: shared config, database, optimizer."""

from __future__ import annotations

from functools import lru_cache

from presales_research.config import Config, load_config
from presales_research.db.database import Database
from presales_research.db.migrations import run_migrations
from presales_research.optimization.service import CostOptimizationService
from presales_research.reports.service import ReportService, build_optimizer
from presales_research.reports.store import ReportStore


@lru_cache
def get_config() -> Config:
    return load_config()


_db_instance: Database | None = None
_optimizer: CostOptimizationService | None = None


def get_db() -> Database:
    global _db_instance
    if _db_instance is None or not _db_instance.is_connected:
        _db_instance = Database(get_config().db_path)
        _db_instance.connect()
        run_migrations(_db_instance)
    return _db_instance


def close_db() -> None:
    global _db_instance
    if _db_instance:
        _db_instance.close()
        _db_instance = None


def get_store() -> ReportStore:
    return ReportStore(get_db())


def get_optimizer() -> CostOptimizationService:
    """One optimizer (cache + rate limiter) per process."""
    global _optimizer
    if _optimizer is None:
        _optimizer = build_optimizer(get_config())
    return _optimizer


def get_report_service() -> ReportService:
    return ReportService.from_config(get_config(), get_store(), get_optimizer())


def reset_state() -> None:
    """Drop cached singletons; used by tests that swap configuration."""
    global _optimizer
    close_db()
    _optimizer = None
    get_config.cache_clear()
