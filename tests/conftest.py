import os
import sys

import pytest


def _ensure_repo_on_path() -> None:
    root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if root not in sys.path:
        sys.path.append(root)


_ensure_repo_on_path()

from presales_research.analysis import llm_client  # noqa: E402
from presales_research.config import Config  # noqa: E402
from presales_research.db.database import Database  # noqa: E402
from presales_research.db.migrations import run_migrations  # noqa: E402
from presales_research.models import ContentMetadata, ScrapedContent  # noqa: E402
from presales_research.reports.store import ReportStore  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_llm_provider():
    llm_client.reset_provider_state()
    yield
    llm_client.reset_provider_state()


@pytest.fixture
def config(tmp_path):
    """No API keys: direct scraping and heuristic analysis."""
    return Config(db_path=str(tmp_path / "reports.db"))


@pytest.fixture
def db(tmp_path):
    database = Database(str(tmp_path / "reports.db"))
    database.connect()
    run_migrations(database)
    yield database
    database.close()


@pytest.fixture
def store(db):
    return ReportStore(db)


@pytest.fixture
def make_page():
    def _make(url: str, content: str = "", title: str = "Page", **meta) -> ScrapedContent:
        return ScrapedContent(url=url, title=title, content=content, metadata=ContentMetadata(**meta))
    return _make
