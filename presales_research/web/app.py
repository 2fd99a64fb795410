"""FastAPI application for the PreSales AI Research Agent."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from presales_research.errors import PresalesError
from presales_research.web.deps import close_db, get_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown: initialize DB, run migrations."""
    logger.info("Starting PreSales AI Research Agent...")
    get_db()  # connects + runs migrations
    yield
    close_db()
    logger.info("PreSales AI Research Agent shut down.")


app = FastAPI(
    title="PreSales AI Research Agent",
    description="Company research reports for sales preparation, with cost-optimized scraping",
    lifespan=lifespan,
)


@app.exception_handler(PresalesError)
async def presales_error_handler(request: Request, exc: PresalesError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


# --- Register routers ---
from presales_research.web.routers.feedback import router as feedback_router  # noqa: E402
from presales_research.web.routers.pages import router as pages_router  # noqa: E402
from presales_research.web.routers.reports import router as reports_router  # noqa: E402
from presales_research.web.routers.usage import router as usage_router  # noqa: E402

app.include_router(pages_router)
app.include_router(reports_router, prefix="/api")
app.include_router(feedback_router, prefix="/api")
app.include_router(usage_router, prefix="/api")
