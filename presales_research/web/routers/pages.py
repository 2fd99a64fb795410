"""HTML views: report form, saved report, usage dashboard."""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from presales_research.utils.helpers import extract_domain, format_date, pluralize, relative_time
from presales_research.web.deps import get_config, get_optimizer, get_store

router = APIRouter(tags=["pages"])
templates = Jinja2Templates(directory=str(Path(__file__).parent.parent / "templates"))
templates.env.filters["domain"] = extract_domain
templates.env.filters["format_date"] = format_date
templates.env.filters["relative_time"] = relative_time
templates.env.globals["pluralize"] = pluralize


@router.get("/", response_class=HTMLResponse)
async def home(request: Request):
    config = get_config()
    return templates.TemplateResponse(request, "home.html", {
        "recent_reports": get_store().list_reports(limit=10),
        "max_urls": config.max_urls_per_report,
        "app_name": config.app_name,
    })


@router.get("/reports/{report_id}", response_class=HTMLResponse)
async def report_page(request: Request, report_id: str):
    report = get_store().get(report_id)
    if report is None:
        return HTMLResponse("<p>Report not found</p>", status_code=404)
    return templates.TemplateResponse(request, "report.html", {
        "report": report,
        "app_name": get_config().app_name,
    })


@router.get("/usage", response_class=HTMLResponse)
async def usage_page(request: Request):
    optimizer = get_optimizer()
    return templates.TemplateResponse(request, "usage.html", {
        "stats": optimizer.usage_stats(),
        "limits": optimizer.limiter.limits,
        "app_name": get_config().app_name,
    })
