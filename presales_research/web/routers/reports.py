"""Reports API: start generation runs, stream progress via SSE, manage saved reports."""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from datetime import datetime

from fastapi import APIRouter, BackgroundTasks, HTTPException
from pydantic import BaseModel
from sse_starlette.sse import EventSourceResponse

from presales_research.errors import PresalesError
from presales_research.utils.validation import validate_company_name, validation_message
from presales_research.web.deps import get_report_service, get_store

logger = logging.getLogger(__name__)
router = APIRouter(tags=["reports"])

# In-memory run state for SSE (keyed by run_id)
_runs: dict[str, dict] = {}
_progress: dict[str, list[dict]] = {}

TERMINAL_STATUSES = ("completed", "failed")
MAX_FINISHED_RUNS = 50


class ReportRequest(BaseModel):
    company_name: str
    urls: list[str]
    report_purpose: str | None = None
    user_id: str | None = None
    full: bool | None = None


@router.post("/reports")
async def start_report(req: ReportRequest, background_tasks: BackgroundTasks):
    """Validate input and start a background generation run."""
    name_error = validate_company_name(req.company_name)
    if name_error:
        raise HTTPException(status_code=400, detail=name_error)

    urls = [u.strip() for u in req.urls if u and u.strip()]
    if not urls:
        raise HTTPException(status_code=400, detail="Please enter at least one URL")
    warnings = [msg for msg in (validation_message(u) for u in urls) if msg]

    _prune_finished_runs()
    run_id = uuid.uuid4().hex
    _runs[run_id] = {
        "run_id": run_id,
        "company_name": req.company_name.strip(),
        "status": "running",
        "progress_pct": 0,
        "progress_msg": "Queued",
        "report": None,
        "error": None,
        "started_at": datetime.now().isoformat(),
        "completed_at": None,
    }
    _progress[run_id] = []

    background_tasks.add_task(_run_generation, run_id, req, urls)

    return {"run_id": run_id, "status": "running", "warnings": warnings}


@router.get("/reports/runs/{run_id}")
async def run_status(run_id: str):
    """Current status of a generation run, including the report once done."""
    run = _runs.get(run_id)
    if run is None:
        raise HTTPException(status_code=404, detail="Run not found")
    return run


@router.get("/reports/runs/{run_id}/stream")
async def run_stream(run_id: str):
    """SSE stream for real-time progress updates."""
    if run_id not in _runs:
        raise HTTPException(status_code=404, detail="Run not found")

    async def event_generator():
        last_idx = 0
        while True:
            events = _progress.get(run_id, [])
            while last_idx < len(events):
                evt = events[last_idx]
                yield {"event": "progress", "data": json.dumps(evt)}
                last_idx += 1
                if evt.get("status") in TERMINAL_STATUSES:
                    return
            await asyncio.sleep(0.5)

    return EventSourceResponse(event_generator())


@router.get("/reports")
async def list_reports(user_id: str | None = None, limit: int = 50):
    """Saved reports, newest first."""
    return [r.model_dump() for r in get_store().list_reports(user_id=user_id, limit=limit)]


@router.get("/reports/{report_id}")
async def get_report(report_id: str):
    report = get_store().get(report_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report.model_dump()


@router.delete("/reports/{report_id}")
async def delete_report(report_id: str):
    if not get_store().delete(report_id):
        raise HTTPException(status_code=404, detail="Report not found")
    return {"deleted": True, "id": report_id}


def _push(run_id: str, pct: float, msg: str, status: str = "running", **extra) -> None:
    pct = int(round(pct))
    _runs[run_id].update(progress_pct=pct, progress_msg=msg, status=status)
    _progress.setdefault(run_id, []).append({
        "run_id": run_id,
        "progress_pct": pct,
        "progress_msg": msg,
        "status": status,
        **extra,
    })


async def _run_generation(run_id: str, req: ReportRequest, urls: list[str]) -> None:
    """Execute report generation in the background."""
    def progress_callback(msg: str, pct: float) -> None:
        _push(run_id, pct, msg)

    try:
        service = get_report_service()
        report = await service.generate_report(
            req.company_name,
            urls,
            on_progress=progress_callback,
            report_purpose=req.report_purpose,
            user_id=req.user_id,
            full=req.full,
        )
    except PresalesError as e:
        logger.warning("Report run %s failed: %s", run_id, e)
        _runs[run_id].update(error=str(e), completed_at=datetime.now().isoformat())
        _push(run_id, 0, str(e), status="failed")
        return
    except Exception as e:
        logger.exception("Unexpected error in report run %s", run_id)
        _runs[run_id].update(error=str(e), completed_at=datetime.now().isoformat())
        _push(run_id, 0, str(e), status="failed")
        return

    _runs[run_id].update(report=report.model_dump(), completed_at=datetime.now().isoformat())
    _push(run_id, 100, "Report completed", status="completed", report_id=report.id)


def _prune_finished_runs() -> None:
    """Forget the oldest finished runs beyond MAX_FINISHED_RUNS; running ones are kept."""
    finished = [rid for rid, run in _runs.items() if run["status"] in TERMINAL_STATUSES]
    for rid in finished[:max(0, len(finished) - MAX_FINISHED_RUNS)]:
        _runs.pop(rid, None)
        _progress.pop(rid, None)
