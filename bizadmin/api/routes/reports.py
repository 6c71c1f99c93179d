"""Reporting endpoints: summary, exports, schedules."""

from typing import Any, Dict, List

from fastapi import APIRouter, Request, Response, status
from pydantic import BaseModel, Field

from bizadmin.app import BizAdmin

router = APIRouter()


class ScheduleRequest(BaseModel):
    """Request to schedule recurring report delivery."""
    cadence: str = Field(..., description="daily, weekly or monthly")
    recipients: List[str]
    format: str = "pdf"


def _biz(request: Request) -> BizAdmin:
    return request.app.state.biz


@router.get("/summary")
async def report_summary(request: Request) -> Dict[str, Any]:
    """Cross-domain summary; ``failures`` names sections that fell back to zero."""
    payload = await _biz(request).assembler().assemble()
    return payload.to_dict()


@router.get("/export/{fmt}/{report_type}")
def export_report(fmt: str, report_type: str, request: Request) -> Response:
    artifact = _biz(request).export(fmt, report_type=report_type)
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )


@router.get("/charts")
def chart_regions(request: Request) -> List[Dict[str, str]]:
    charts = _biz(request).charts
    return [{"key": key, "title": charts.title(key)} for key in charts]


@router.get("/history")
def export_history(request: Request, limit: int = 20) -> List[Dict[str, Any]]:
    return _biz(request).recent_exports(limit=limit)


@router.post("/schedule", status_code=status.HTTP_201_CREATED)
def schedule_report(body: ScheduleRequest, request: Request) -> Dict[str, Any]:
    return _biz(request).schedule_report(body.cadence, body.recipients, body.format)


@router.get("/schedules")
def list_schedules(request: Request) -> List[Dict[str, Any]]:
    return _biz(request).list_schedules()
