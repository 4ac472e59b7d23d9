"""Report lifecycle routes: list, submit, close, comment."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from reportdesk.api.dependencies import get_report_service
from reportdesk.models.comment_model import CommentCreate
from reportdesk.models.report_model import ReportClose, ReportCreate
from reportdesk.services.report_service import ReportService

router = APIRouter()


@router.get("/reports")
async def list_reports(service: ReportService = Depends(get_report_service)):
    reports = await service.list_open_reports()
    return {"reports": [r.model_dump(mode="json", by_alias=True) for r in reports]}


@router.post("/reports")
async def submit_report(body: ReportCreate, service: ReportService = Depends(get_report_service)):
    report = await service.submit_report(body.title, body.description, body.location, body.password)
    return report.model_dump(mode="json", by_alias=True)


@router.delete("/reports/{report_id}")
async def close_report(
    report_id: str,
    body: ReportClose,
    service: ReportService = Depends(get_report_service),
):
    report = await service.close_report(report_id, body.password)
    return report.model_dump(mode="json", by_alias=True)


@router.post("/reports/{report_id}/comments")
async def add_comment(
    report_id: str,
    body: CommentCreate,
    service: ReportService = Depends(get_report_service),
):
    comment = await service.add_comment(report_id, body.model_dump())
    return comment.model_dump(mode="json", by_alias=True)
