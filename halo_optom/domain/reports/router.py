"""Report router (admin)"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...models import User
from ...shared.csv_export import csv_response
from .service import ReportService

router = APIRouter(prefix="/reports", tags=["Reports"])


class GenerateReportRequest(BaseModel):
    type: str
    period: int = 30


def get_report_service(db: Session = Depends(get_db)) -> ReportService:
    return ReportService(db)


@router.get("")
async def list_reports(_: User = Depends(require_admin), service: ReportService = Depends(get_report_service)):
    return [service.serialize(r) for r in service.list_reports()]


@router.post("/generate")
async def generate_report(
    data: GenerateReportRequest,
    _: User = Depends(require_admin),
    service: ReportService = Depends(get_report_service),
):
    return service.serialize(service.generate(data.type, data.period if data.period > 0 else 30))


@router.get("/download/{report_id}")
async def download_report(
    report_id: str,
    _: User = Depends(require_admin),
    service: ReportService = Depends(get_report_service),
):
    content, report = service.download_csv(report_id)
    stamp = report.generated_at.strftime("%Y%m%d") if report.generated_at else report.id
    return csv_response(content, f"{report.type}_report_{stamp}.csv")


@router.get("/preview/{report_id}")
async def preview_report(
    report_id: str,
    _: User = Depends(require_admin),
    service: ReportService = Depends(get_report_service),
):
    return service.preview(report_id)


__all__ = ["router"]
