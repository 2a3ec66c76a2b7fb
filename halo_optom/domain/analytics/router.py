"""Analytics router (admin)"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...models import User
from .service import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["Analytics"])


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(db)


@router.get("/stats")
async def dashboard_stats(
    _: User = Depends(require_admin), service: AnalyticsService = Depends(get_analytics_service)
):
    return service.dashboard_stats()


@router.get("/revenue")
async def revenue_analytics(
    period: int = Query(30, ge=1, le=366),
    _: User = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return service.revenue(period)


__all__ = ["router"]
