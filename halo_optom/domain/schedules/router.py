"""Schedule router"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import ScheduleBulkCreate, ScheduleCreate, ScheduleResponse, ScheduleUpdate
from .service import ScheduleService

router = APIRouter(prefix="/schedules", tags=["Schedules"])


def get_schedule_service(db: Session = Depends(get_db)) -> ScheduleService:
    return ScheduleService(db)


@router.post("", response_model=ScheduleResponse, status_code=201)
async def create_schedule(
    data: ScheduleCreate,
    current_user: User = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
):
    return service.create_schedule(current_user, data)


@router.post("/bulk", status_code=201)
async def bulk_create_schedules(
    data: ScheduleBulkCreate,
    current_user: User = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
):
    schedules = service.bulk_create(current_user, data)
    return {
        "message": "Weekly schedule created",
        "data": [ScheduleResponse.model_validate(s) for s in schedules],
    }


@router.get("", response_model=list[ScheduleResponse])
async def list_schedules(
    optometrist_id: Optional[str] = Query(None),
    day_of_week: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    service: ScheduleService = Depends(get_schedule_service),
):
    return service.list_schedules(optometrist_id=optometrist_id, day_of_week=day_of_week, is_active=is_active)


@router.get("/available-dates")
async def available_dates(
    optometrist_id: str = Query(...),
    days: int = Query(14, ge=1, le=90),
    service: ScheduleService = Depends(get_schedule_service),
):
    return {"data": service.available_dates(optometrist_id, days=days)}


@router.get("/{schedule_id}", response_model=ScheduleResponse)
async def get_schedule(schedule_id: str, service: ScheduleService = Depends(get_schedule_service)):
    return service.get_schedule(schedule_id)


@router.put("/{schedule_id}", response_model=ScheduleResponse)
async def update_schedule(
    schedule_id: str,
    data: ScheduleUpdate,
    current_user: User = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
):
    return service.update_schedule(schedule_id, current_user, data)


@router.delete("/{schedule_id}")
async def delete_schedule(
    schedule_id: str,
    current_user: User = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
):
    service.delete_schedule(schedule_id, current_user)
    return {"message": "Schedule deleted"}


__all__ = ["router"]
