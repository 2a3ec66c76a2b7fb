"""Review router"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin
from ...database import get_db
from ...models import User
from .schemas import ReviewCreate, ReviewResponse, ReviewStatusUpdate
from .service import ReviewService

router = APIRouter(prefix="/reviews", tags=["Reviews"])


def get_review_service(db: Session = Depends(get_db)) -> ReviewService:
    return ReviewService(db)


def _wrap(reviews):
    return {"data": [ReviewResponse.model_validate(r) for r in reviews]}


@router.post("", status_code=201)
async def create_review(
    data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    return {"data": ReviewResponse.model_validate(service.create_or_update(current_user, data))}


@router.get("/optometrist/{optometrist_id}")
async def reviews_for_optometrist(optometrist_id: str, service: ReviewService = Depends(get_review_service)):
    return _wrap(service.for_optometrist(optometrist_id))


@router.get("/me")
async def my_reviews(
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    return _wrap(service.mine(current_user))


@router.get("/admin/all")
async def all_reviews(
    status: Optional[str] = Query(None),
    _: User = Depends(require_admin),
    service: ReviewService = Depends(get_review_service),
):
    return _wrap(service.list_all(status))


@router.get("/admin/stats")
async def review_stats(_: User = Depends(require_admin), service: ReviewService = Depends(get_review_service)):
    return service.stats()


@router.patch("/{review_id}/status", response_model=ReviewResponse)
async def update_review_status(
    review_id: str,
    data: ReviewStatusUpdate,
    _: User = Depends(require_admin),
    service: ReviewService = Depends(get_review_service),
):
    return service.update_status(review_id, data.status)


@router.post("/{review_id}/report")
async def report_review(
    review_id: str,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    review = service.report(review_id, current_user)
    return {"message": "Review reported", "report_count": review.report_count}


@router.delete("/{review_id}")
async def delete_review(
    review_id: str,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    service.delete(review_id, current_user)
    return {"message": "Review deleted"}


__all__ = ["router"]
