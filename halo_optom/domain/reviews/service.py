"""Review service - one review per patient and optometrist"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import ROLE_ADMIN, ROLE_OPTOMETRIST, Review, User
from ...utils.sanitization import sanitize_text
from ..optometrists.repository import OptometristRepository
from ..users.repository import UserRepository
from .repository import ReviewRepository
from .schemas import ReviewCreate

logger = logging.getLogger(__name__)

PUBLIC_STATUSES = ("approved", "pending")


class ReviewService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ReviewRepository()

    def _refresh_rating(self, optometrist_id: str):
        avg, _ = OptometristRepository.review_stats(self.db, optometrist_id)
        optometrist = UserRepository.get_by_id(self.db, optometrist_id)
        if optometrist is not None:
            optometrist.rating = round(avg, 1) if avg is not None else None

    def get_review(self, review_id: str) -> Review:
        review = self.repo.get_by_id(self.db, review_id)
        if not review:
            raise HTTPException(status_code=404, detail="Review not found")
        return review

    def create_or_update(self, patient: User, data: ReviewCreate) -> Review:
        if patient.id == data.optometrist_id:
            raise HTTPException(status_code=400, detail="You cannot review yourself")

        optometrist = UserRepository.get_by_id(self.db, data.optometrist_id)
        if not optometrist:
            raise HTTPException(status_code=404, detail="Optometrist not found")
        if optometrist.role != ROLE_OPTOMETRIST:
            raise HTTPException(status_code=400, detail="Only optometrists can be reviewed")

        comment = sanitize_text(data.comment) if data.comment else None
        review = self.repo.get_by_pair(self.db, patient.id, optometrist.id)
        if review:
            review.rating = data.rating
            review.comment = comment
            if data.service_type:
                review.service_type = data.service_type
            # Edited reviews go back to moderation
            review.status = "pending"
        else:
            review = Review(
                patient_id=patient.id,
                optometrist_id=optometrist.id,
                rating=data.rating,
                comment=comment,
                service_type=data.service_type,
                status="pending",
            )
        self.repo.save(self.db, review)
        self._refresh_rating(optometrist.id)
        self.db.commit()
        logger.info(f"⭐ Review {review.id} by {patient.id} for {optometrist.id} ({data.rating})")
        return self.get_review(review.id)

    def for_optometrist(self, optometrist_id: str) -> list[Review]:
        return self.repo.list_reviews(self.db, optometrist_id=optometrist_id, statuses=PUBLIC_STATUSES)

    def mine(self, user: User) -> list[Review]:
        return self.repo.list_reviews(self.db, patient_id=user.id)

    def list_all(self, status: Optional[str] = None) -> list[Review]:
        return self.repo.list_reviews(self.db, statuses=(status,) if status else None)

    def delete(self, review_id: str, user: User) -> None:
        review = self.get_review(review_id)
        if user.role != ROLE_ADMIN and review.patient_id != user.id:
            raise HTTPException(status_code=403, detail="You are not allowed to delete this review")
        optometrist_id = review.optometrist_id
        self.repo.delete(self.db, review)
        self._refresh_rating(optometrist_id)
        self.db.commit()

    def update_status(self, review_id: str, status: str) -> Review:
        review = self.get_review(review_id)
        review.status = status
        self.db.commit()
        self.db.refresh(review)
        return review

    def report(self, review_id: str, user: User) -> Review:
        review = self.get_review(review_id)
        review.report_count = (review.report_count or 0) + 1
        self.db.commit()
        self.db.refresh(review)
        logger.warning(f"⚠️ Review {review.id} reported by {user.id} (total {review.report_count})")
        return review

    def stats(self) -> dict:
        avg = self.repo.average_rating(self.db)
        return {
            "totalReviews": self.repo.count(self.db),
            "pendingReviews": self.repo.count(self.db, status="pending"),
            "approvedReviews": self.repo.count(self.db, status="approved"),
            "rejectedReviews": self.repo.count(self.db, status="rejected"),
            "averageRating": round(avg, 1) if avg is not None else 0,
            "reportedReviews": self.repo.count(self.db, reported=True),
        }
