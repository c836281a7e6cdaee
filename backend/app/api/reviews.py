"""Ingested reviews and alerts for the signed-in owner."""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_owned
from app.core.database import get_db
from app.core.security import get_current_user
from app.models.review import Alert, Review
from app.models.user import User
from app.schemas.review import Alert as AlertSchema, Review as ReviewSchema, ReviewUpdate

router = APIRouter(prefix="/api", tags=["reviews"])


@router.get("/reviews", response_model=List[ReviewSchema])
def list_reviews(
    platform: Optional[str] = None,
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    query = db.query(Review).filter(Review.owner_id == current_user.id)
    if platform:
        query = query.filter(Review.platform == platform)
    return query.order_by(Review.date.desc()).limit(limit).all()


@router.patch("/reviews/{review_id}", response_model=ReviewSchema)
def update_review(
    review_id: int,
    data: ReviewUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    review = get_owned(db, Review, review_id, current_user, "Review")
    changes = data.model_dump(exclude_unset=True)
    if "response" in changes:
        review.response = changes["response"]
    if changes.get("is_resolved") is not None:
        review.is_resolved = changes["is_resolved"]
    db.commit()
    db.refresh(review)
    return review


@router.post("/reviews/{review_id}/resolve", response_model=ReviewSchema)
def resolve_review(
    review_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    review = get_owned(db, Review, review_id, current_user, "Review")
    review.is_resolved = True
    db.commit()
    db.refresh(review)
    return review


@router.get("/alerts", response_model=List[AlertSchema])
def list_alerts(
    unread_only: bool = False,
    limit: int = Query(50, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    query = db.query(Alert).filter(Alert.owner_id == current_user.id)
    if unread_only:
        query = query.filter(Alert.is_read == False)
    return query.order_by(Alert.date.desc(), Alert.id.desc()).limit(limit).all()


@router.patch("/alerts/{alert_id}/read", response_model=AlertSchema)
def mark_alert_read(
    alert_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    alert = get_owned(db, Alert, alert_id, current_user, "Alert")
    alert.is_read = True
    db.commit()
    db.refresh(alert)
    return alert
