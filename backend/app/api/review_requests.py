"""Review request API. Create, list and send review requests by email or SMS."""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.deps import get_dispatcher, get_owned
from app.core.database import get_db
from app.core.security import get_current_user
from app.models.location import Location
from app.models.review_request import ReviewRequest, ReviewTemplate
from app.models.user import User
from app.schemas.review_request import ReviewRequestCreate, ReviewRequest as ReviewRequestSchema
from app.services.review_request import ReviewRequestDispatcher

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/review-requests", tags=["review-requests"])


@router.get("", response_model=List[ReviewRequestSchema])
def list_review_requests(
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: Optional[int] = Query(None, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    query = db.query(ReviewRequest).filter(ReviewRequest.owner_id == current_user.id)
    if status_filter:
        query = query.filter(ReviewRequest.status == status_filter)
    query = query.order_by(ReviewRequest.created_at.desc(), ReviewRequest.id.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


@router.post("", response_model=ReviewRequestSchema, status_code=status.HTTP_201_CREATED)
def create_review_request(
    data: ReviewRequestCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if data.location_id is not None:
        location = db.query(Location).filter(
            Location.id == data.location_id, Location.owner_id == current_user.id,
        ).first()
        if not location:
            raise HTTPException(status_code=400, detail="Location not found")

    if data.template_id is not None:
        template = db.query(ReviewTemplate).filter(
            ReviewTemplate.id == data.template_id, ReviewTemplate.owner_id == current_user.id,
        ).first()
        if not template:
            raise HTTPException(status_code=400, detail="Review template not found")

    request = ReviewRequest(owner_id=current_user.id, status="pending", **data.model_dump())
    db.add(request)
    db.commit()
    db.refresh(request)
    return request


@router.get("/{request_id}", response_model=ReviewRequestSchema)
def get_review_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_owned(db, ReviewRequest, request_id, current_user, "Review request")


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    request = get_owned(db, ReviewRequest, request_id, current_user, "Review request")
    db.delete(request)
    db.commit()


@router.post("/{request_id}/send")
def send_review_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    dispatcher: ReviewRequestDispatcher = Depends(get_dispatcher),
):
    """Send one review request now. A failed request can be sent again."""
    get_owned(db, ReviewRequest, request_id, current_user, "Review request")

    outcome = dispatcher.dispatch(request_id)
    request_data = jsonable_encoder(ReviewRequestSchema.model_validate(outcome["request"]))

    if outcome["success"]:
        return {
            "message": "Review request sent successfully",
            "result": jsonable_encoder(outcome.get("result")),
            "request": request_data,
        }

    logger.warning(f"Review request {request_id} failed: {outcome.get('error')}")
    return JSONResponse(
        status_code=500,
        content={
            "message": "Failed to send review request",
            "error": str(outcome.get("error")),
            "request": request_data,
        },
    )
