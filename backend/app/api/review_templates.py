"""Review template CRUD. Setting is_default moves the default for that type."""
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_owned
from app.core.database import get_db
from app.core.security import get_current_user
from app.models.review_request import ReviewTemplate
from app.models.user import User
from app.schemas.review_request import (
    ReviewTemplateCreate, ReviewTemplateUpdate, ReviewTemplate as ReviewTemplateSchema,
)
from app.services.review_templates import ReviewTemplateService

router = APIRouter(prefix="/api/review-templates", tags=["review-templates"])


@router.get("", response_model=List[ReviewTemplateSchema])
def list_templates(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ReviewTemplateService(db).list_for_owner(current_user.id)


@router.post("", response_model=ReviewTemplateSchema, status_code=status.HTTP_201_CREATED)
def create_template(
    data: ReviewTemplateCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ReviewTemplateService(db).create(current_user.id, data.model_dump())


@router.get("/{template_id}", response_model=ReviewTemplateSchema)
def get_template(
    template_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_owned(db, ReviewTemplate, template_id, current_user, "Review template")


@router.patch("/{template_id}", response_model=ReviewTemplateSchema)
def update_template(
    template_id: int,
    data: ReviewTemplateUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    get_owned(db, ReviewTemplate, template_id, current_user, "Review template")
    # Only subject may be cleared; other explicit nulls are ignored
    changes = {
        k: v for k, v in data.model_dump(exclude_unset=True).items()
        if v is not None or k == "subject"
    }
    return ReviewTemplateService(db).update(template_id, changes)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_template(
    template_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    get_owned(db, ReviewTemplate, template_id, current_user, "Review template")
    ReviewTemplateService(db).delete(template_id)
