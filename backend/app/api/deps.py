"""Shared route dependencies."""
from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.user import User
from app.services.delivery import EmailAdapter, SmsAdapter, get_email_adapter, get_sms_adapter
from app.services.review_request import ReviewRequestDispatcher


def get_dispatcher(
    db: Session = Depends(get_db),
    email_adapter: EmailAdapter = Depends(get_email_adapter),
    sms_adapter: SmsAdapter = Depends(get_sms_adapter),
) -> ReviewRequestDispatcher:
    return ReviewRequestDispatcher(db, email_adapter, sms_adapter)


def get_owned(db: Session, model, obj_id: int, current_user: User, label: str):
    """Fetch a row by id; 404 if missing, 403 if it belongs to someone else."""
    obj = db.query(model).filter(model.id == obj_id).first()
    if not obj:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    if obj.owner_id != current_user.id:
        raise HTTPException(status_code=403, detail="Forbidden")
    return obj
