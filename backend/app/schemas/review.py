from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class Review(BaseModel):
    id: int
    owner_id: int
    location_id: Optional[int] = None
    reviewer_name: str
    platform: str
    rating: float
    review_text: str
    date: datetime
    is_resolved: bool
    response: Optional[str] = None
    external_id: str
    sentiment_score: Optional[float] = None

    class Config:
        from_attributes = True


class ReviewUpdate(BaseModel):
    """Owner edits: save a reply to the reviewer and/or mark it handled."""
    response: Optional[str] = None
    is_resolved: Optional[bool] = None


class Alert(BaseModel):
    id: int
    owner_id: int
    alert_type: str
    content: str
    date: Optional[datetime] = None
    is_read: bool

    class Config:
        from_attributes = True
