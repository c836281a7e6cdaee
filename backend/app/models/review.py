"""Ingested platform reviews, owner alerts and the inbound webhook audit log."""
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, Float, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from app.core.database import Base


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    location_id = Column(Integer, ForeignKey("locations.id", ondelete="SET NULL"), nullable=True)

    reviewer_name = Column(String, nullable=False)
    platform = Column(String, nullable=False, index=True)  # Google, Yelp, Facebook, Apple Maps
    rating = Column(Float, nullable=False)  # 1-5
    review_text = Column(Text, nullable=False, default="")
    date = Column(DateTime(timezone=True), nullable=False)
    is_resolved = Column(Boolean, default=False, nullable=False)
    response = Column(Text, nullable=True)

    external_id = Column(String, nullable=False)
    sentiment_score = Column(Float, nullable=True)  # 0-1, from rating

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("owner_id", "external_id", name="uq_reviews_owner_external_id"),
    )


class Alert(Base):
    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    alert_type = Column(String, nullable=False)  # negative_review, keyword_trend
    content = Column(Text, nullable=False)
    date = Column(DateTime(timezone=True), server_default=func.now())
    is_read = Column(Boolean, default=False, nullable=False)


class WebhookLog(Base):
    """Logs inbound platform webhooks and CRM triggers."""
    __tablename__ = "webhook_logs"

    id = Column(Integer, primary_key=True, index=True)
    direction = Column(String, nullable=False)  # inbound, outbound
    event_type = Column(String, nullable=False, index=True)
    platform = Column(String, nullable=True)
    payload = Column(JSON, nullable=True)
    response_status = Column(Integer, nullable=True)
    error = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
