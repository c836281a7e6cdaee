"""Models for review-request campaigns: templates, requests, CRM automation rules."""
import enum

from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, JSON, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class TemplateType(str, enum.Enum):
    EMAIL = "email"
    SMS = "sms"


class ReviewRequestStatus(str, enum.Enum):
    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    OPENED = "opened"
    CLICKED = "clicked"
    COMPLETED = "completed"
    FAILED = "failed"


# Statuses a request may be (re)sent from
DISPATCHABLE_STATUSES = (ReviewRequestStatus.PENDING.value, ReviewRequestStatus.FAILED.value)


# ═══════════════════════════════════════════════════════════════════
# TEMPLATES
# ═══════════════════════════════════════════════════════════════════

class ReviewTemplate(Base):
    """Email/SMS message template with {{variable}} placeholders."""
    __tablename__ = "review_templates"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String, nullable=False)
    template_type = Column(String, nullable=False, default=TemplateType.EMAIL.value)  # email, sms
    subject = Column(String, nullable=True)
    content = Column(Text, nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        # At most one default per (owner, type)
        Index(
            "uq_review_templates_default_per_type",
            "owner_id",
            "template_type",
            unique=True,
            postgresql_where=text("is_default"),
            sqlite_where=text("is_default = 1"),
        ),
    )


# ═══════════════════════════════════════════════════════════════════
# REVIEW REQUESTS
# ═══════════════════════════════════════════════════════════════════

class ReviewRequest(Base):
    """A single ask for a review, sent by email or SMS."""
    __tablename__ = "review_requests"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    location_id = Column(Integer, ForeignKey("locations.id", ondelete="SET NULL"), nullable=True)
    template_id = Column(Integer, ForeignKey("review_templates.id", ondelete="SET NULL"), nullable=True)
    crm_integration_id = Column(Integer, ForeignKey("crm_integrations.id", ondelete="SET NULL"), nullable=True)

    # Customer info
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=True)
    customer_phone = Column(String, nullable=True)

    # pending, sent, delivered, opened, clicked, completed, failed
    status = Column(String, default=ReviewRequestStatus.PENDING.value, nullable=False, index=True)
    error_message = Column(Text, nullable=True)

    # Set while a dispatch is in flight; guards against double sends
    dispatch_claimed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    sent_at = Column(DateTime(timezone=True), nullable=True)

    location = relationship("Location")
    template = relationship("ReviewTemplate")


# ═══════════════════════════════════════════════════════════════════
# CRM AUTOMATION
# ═══════════════════════════════════════════════════════════════════

class CrmIntegration(Base):
    """Standing rule: when the CRM fires trigger_event, send a review request."""
    __tablename__ = "crm_integrations"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String, nullable=False)
    crm_type = Column(String, nullable=False)  # salesforce, hubspot, zoho, custom, ...
    api_key = Column(String, nullable=False)
    trigger_event = Column(String, nullable=False)  # e.g. appointment_completed
    template_id = Column(Integer, ForeignKey("review_templates.id", ondelete="RESTRICT"), nullable=False)
    delay_hours = Column(Integer, default=2)
    active = Column(Boolean, default=True)
    custom_endpoint = Column(String, nullable=True)
    other_settings = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    last_sync = Column(DateTime(timezone=True), nullable=True)
    requests_sent = Column(Integer, default=0)

    template = relationship("ReviewTemplate")
