from app.models.user import User
from app.models.location import Location
from app.models.review_request import (
    ReviewTemplate, ReviewRequest, CrmIntegration,
    TemplateType, ReviewRequestStatus,
)
from app.models.review import Review, Alert, WebhookLog

__all__ = [
    "User",
    "Location",
    "ReviewTemplate",
    "ReviewRequest",
    "CrmIntegration",
    "TemplateType",
    "ReviewRequestStatus",
    "Review",
    "Alert",
    "WebhookLog",
]
