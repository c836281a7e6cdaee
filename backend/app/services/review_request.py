"""Review request dispatch.

Resolve contact -> pick template -> render -> deliver -> record outcome.

A request is claimed before anything is sent (conditional update on
``dispatch_claimed_at``), so two concurrent sends of the same request end
with one delivery and one ``AlreadyDispatched``. The final status write
happens once per dispatch and releases the claim. A claim older than
``DISPATCH_CLAIM_TTL_SECONDS`` belongs to a dispatch that never finished and
may be taken over.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import AlreadyDispatched, NotFound, ReviewPipelineError
from app.models.location import Location
from app.models.review_request import (
    DISPATCHABLE_STATUSES, ReviewRequest, ReviewRequestStatus, ReviewTemplate, TemplateType,
)
from app.models.user import User
from app.services.contact_resolver import ResolvedContact, resolve_contact
from app.services.delivery import EmailAdapter, SmsAdapter
from app.services.template_renderer import (
    DEFAULT_EMAIL_SUBJECT, DEFAULT_EMAIL_TEMPLATE, DEFAULT_SMS_TEMPLATE,
    find_unresolved, render_template,
)

logger = logging.getLogger(__name__)


class ReviewRequestDispatcher:

    def __init__(
        self,
        db: Session,
        email_adapter: EmailAdapter,
        sms_adapter: SmsAdapter,
        claim_ttl: Optional[timedelta] = None,
    ):
        self.db = db
        self.email_adapter = email_adapter
        self.sms_adapter = sms_adapter
        self.claim_ttl = claim_ttl or timedelta(seconds=settings.DISPATCH_CLAIM_TTL_SECONDS)

    def dispatch(self, request_id: int) -> dict:
        """Send one review request. Returns {success, request, result|error}.

        Raises NotFound if the request or its owner is gone and
        AlreadyDispatched if it was sent already or a send is in flight.
        Delivery problems never raise; they end with status=failed.
        """
        request = self.db.query(ReviewRequest).filter(ReviewRequest.id == request_id).first()
        if not request:
            raise NotFound(f"Review request with ID {request_id} not found")

        owner = self.db.query(User).filter(User.id == request.owner_id).first()
        if not owner:
            raise NotFound(f"User with ID {request.owner_id} not found")

        self._claim(request_id)

        try:
            result = self._deliver(request, owner)
        except ReviewPipelineError as e:
            logger.warning("Review request %s not sent: %s", request_id, e.message)
            result = {"success": False, "error": e.message}
        except Exception as e:
            logger.exception("Unexpected error dispatching review request %s", request_id)
            result = {"success": False, "error": str(e)}

        self._finish(request, result)

        outcome = {"success": result["success"], "request": request}
        if result["success"]:
            outcome["result"] = result.get("result")
        else:
            outcome["error"] = result.get("error")
        return outcome

    # ── steps ──

    def _claim(self, request_id: int):
        now = datetime.utcnow()
        stale_before = now - self.claim_ttl
        claimed = (
            self.db.query(ReviewRequest)
            .filter(
                ReviewRequest.id == request_id,
                ReviewRequest.status.in_(DISPATCHABLE_STATUSES),
                or_(
                    ReviewRequest.dispatch_claimed_at.is_(None),
                    ReviewRequest.dispatch_claimed_at < stale_before,
                ),
            )
            .update({ReviewRequest.dispatch_claimed_at: now}, synchronize_session=False)
        )
        self.db.commit()
        if not claimed:
            raise AlreadyDispatched(request_id)

    def _deliver(self, request: ReviewRequest, owner: User) -> dict:
        location = None
        if request.location_id:
            location = self.db.query(Location).filter(
                Location.id == request.location_id,
                Location.owner_id == request.owner_id,
            ).first()

        contact = resolve_contact(request, owner.display_business_name, location)
        template = self.select_template(request, contact.channel)
        variables = self.template_variables(contact, location)

        if contact.channel == TemplateType.EMAIL.value:
            content = template.content if template else DEFAULT_EMAIL_TEMPLATE
            subject_src = (template.subject if template and template.subject else DEFAULT_EMAIL_SUBJECT)
            self._warn_unresolved(request.id, content + subject_src, variables)
            return self.email_adapter.send(
                to=contact.destination,
                subject=render_template(subject_src, variables),
                html=render_template(content, variables),
            )

        content = template.content if template else DEFAULT_SMS_TEMPLATE
        self._warn_unresolved(request.id, content, variables)
        return self.sms_adapter.send(to=contact.destination, body=render_template(content, variables))

    def _finish(self, request: ReviewRequest, result: dict):
        if result["success"]:
            request.status = ReviewRequestStatus.SENT.value
            request.sent_at = datetime.utcnow()
            request.error_message = None
        else:
            request.status = ReviewRequestStatus.FAILED.value
            request.error_message = str(result.get("error") or "Unknown error")[:1000]
        request.dispatch_claimed_at = None
        self.db.commit()
        self.db.refresh(request)

    # ── helpers ──

    def select_template(self, request: ReviewRequest, channel: str) -> Optional[ReviewTemplate]:
        """Explicit template of the right type, else owner's default for the channel, else None."""
        if request.template_id:
            template = self.db.query(ReviewTemplate).filter(
                ReviewTemplate.id == request.template_id,
                ReviewTemplate.owner_id == request.owner_id,
            ).first()
            if template and template.template_type == channel:
                return template
            if template:
                logger.info(
                    "Template %s is %s but request %s goes by %s, using default",
                    template.id, template.template_type, request.id, channel,
                )

        return self.db.query(ReviewTemplate).filter(
            ReviewTemplate.owner_id == request.owner_id,
            ReviewTemplate.template_type == channel,
            ReviewTemplate.is_default.is_(True),
        ).first()

    @staticmethod
    def template_variables(contact: ResolvedContact, location: Optional[Location]) -> dict:
        return {
            "customerName": contact.recipient_label,
            "businessName": contact.business_name,
            "reviewLink": contact.review_link,
            "locationName": location.name if location is not None else contact.business_name,
        }

    @staticmethod
    def _warn_unresolved(request_id: int, template: str, variables: dict):
        unresolved = find_unresolved(template, variables)
        if unresolved:
            logger.warning("Review request %s has unresolved placeholders: %s", request_id, ", ".join(unresolved))
