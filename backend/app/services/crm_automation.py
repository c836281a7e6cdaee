"""CRM-triggered review requests.

An inbound CRM event that matches an active integration's trigger_event
becomes a ReviewRequest (using the integration's template) and goes straight
through the dispatcher. Every inbound trigger is written to webhook_logs.
"""
import hmac
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import Forbidden, NotFound, ReviewPipelineError
from app.models.location import Location
from app.models.review import WebhookLog
from app.models.review_request import CrmIntegration, ReviewRequest, ReviewRequestStatus
from app.schemas.review_request import CrmTriggerEvent
from app.services.review_request import ReviewRequestDispatcher

logger = logging.getLogger(__name__)


class IntegrationInactive(ReviewPipelineError):
    status_code = 409


class CrmAutomationService:

    def __init__(self, db: Session, dispatcher: ReviewRequestDispatcher):
        self.db = db
        self.dispatcher = dispatcher

    def authenticate(self, integration_id: int, api_key: Optional[str]) -> CrmIntegration:
        integration = self.db.query(CrmIntegration).filter(CrmIntegration.id == integration_id).first()
        if not integration:
            raise NotFound("CRM integration not found")
        if not api_key or not hmac.compare_digest(integration.api_key.encode(), api_key.encode()):
            raise Forbidden("Invalid API key")
        return integration

    def handle_event(self, integration: CrmIntegration, event: CrmTriggerEvent, test: bool = False) -> dict:
        """Create and dispatch a review request for one CRM event."""
        event_type = "crm_test" if test else (event.event or integration.trigger_event)
        payload = event.model_dump()

        if not integration.active and not test:
            self._log(event_type, integration, payload, 409, "integration inactive")
            raise IntegrationInactive(f"CRM integration {integration.id} is inactive")

        if not test and event.event and event.event != integration.trigger_event:
            logger.info(
                "CRM integration %s ignoring event %s (waits for %s)",
                integration.id, event.event, integration.trigger_event,
            )
            self._log(event_type, integration, payload, 200, None)
            return {"status": "ignored", "reason": f"event '{event.event}' does not match trigger"}

        location_id = event.location_id
        if location_id is not None:
            location = self.db.query(Location).filter(
                Location.id == location_id, Location.owner_id == integration.owner_id,
            ).first()
            if not location:
                self._log(event_type, integration, payload, 404, "location not found")
                raise NotFound("Location not found")

        request = ReviewRequest(
            owner_id=integration.owner_id,
            location_id=location_id,
            template_id=integration.template_id,
            crm_integration_id=integration.id,
            customer_name=event.customer_name,
            customer_email=event.customer_email,
            customer_phone=event.customer_phone,
            status=ReviewRequestStatus.PENDING.value,
        )
        self.db.add(request)
        self.db.commit()
        self.db.refresh(request)

        outcome = self.dispatcher.dispatch(request.id)

        integration.last_sync = datetime.utcnow()
        if outcome["success"]:
            integration.requests_sent = (integration.requests_sent or 0) + 1
        self.db.commit()

        self._log(event_type, integration, payload, 200 if outcome["success"] else 500, outcome.get("error"))
        logger.info(
            "CRM integration %s dispatched review request %s (success=%s)",
            integration.id, request.id, outcome["success"],
        )

        result = {
            "status": "sent" if outcome["success"] else "failed",
            "review_request_id": request.id,
        }
        if outcome["success"]:
            result["result"] = outcome.get("result")
        else:
            result["error"] = outcome.get("error")
        return result

    def _log(self, event_type: str, integration: CrmIntegration, payload: dict,
             status: Optional[int], error: Optional[str]):
        try:
            self.db.add(WebhookLog(
                direction="inbound",
                event_type=event_type,
                platform=f"crm:{integration.crm_type}",
                payload={**payload, "integration_id": integration.id},
                response_status=status,
                error=error,
            ))
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.debug(f"Failed to log CRM trigger: {e}")
