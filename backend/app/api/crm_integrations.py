"""CRM integration API.

Owners manage standing automation rules here. CRMs call
``POST /api/crm-integrations/{id}/trigger`` with the integration's API key in
``X-API-Key``; a matching event sends a review request using the
integration's template.
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_dispatcher, get_owned
from app.core.database import get_db
from app.core.security import get_current_user
from app.models.review_request import CrmIntegration, ReviewTemplate
from app.models.user import User
from app.schemas.review_request import (
    CrmIntegrationCreate, CrmIntegrationUpdate, CrmIntegration as CrmIntegrationSchema, CrmTriggerEvent,
)
from app.services.crm_automation import CrmAutomationService
from app.services.review_request import ReviewRequestDispatcher

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/crm-integrations", tags=["crm-integrations"])


def _check_template(db: Session, template_id: int, current_user: User):
    template = db.query(ReviewTemplate).filter(
        ReviewTemplate.id == template_id, ReviewTemplate.owner_id == current_user.id,
    ).first()
    if not template:
        raise HTTPException(status_code=400, detail="Review template not found")


@router.get("", response_model=List[CrmIntegrationSchema])
def list_integrations(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return (
        db.query(CrmIntegration)
        .filter(CrmIntegration.owner_id == current_user.id)
        .order_by(CrmIntegration.created_at.desc(), CrmIntegration.id.desc())
        .all()
    )


@router.post("", response_model=CrmIntegrationSchema, status_code=status.HTTP_201_CREATED)
def create_integration(
    data: CrmIntegrationCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _check_template(db, data.template_id, current_user)
    integration = CrmIntegration(owner_id=current_user.id, requests_sent=0, **data.model_dump())
    db.add(integration)
    db.commit()
    db.refresh(integration)
    logger.info(f"CRM integration {integration.id} ({integration.crm_type}) created for user {current_user.id}")
    return integration


@router.get("/{integration_id}", response_model=CrmIntegrationSchema)
def get_integration(
    integration_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_owned(db, CrmIntegration, integration_id, current_user, "CRM integration")


@router.patch("/{integration_id}", response_model=CrmIntegrationSchema)
def update_integration(
    integration_id: int,
    data: CrmIntegrationUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    integration = get_owned(db, CrmIntegration, integration_id, current_user, "CRM integration")
    changes = data.model_dump(exclude_unset=True)
    if changes.get("template_id") is not None:
        _check_template(db, changes["template_id"], current_user)

    nullable = {"custom_endpoint", "other_settings"}
    for field, value in changes.items():
        if value is None and field not in nullable:
            continue
        setattr(integration, field, value)
    db.commit()
    db.refresh(integration)
    return integration


@router.delete("/{integration_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_integration(
    integration_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    integration = get_owned(db, CrmIntegration, integration_id, current_user, "CRM integration")
    db.delete(integration)
    db.commit()


@router.post("/{integration_id}/trigger")
def trigger_integration(
    integration_id: int,
    event: CrmTriggerEvent,
    x_api_key: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    dispatcher: ReviewRequestDispatcher = Depends(get_dispatcher),
):
    """Inbound CRM webhook (no user session; authenticated by API key)."""
    service = CrmAutomationService(db, dispatcher)
    integration = service.authenticate(integration_id, x_api_key)
    return service.handle_event(integration, event)


@router.post("/{integration_id}/test")
def test_integration(
    integration_id: int,
    event: CrmTriggerEvent,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    dispatcher: ReviewRequestDispatcher = Depends(get_dispatcher),
):
    """Run the integration end to end with a sample contact."""
    integration = get_owned(db, CrmIntegration, integration_id, current_user, "CRM integration")
    return CrmAutomationService(db, dispatcher).handle_event(integration, event, test=True)
