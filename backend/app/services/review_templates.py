"""Template store. Keeps at most one default template per (owner, type)."""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.errors import NotFound, ReviewPipelineError
from app.models.review_request import CrmIntegration, ReviewTemplate

logger = logging.getLogger(__name__)


class TemplateInUse(ReviewPipelineError):
    status_code = 409


class ReviewTemplateService:

    def __init__(self, db: Session):
        self.db = db

    def list_for_owner(self, owner_id: int) -> List[ReviewTemplate]:
        return (
            self.db.query(ReviewTemplate)
            .filter(ReviewTemplate.owner_id == owner_id)
            .order_by(ReviewTemplate.template_type, ReviewTemplate.name)
            .all()
        )

    def get_default(self, owner_id: int, template_type: str) -> Optional[ReviewTemplate]:
        return self.db.query(ReviewTemplate).filter(
            ReviewTemplate.owner_id == owner_id,
            ReviewTemplate.template_type == template_type,
            ReviewTemplate.is_default.is_(True),
        ).first()

    def create(self, owner_id: int, data: dict) -> ReviewTemplate:
        template = ReviewTemplate(owner_id=owner_id, **data)
        try:
            if template.is_default:
                self._unset_defaults(owner_id, template.template_type)
            self.db.add(template)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(template)
        logger.info("Template %s created for owner %s (default=%s)", template.id, owner_id, template.is_default)
        return template

    def update(self, template_id: int, data: dict) -> ReviewTemplate:
        template = self.db.query(ReviewTemplate).filter(ReviewTemplate.id == template_id).first()
        if not template:
            raise NotFound(f"Review template with id {template_id} not found")

        new_type = data.get("template_type") or template.template_type
        becomes_default = data.get("is_default")
        if becomes_default is None:
            becomes_default = template.is_default

        try:
            if becomes_default:
                self._unset_defaults(template.owner_id, new_type, exclude_id=template.id)
            for field, value in data.items():
                setattr(template, field, value)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(template)
        return template

    def delete(self, template_id: int):
        template = self.db.query(ReviewTemplate).filter(ReviewTemplate.id == template_id).first()
        if not template:
            raise NotFound(f"Review template with id {template_id} not found")
        in_use = self.db.query(CrmIntegration.id).filter(CrmIntegration.template_id == template_id).count()
        if in_use:
            raise TemplateInUse(
                f"Review template {template_id} is used by {in_use} CRM integration(s); "
                "point them at another template first"
            )
        self.db.delete(template)
        self.db.commit()

    def _unset_defaults(self, owner_id: int, template_type: str, exclude_id: Optional[int] = None):
        # Runs in the caller's transaction; no commit here
        query = self.db.query(ReviewTemplate).filter(
            ReviewTemplate.owner_id == owner_id,
            ReviewTemplate.template_type == template_type,
            ReviewTemplate.is_default.is_(True),
        )
        if exclude_id is not None:
            query = query.filter(ReviewTemplate.id != exclude_id)
        query.update({ReviewTemplate.is_default: False}, synchronize_session="fetch")
