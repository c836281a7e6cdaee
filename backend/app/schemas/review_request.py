from pydantic import BaseModel, Field, model_validator
from typing import Optional, Literal, Any, Dict
from datetime import datetime


# ── Templates ──

class ReviewTemplateBase(BaseModel):
    name: str = Field(..., min_length=1)
    template_type: Literal["email", "sms"] = "email"
    subject: Optional[str] = None
    content: str = Field(..., min_length=1)
    is_default: bool = False


class ReviewTemplateCreate(ReviewTemplateBase):
    pass


class ReviewTemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    template_type: Optional[Literal["email", "sms"]] = None
    subject: Optional[str] = None
    content: Optional[str] = Field(None, min_length=1)
    is_default: Optional[bool] = None


class ReviewTemplate(ReviewTemplateBase):
    id: int
    owner_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ── Review requests ──

class ReviewRequestCreate(BaseModel):
    customer_name: str = Field(..., min_length=1)
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    location_id: Optional[int] = None
    template_id: Optional[int] = None


class ReviewRequest(BaseModel):
    id: int
    owner_id: int
    location_id: Optional[int] = None
    template_id: Optional[int] = None
    crm_integration_id: Optional[int] = None
    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    status: str
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ── CRM integrations ──

class CrmIntegrationBase(BaseModel):
    name: str = Field(..., min_length=1)
    crm_type: str = Field(..., min_length=1)
    api_key: str = Field(..., min_length=8)
    trigger_event: str = Field(..., min_length=1)
    template_id: int
    delay_hours: int = Field(default=2, ge=0)
    active: bool = True
    custom_endpoint: Optional[str] = None
    other_settings: Optional[Dict[str, Any]] = None


class CrmIntegrationCreate(CrmIntegrationBase):
    pass


class CrmIntegrationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    crm_type: Optional[str] = None
    api_key: Optional[str] = Field(None, min_length=8)
    trigger_event: Optional[str] = None
    template_id: Optional[int] = None
    delay_hours: Optional[int] = Field(None, ge=0)
    active: Optional[bool] = None
    custom_endpoint: Optional[str] = None
    other_settings: Optional[Dict[str, Any]] = None


class CrmIntegration(CrmIntegrationBase):
    id: int
    owner_id: int
    created_at: Optional[datetime] = None
    last_sync: Optional[datetime] = None
    requests_sent: int = 0

    class Config:
        from_attributes = True


class CrmTriggerEvent(BaseModel):
    """Inbound CRM event payload (webhook or test call)."""
    event: Optional[str] = None
    customer_name: str = Field(..., min_length=1)
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    location_id: Optional[int] = None

    @model_validator(mode="after")
    def require_contact(self):
        if not self.customer_email and not self.customer_phone:
            raise ValueError("customer_email or customer_phone is required")
        return self
