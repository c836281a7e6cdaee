"""Delivery adapters for review requests: SendGrid email and Twilio SMS.

Each adapter gets its credentials at construction and makes exactly one
provider call per send. Results come back as
``{"success": bool, "result": ..., "error": ...}``; nothing is raised past
``send``.
"""
import logging
from typing import Optional

import requests
from pydantic import BaseModel

from app.core.config import settings
from app.core.errors import ProviderDeliveryFailure
from app.services.template_renderer import strip_tags

logger = logging.getLogger(__name__)

SENDGRID_SEND_URL = "https://api.sendgrid.com/v3/mail/send"
TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


class SendGridConfig(BaseModel):
    api_key: Optional[str] = None
    from_email: str = "noreply@repuradar.com"
    from_name: Optional[str] = None
    timeout: int = 30

    @classmethod
    def from_settings(cls) -> "SendGridConfig":
        return cls(
            api_key=settings.SENDGRID_API_KEY,
            from_email=settings.EMAIL_FROM,
            from_name=settings.EMAIL_FROM_NAME,
            timeout=settings.PROVIDER_TIMEOUT_SECONDS,
        )


class TwilioConfig(BaseModel):
    account_sid: Optional[str] = None
    auth_token: Optional[str] = None
    from_number: Optional[str] = None
    timeout: int = 30

    @classmethod
    def from_settings(cls) -> "TwilioConfig":
        return cls(
            account_sid=settings.TWILIO_ACCOUNT_SID,
            auth_token=settings.TWILIO_AUTH_TOKEN,
            from_number=settings.TWILIO_PHONE_NUMBER,
            timeout=settings.PROVIDER_TIMEOUT_SECONDS,
        )


def _failure(exc: ProviderDeliveryFailure) -> dict:
    logger.error("%s", exc.message)
    return {"success": False, "error": exc.message}


class EmailAdapter:
    """Sends one email through the SendGrid v3 mail-send API."""

    provider = "SendGrid"

    def __init__(self, config: SendGridConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.http = session or requests.Session()

    def build_payload(self, to: str, subject: str, html: str) -> dict:
        sender = {"email": self.config.from_email}
        if self.config.from_name:
            sender["name"] = self.config.from_name
        return {
            "personalizations": [{"to": [{"email": to}]}],
            "from": sender,
            "subject": subject,
            "content": [
                {"type": "text/plain", "value": strip_tags(html)},
                {"type": "text/html", "value": html},
            ],
        }

    def send(self, to: str, subject: str, html: str) -> dict:
        if not self.config.api_key:
            return _failure(ProviderDeliveryFailure(self.provider, "SENDGRID_API_KEY is not configured"))
        if not to:
            return _failure(ProviderDeliveryFailure(self.provider, "no recipient email address"))

        try:
            resp = self.http.post(
                SENDGRID_SEND_URL,
                json=self.build_payload(to, subject, html),
                headers={
                    "Authorization": f"Bearer {self.config.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            return _failure(ProviderDeliveryFailure(self.provider, str(e)))

        if 200 <= resp.status_code < 300:
            msg_id = resp.headers.get("X-Message-Id", "")
            logger.info("Review request email sent to %s - msg_id: %s", to, msg_id)
            return {"success": True, "result": {"status_code": resp.status_code, "message_id": msg_id}}

        return _failure(ProviderDeliveryFailure(
            self.provider, f"returned {resp.status_code}: {resp.text[:200]}"
        ))


class SmsAdapter:
    """Sends one SMS through the Twilio Messages REST endpoint."""

    provider = "Twilio"

    def __init__(self, config: TwilioConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.http = session or requests.Session()

    def send(self, to: str, body: str) -> dict:
        if not self.config.account_sid or not self.config.auth_token:
            return _failure(ProviderDeliveryFailure(self.provider, "Twilio credentials are not configured"))
        if not self.config.from_number:
            return _failure(ProviderDeliveryFailure(self.provider, "TWILIO_PHONE_NUMBER is not configured"))
        if not to:
            return _failure(ProviderDeliveryFailure(self.provider, "no recipient phone number"))

        try:
            resp = self.http.post(
                TWILIO_MESSAGES_URL.format(sid=self.config.account_sid),
                data={"To": to, "From": self.config.from_number, "Body": body},
                auth=(self.config.account_sid, self.config.auth_token),
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            return _failure(ProviderDeliveryFailure(self.provider, str(e)))

        if 200 <= resp.status_code < 300:
            try:
                data = resp.json()
            except ValueError:
                data = {"raw": resp.text[:500]}
            logger.info("Review request SMS sent to %s - sid: %s", to, data.get("sid", ""))
            return {"success": True, "result": data}

        return _failure(ProviderDeliveryFailure(
            self.provider, f"returned {resp.status_code}: {resp.text[:200]}"
        ))


def get_email_adapter() -> EmailAdapter:
    return EmailAdapter(SendGridConfig.from_settings())


def get_sms_adapter() -> SmsAdapter:
    return SmsAdapter(TwilioConfig.from_settings())
