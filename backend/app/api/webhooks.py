"""Inbound review-platform webhooks.

Every POST is signature-checked against the platform's shared secret before
the payload reaches review ingestion.
"""
import json
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.errors import NotFound
from app.models.review import WebhookLog
from app.schemas.review import Review as ReviewSchema
from app.services.review_ingestion import InvalidReviewPayload, ReviewIngestionService
from app.services.webhook_verifier import PLATFORMS, get_platform_secret, verify_signature

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])


def _log_inbound(db: Session, platform: str, payload, status: int, error: Optional[str] = None):
    try:
        db.add(WebhookLog(
            direction="inbound",
            event_type="review_webhook",
            platform=platform,
            payload=payload if isinstance(payload, dict) else None,
            response_status=status,
            error=error,
        ))
        db.commit()
    except Exception as e:
        db.rollback()
        logger.debug(f"Failed to log webhook: {e}")


@router.get("/facebook")
def verify_facebook_subscription(
    hub_mode: Optional[str] = Query(None, alias="hub.mode"),
    hub_verify_token: Optional[str] = Query(None, alias="hub.verify_token"),
    hub_challenge: Optional[str] = Query(None, alias="hub.challenge"),
):
    """Facebook subscription handshake: echo the challenge if the token matches."""
    expected = settings.FACEBOOK_WEBHOOK_VERIFY_TOKEN
    if hub_mode == "subscribe" and expected and hub_verify_token == expected:
        logger.info("Facebook webhook verified")
        return PlainTextResponse(hub_challenge or "")
    raise HTTPException(status_code=403, detail="Forbidden")


@router.post("/{platform}")
async def receive_review_webhook(
    platform: str,
    request: Request,
    db: Session = Depends(get_db),
):
    if platform not in PLATFORMS:
        raise HTTPException(status_code=404, detail=f"Unsupported provider: {platform}")

    signature = request.headers.get("x-signature") or request.headers.get("x-hub-signature-256")
    if not signature:
        logger.warning(f"{platform} webhook rejected: missing signature header")
        raise HTTPException(status_code=401, detail="Missing signature header")

    secret = get_platform_secret(platform)
    if not secret:
        logger.error(f"{platform.upper()}_WEBHOOK_SECRET not configured")
        raise HTTPException(status_code=500, detail=f"{platform.upper()}_WEBHOOK_SECRET not configured")

    raw_body = await request.body()
    if not verify_signature(raw_body, secret, signature):
        logger.warning(f"{platform} webhook rejected: invalid signature")
        raise HTTPException(status_code=401, detail="Invalid signature")

    try:
        payload = json.loads(raw_body or b"{}")
    except ValueError:
        raise HTTPException(status_code=400, detail="Body must be JSON")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Body must be a JSON object")

    try:
        outcome = ReviewIngestionService(db).ingest(platform, payload)
    except InvalidReviewPayload as e:
        db.rollback()
        _log_inbound(db, platform, payload, 400, str(e))
        raise HTTPException(status_code=400, detail=str(e))
    except NotFound as e:
        _log_inbound(db, platform, payload, 404, e.message)
        raise HTTPException(status_code=404, detail=e.message)

    if outcome["status"] == "created":
        _log_inbound(db, platform, payload, 201)
        review = ReviewSchema.model_validate(outcome["review"])
        return JSONResponse(
            status_code=201,
            content={"status": "created", "review": jsonable_encoder(review)},
        )

    _log_inbound(db, platform, payload, 200)
    return outcome
