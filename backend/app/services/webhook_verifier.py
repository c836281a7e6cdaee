"""HMAC-SHA256 signature check for inbound review-platform webhooks."""
import hashlib
import hmac
from typing import Optional

from app.core.config import settings

PLATFORMS = ("facebook", "yelp", "google", "apple")


def compute_signature(raw_body: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


def verify_signature(raw_body: bytes, secret: str, signature: Optional[str]) -> bool:
    """Constant-time compare of the hex digest; tolerates a leading 'sha256='."""
    if not signature or not secret:
        return False
    supplied = signature.strip()
    if supplied.startswith("sha256="):
        supplied = supplied[len("sha256="):]
    expected = compute_signature(raw_body, secret)
    return hmac.compare_digest(expected.encode("ascii"), supplied.encode("ascii", "replace"))


def get_platform_secret(platform: str) -> Optional[str]:
    return {
        "facebook": settings.FACEBOOK_WEBHOOK_SECRET,
        "yelp": settings.YELP_WEBHOOK_SECRET,
        "google": settings.GOOGLE_WEBHOOK_SECRET,
        "apple": settings.APPLE_WEBHOOK_SECRET,
    }.get(platform)
