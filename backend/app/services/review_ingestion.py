"""Turns verified platform webhook payloads into Review rows.

Each platform posts ``{"userId", "locationId"?, "reviewData"}``; reviewData
is the platform's own review object and gets mapped onto our schema here.
Duplicates (same external id for the owner) are skipped, and ratings of 2 or
lower raise a negative_review alert.
"""
import logging
from datetime import datetime, timezone

from dateutil.parser import parse as dateparse
from sqlalchemy.orm import Session

from app.core.errors import NotFound
from app.models.location import Location
from app.models.review import Alert, Review
from app.models.user import User

logger = logging.getLogger(__name__)

NEGATIVE_RATING_THRESHOLD = 2

PLATFORM_LABELS = {
    "yelp": "Yelp",
    "google": "Google",
    "facebook": "Facebook",
    "apple": "Apple Maps",
}


class InvalidReviewPayload(ValueError):
    pass


def _sentiment_from_rating(rating: float) -> float:
    return (rating - 1) / 4


def _parse_date(value) -> datetime:
    if value is None or value == "":
        return datetime.utcnow()
    try:
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value, tz=timezone.utc)
        return dateparse(str(value))
    except (ValueError, OverflowError, OSError) as e:
        raise InvalidReviewPayload(f"Unparseable review date: {value!r}") from e


def _rating(value) -> float:
    try:
        rating = float(value)
    except (TypeError, ValueError):
        raise InvalidReviewPayload(f"Invalid rating: {value!r}")
    if rating < 1 or rating > 5:
        raise InvalidReviewPayload(f"Rating must be between 1 and 5, got {rating}")
    return rating


# ── Platform mappers ──

def normalize_yelp(data: dict) -> dict:
    rating = _rating(data.get("rating"))
    return {
        "reviewer_name": (data.get("user") or {}).get("name") or "Yelp User",
        "rating": rating,
        "review_text": data.get("text") or "",
        "date": _parse_date(data.get("time_created")),
        "external_id": f"yelp-{data.get('id')}",
    }


def normalize_google(data: dict) -> dict:
    rating = _rating(data.get("rating"))
    author = data.get("author_name") or "Google User"
    return {
        "reviewer_name": author,
        "rating": rating,
        "review_text": data.get("text") or "",
        "date": _parse_date(data.get("time")),
        "external_id": f"google-{author}-{data.get('time')}",
    }


def normalize_facebook(data: dict) -> dict:
    # recommendation_type stands in for a star rating when none is given
    recommended = data.get("recommendation_type") == "positive"
    rating = _rating(data.get("rating") or (5 if recommended else 1))
    return {
        "reviewer_name": (data.get("reviewer") or {}).get("name") or "Facebook User",
        "rating": rating,
        "review_text": data.get("review_text") or ("Recommended" if recommended else "Not recommended"),
        "date": _parse_date(data.get("created_time")),
        "external_id": f"facebook-{data.get('id')}",
    }


def normalize_apple(data: dict) -> dict:
    rating = _rating(data.get("rating"))
    return {
        "reviewer_name": (data.get("reviewer") or {}).get("name") or "Apple Maps User",
        "rating": rating,
        "review_text": data.get("text") or "",
        "date": _parse_date(data.get("dateCreated")),
        "external_id": f"apple-maps-{data.get('id')}",
    }


NORMALIZERS = {
    "yelp": normalize_yelp,
    "google": normalize_google,
    "facebook": normalize_facebook,
    "apple": normalize_apple,
}


class ReviewIngestionService:

    def __init__(self, db: Session):
        self.db = db

    def ingest(self, platform: str, payload: dict) -> dict:
        """Returns {"status": "created"|"skipped", ...}.

        Raises InvalidReviewPayload for malformed input and NotFound for an
        unknown user or location.
        """
        if platform not in NORMALIZERS:
            raise InvalidReviewPayload(f"Unsupported provider: {platform}")

        user_id = payload.get("userId")
        review_data = payload.get("reviewData")
        location_id = payload.get("locationId")
        if not user_id or not isinstance(review_data, dict):
            raise InvalidReviewPayload("Missing required fields")

        try:
            user_id = int(user_id)
            location_id = int(location_id) if location_id else None
        except (TypeError, ValueError):
            raise InvalidReviewPayload("userId and locationId must be integers")

        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFound("User not found")

        # Owners with no locations haven't finished setup yet
        has_locations = self.db.query(Location.id).filter(Location.owner_id == user.id).first()
        if not has_locations:
            logger.info("User %s has no locations, skipping %s review", user.id, platform)
            return {"status": "skipped", "message": "User has no activity/locations"}

        if location_id is not None:
            location = self.db.query(Location).filter(
                Location.id == location_id, Location.owner_id == user.id,
            ).first()
            if not location:
                raise NotFound("Location not found")

        fields = NORMALIZERS[platform](review_data)

        duplicate = self.db.query(Review.id).filter(
            Review.owner_id == user.id,
            Review.external_id == fields["external_id"],
        ).first()
        if duplicate:
            return {"status": "skipped", "message": "Review already exists"}

        label = PLATFORM_LABELS[platform]
        review = Review(
            owner_id=user.id,
            location_id=location_id,
            platform=label,
            is_resolved=False,
            sentiment_score=_sentiment_from_rating(fields["rating"]),
            **fields,
        )
        self.db.add(review)

        if review.rating <= NEGATIVE_RATING_THRESHOLD:
            self.db.add(Alert(
                owner_id=user.id,
                alert_type="negative_review",
                content=(
                    f"New negative review received with {fields['rating']:g} rating "
                    f"from {fields['reviewer_name']} on {label}"
                ),
                is_read=False,
            ))

        self.db.commit()
        self.db.refresh(review)
        logger.info("Ingested %s review %s for user %s", label, review.external_id, user.id)
        return {"status": "created", "review": review}
