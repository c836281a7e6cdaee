"""Works out who a review request goes to, over which channel, and where it links."""
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from app.core.errors import MissingContactInfo
from app.models.location import Location
from app.models.review_request import ReviewRequest

GOOGLE_REVIEW_URL = "https://search.google.com/local/writereview?placeid={place_id}"
YELP_REVIEW_URL = "https://www.yelp.com/writeareview/biz/{business_id}"
FALLBACK_SEARCH_URL = "https://www.google.com/search?q={query}"


@dataclass
class ResolvedContact:
    recipient_label: str
    destination: str
    channel: str  # email, sms
    review_link: str
    business_name: str


def build_review_link(location: Optional[Location], business_name: str) -> str:
    """Google > Yelp > web search for the business name."""
    if location is not None:
        if location.google_place_id:
            return GOOGLE_REVIEW_URL.format(place_id=quote(location.google_place_id, safe=""))
        if location.yelp_business_id:
            return YELP_REVIEW_URL.format(business_id=quote(location.yelp_business_id, safe=""))
    return FALLBACK_SEARCH_URL.format(query=quote(business_name or "", safe=""))


def resolve_contact(
    request: ReviewRequest,
    business_name: str,
    location: Optional[Location] = None,
) -> ResolvedContact:
    if request.customer_email:
        channel, destination = "email", request.customer_email
    elif request.customer_phone:
        channel, destination = "sms", request.customer_phone
    else:
        raise MissingContactInfo()

    label = location.name if location is not None else business_name
    return ResolvedContact(
        recipient_label=request.customer_name,
        destination=destination,
        channel=channel,
        review_link=build_review_link(location, label),
        business_name=label,
    )
