import pytest

from app.core.errors import MissingContactInfo
from app.models import Location, ReviewRequest
from app.services.contact_resolver import build_review_link, resolve_contact


def _request(**fields):
    return ReviewRequest(customer_name="Jane Doe", **fields)


def test_phone_only_goes_by_sms():
    contact = resolve_contact(_request(customer_phone="+15550001111"), "Acme")
    assert contact.channel == "sms"
    assert contact.destination == "+15550001111"


def test_email_only_goes_by_email():
    contact = resolve_contact(_request(customer_email="jane@example.com"), "Acme")
    assert contact.channel == "email"
    assert contact.destination == "jane@example.com"


def test_email_wins_when_both_present():
    contact = resolve_contact(
        _request(customer_email="jane@example.com", customer_phone="+15550001111"), "Acme",
    )
    assert contact.channel == "email"


def test_no_contact_info_raises():
    with pytest.raises(MissingContactInfo):
        resolve_contact(_request(), "Acme")


def test_google_place_link():
    location = Location(name="Main St", google_place_id="abc")
    assert "placeid=abc" in build_review_link(location, "Main St")


def test_google_beats_yelp():
    location = Location(name="Main St", google_place_id="abc", yelp_business_id="acme-sf")
    assert build_review_link(location, "Main St").startswith("https://search.google.com/")


def test_yelp_link_when_no_google_id():
    location = Location(name="Main St", yelp_business_id="acme-sf")
    assert build_review_link(location, "Main St") == "https://www.yelp.com/writeareview/biz/acme-sf"


def test_fallback_search_link_uses_location_name():
    contact = resolve_contact(
        _request(customer_email="jane@example.com"), "Acme Dental", Location(name="Acme & Co"),
    )
    assert contact.review_link == "https://www.google.com/search?q=Acme%20%26%20Co"
    assert contact.business_name == "Acme & Co"


def test_fallback_search_link_uses_business_name_without_location():
    contact = resolve_contact(_request(customer_email="jane@example.com"), "Acme Dental")
    assert contact.review_link == "https://www.google.com/search?q=Acme%20Dental"
