from app.services.template_renderer import (
    DEFAULT_EMAIL_TEMPLATE, DEFAULT_SMS_TEMPLATE,
    find_placeholders, find_unresolved, render_template, strip_tags,
)


VARIABLES = {
    "customerName": "Jane",
    "businessName": "Acme Dental",
    "reviewLink": "https://example.com/r",
}


def test_all_placeholders_resolved_leaves_no_braces():
    for template in (DEFAULT_EMAIL_TEMPLATE, DEFAULT_SMS_TEMPLATE):
        rendered = render_template(template, VARIABLES)
        assert "{{" not in rendered
        assert "Jane" in rendered
        assert "https://example.com/r" in rendered


def test_every_occurrence_is_replaced():
    rendered = render_template("{{businessName}} / {{businessName}}", VARIABLES)
    assert rendered == "Acme Dental / Acme Dental"


def test_whitespace_inside_braces_is_tolerated():
    assert render_template("Hi {{ customerName }}!", VARIABLES) == "Hi Jane!"


def test_unknown_placeholder_passes_through():
    rendered = render_template("Hi {{customerName}}, code {{couponCode}}", VARIABLES)
    assert rendered == "Hi Jane, code {{couponCode}}"
    assert find_unresolved("Hi {{customerName}}, code {{couponCode}}", VARIABLES) == ["couponCode"]


def test_rendering_is_idempotent():
    once = render_template(DEFAULT_EMAIL_TEMPLATE, VARIABLES)
    assert render_template(once, VARIABLES) == once


def test_find_placeholders_keeps_first_seen_order():
    assert find_placeholders("{{b}} {{a}} {{b}}") == ["b", "a"]


def test_strip_tags_for_plain_text():
    assert strip_tags('<p>Hi <a href="x">there</a></p>') == "Hi there"
