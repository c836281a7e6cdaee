import pytest

from app.models import CrmIntegration, Location, ReviewRequest, WebhookLog
from conftest import make_template

API_KEY = "crm-key-123456"


@pytest.fixture
def template(db, user):
    return make_template(db, user, template_type="sms", subject=None, content="Hi {{customerName}} {{reviewLink}}")


@pytest.fixture
def integration(db, user, template):
    integration = CrmIntegration(
        owner_id=user.id,
        name="HubSpot",
        crm_type="hubspot",
        api_key=API_KEY,
        trigger_event="appointment_completed",
        template_id=template.id,
        delay_hours=2,
        active=True,
        requests_sent=0,
    )
    db.add(integration)
    db.commit()
    db.refresh(integration)
    return integration


def _trigger(client, integration, key=API_KEY, **event):
    body = {"event": "appointment_completed", "customer_name": "Jane Doe", "customer_phone": "+15551112222"}
    body.update(event)
    return client.post(
        f"/api/crm-integrations/{integration.id}/trigger",
        json=body,
        headers={"X-API-Key": key},
    )


def test_trigger_creates_and_sends_request(client, db, integration, sms_adapter):
    resp = _trigger(client, integration)

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "sent"
    request = db.get(ReviewRequest, body["review_request_id"])
    assert request.status == "sent"
    assert request.crm_integration_id == integration.id
    assert request.template_id == integration.template_id
    assert sms_adapter.sent[0]["body"].startswith("Hi Jane Doe https://")

    db.refresh(integration)
    assert integration.requests_sent == 1
    assert integration.last_sync is not None


def test_trigger_delivery_failure_reported(client, db, integration, sms_adapter):
    sms_adapter.success = False

    body = _trigger(client, integration).json()

    assert body["status"] == "failed"
    assert "400" in body["error"]
    db.refresh(integration)
    assert integration.requests_sent == 0
    assert db.get(ReviewRequest, body["review_request_id"]).status == "failed"


def test_trigger_with_wrong_key_is_403(client, db, integration, sms_adapter):
    resp = _trigger(client, integration, key="nope")
    assert resp.status_code == 403
    assert sms_adapter.sent == []
    assert db.query(ReviewRequest).count() == 0


def test_trigger_unknown_integration_is_404(client, integration):
    resp = client.post(
        "/api/crm-integrations/999/trigger",
        json={"customer_name": "Jane", "customer_email": "jane@example.com"},
        headers={"X-API-Key": API_KEY},
    )
    assert resp.status_code == 404


def test_non_matching_event_is_ignored(client, db, integration, sms_adapter):
    body = _trigger(client, integration, event="invoice_paid").json()

    assert body["status"] == "ignored"
    assert sms_adapter.sent == []
    assert db.query(ReviewRequest).count() == 0


def test_inactive_integration_conflicts(client, db, integration):
    integration.active = False
    db.commit()

    resp = _trigger(client, integration)

    assert resp.status_code == 409
    assert db.query(ReviewRequest).count() == 0


def test_trigger_requires_contact(client, integration):
    resp = _trigger(client, integration, customer_phone=None)
    assert resp.status_code == 422


def test_trigger_rejects_foreign_location(client, db, integration, other_user):
    foreign = Location(owner_id=other_user.id, name="Elsewhere")
    db.add(foreign)
    db.commit()

    resp = _trigger(client, integration, location_id=foreign.id)

    assert resp.status_code == 404
    assert db.query(ReviewRequest).count() == 0


def test_triggers_are_logged(client, db, integration):
    _trigger(client, integration)
    log = db.query(WebhookLog).one()
    assert log.platform == "crm:hubspot"
    assert log.event_type == "appointment_completed"
    assert log.payload["integration_id"] == integration.id


def test_test_endpoint_runs_even_when_inactive(client, db, integration, auth_headers, sms_adapter):
    integration.active = False
    db.commit()

    resp = client.post(
        f"/api/crm-integrations/{integration.id}/test",
        json={"customer_name": "Test Person", "customer_phone": "+15550009999"},
        headers=auth_headers,
    )

    assert resp.status_code == 200
    assert resp.json()["status"] == "sent"
    assert sms_adapter.sent[0]["to"] == "+15550009999"


def test_test_endpoint_requires_owner(client, integration, other_headers):
    resp = client.post(
        f"/api/crm-integrations/{integration.id}/test",
        json={"customer_name": "Test Person", "customer_phone": "+15550009999"},
        headers=other_headers,
    )
    assert resp.status_code == 403


# ── CRUD ──

def test_create_and_list(client, auth_headers, template):
    resp = client.post("/api/crm-integrations", json={
        "name": "Zoho",
        "crm_type": "zoho",
        "api_key": "zoho-key-0001",
        "trigger_event": "job_closed",
        "template_id": template.id,
    }, headers=auth_headers)

    assert resp.status_code == 201
    created = resp.json()
    assert created["delay_hours"] == 2
    assert created["active"] is True
    assert created["requests_sent"] == 0

    listed = client.get("/api/crm-integrations", headers=auth_headers).json()
    assert [i["name"] for i in listed] == ["Zoho"]


def test_create_with_foreign_template_is_400(client, db, other_user, auth_headers):
    foreign = make_template(db, other_user)
    resp = client.post("/api/crm-integrations", json={
        "name": "Zoho", "crm_type": "zoho", "api_key": "zoho-key-0001",
        "trigger_event": "job_closed", "template_id": foreign.id,
    }, headers=auth_headers)
    assert resp.status_code == 400


def test_update_and_delete(client, integration, auth_headers):
    resp = client.patch(
        f"/api/crm-integrations/{integration.id}",
        json={"active": False, "delay_hours": 0},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["active"] is False
    assert resp.json()["delay_hours"] == 0

    assert client.delete(f"/api/crm-integrations/{integration.id}", headers=auth_headers).status_code == 204
    assert client.get(f"/api/crm-integrations/{integration.id}", headers=auth_headers).status_code == 404
