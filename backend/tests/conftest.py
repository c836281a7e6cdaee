import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.security import create_access_token, get_password_hash
from app.main import app
from app.models import Location, ReviewRequest, ReviewTemplate, User
from app.services.delivery import get_email_adapter, get_sms_adapter


class FakeEmailAdapter:
    def __init__(self, success=True, error="SendGrid delivery failed: returned 401: unauthorized"):
        self.success = success
        self.error = error
        self.sent = []

    def send(self, to, subject, html):
        self.sent.append({"to": to, "subject": subject, "html": html})
        if self.success:
            return {"success": True, "result": {"status_code": 202, "message_id": "msg-1"}}
        return {"success": False, "error": self.error}


class FakeSmsAdapter:
    def __init__(self, success=True, error="Twilio delivery failed: returned 400: bad number"):
        self.success = success
        self.error = error
        self.sent = []

    def send(self, to, body):
        self.sent.append({"to": to, "body": body})
        if self.success:
            return {"success": True, "result": {"sid": "SM123", "status": "queued"}}
        return {"success": False, "error": self.error}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def email_adapter():
    return FakeEmailAdapter()


@pytest.fixture
def sms_adapter():
    return FakeSmsAdapter()


@pytest.fixture
def client(session_factory, email_adapter, sms_adapter):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_adapter] = lambda: email_adapter
    app.dependency_overrides[get_sms_adapter] = lambda: sms_adapter
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, username="owner", business_name="Acme Dental"):
    user = User(
        email=f"{username}@example.com",
        username=username,
        full_name=f"{username.title()} Person",
        business_name=business_name,
        hashed_password=get_password_hash("password123"),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db):
    return make_user(db)


@pytest.fixture
def other_user(db):
    return make_user(db, username="intruder", business_name="Other Biz")


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def other_headers(other_user):
    return {"Authorization": f"Bearer {create_access_token(other_user.id)}"}


@pytest.fixture
def location(db, user):
    loc = Location(owner_id=user.id, name="Acme Dental - Main St", google_place_id="abc")
    db.add(loc)
    db.commit()
    db.refresh(loc)
    return loc


def make_request(db, owner, **fields):
    data = {"customer_name": "Jane Doe", "status": "pending"}
    data.update(fields)
    request = ReviewRequest(owner_id=owner.id, **data)
    db.add(request)
    db.commit()
    db.refresh(request)
    return request


def make_template(db, owner, **fields):
    data = {
        "name": "Thanks",
        "template_type": "email",
        "subject": "Thanks from {{businessName}}",
        "content": "<p>Hi {{customerName}}, review us at {{reviewLink}}</p>",
        "is_default": False,
    }
    data.update(fields)
    template = ReviewTemplate(owner_id=owner.id, **data)
    db.add(template)
    db.commit()
    db.refresh(template)
    return template
