import os

# Must be set before campus_events is imported; the engine is built at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest
from fastapi.testclient import TestClient

from campus_events.core.security import create_access_token, get_password_hash
from campus_events.db.database import Base, SessionLocal, engine, get_db
from campus_events.main import app
from campus_events.models import (
    Event, EventCategory, EventStatus, Organization, OrganizerStatus, TicketType, User, UserRole
)

_sequence = count(1)

# PBKDF2 is slow, so every fixture user shares one precomputed hash
PASSWORD = "secret123"
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_organization(db):
    def _make(**kwargs):
        n = next(_sequence)
        data = {"name": f"Organization {n}", "description": "Student club", "is_active": True}
        data.update(kwargs)
        organization = Organization(**data)
        db.add(organization)
        db.commit()
        db.refresh(organization)
        return organization
    return _make


@pytest.fixture
def make_user(db):
    def _make(role=UserRole.STUDENT, **kwargs):
        n = next(_sequence)
        data = {
            "email": f"user{n}@campus.edu",
            "hashed_password": PASSWORD_HASH,
            "first_name": "Test",
            "last_name": f"User{n}",
            "role": role,
            "is_approved": True,
            "is_active": True,
        }
        if role == UserRole.ORGANIZER:
            data["organizer_status"] = OrganizerStatus.APPROVED
        data.update(kwargs)
        user = User(**data)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def organization(make_organization):
    return make_organization()


@pytest.fixture
def student(make_user):
    return make_user(UserRole.STUDENT, student_id="S-1001")


@pytest.fixture
def other_student(make_user):
    return make_user(UserRole.STUDENT, student_id="S-1002")


@pytest.fixture
def organizer(make_user, organization):
    return make_user(UserRole.ORGANIZER, organization_id=organization.id)


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN)


@pytest.fixture
def make_event(db):
    def _make(organizer=None, **kwargs):
        data = {
            "title": "Hackathon",
            "description": "24 hour build",
            "date": datetime.now(timezone.utc) + timedelta(days=7),
            "start_time": "09:00",
            "end_time": "17:00",
            "location": "Main Hall",
            "category": EventCategory.ACADEMIC,
            "ticket_type": TicketType.FREE,
            "ticket_price": 0,
            "capacity": 50,
            "status": EventStatus.PUBLISHED,
            "is_approved": True,
            "tags": ["tech"],
        }
        if organizer is not None:
            data["organization_id"] = organizer.organization_id
            data["created_by_id"] = organizer.id
        data.update(kwargs)
        event = Event(**data)
        db.add(event)
        db.commit()
        db.refresh(event)
        return event
    return _make


@pytest.fixture
def event(make_event, organizer):
    return make_event(organizer)


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token(user.id, role=user.role.value)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def password():
    return PASSWORD
