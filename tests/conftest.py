"""Shared fixtures and factories for the booking test-suite."""

from __future__ import annotations

import copy

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from booking_schemas import BookingDraft
from persistence.db import init_db

SCENARIO_A = {
    "serviceType": "distance",
    "pickup": {"address": "BCN Airport", "placeId": "p1", "type": "airport"},
    "dropoff": {"address": "Hotel X", "placeId": "p2"},
    "dateTime": {"date": "2025-06-01", "time": "14:00"},
    "passengers": {"count": 2, "luggage": 1, "childSeats": 0},
    "selectedVehicle": {"id": "tesla-model-3", "basePrice": 35, "pricePerKm": 1.2, "pricePerHour": 45},
    "extras": {"meetAndGreet": False, "additionalStops": []},
}

CONTACT = {
    "firstName": "Jordi",
    "lastName": "Serra",
    "email": "jordi@example.com",
    "phone": "612345678",
}


@pytest.fixture
def make_draft():
    """Factory: scenario A draft, with top-level keys overridden by ``overrides``."""

    def _make(with_contact: bool = False, **overrides) -> BookingDraft:
        data = copy.deepcopy(SCENARIO_A)
        if with_contact:
            data["passengerDetails"] = dict(CONTACT)
        data.update(overrides)
        return BookingDraft.model_validate(data)

    return _make


@pytest.fixture
def submission(make_draft):
    """A complete, payable distance booking in wire (camelCase) form."""
    draft = make_draft(with_contact=True, distance=20)
    return draft.model_dump(mode="json", by_alias=True)


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = Session()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db_session, monkeypatch):
    from fastapi.testclient import TestClient

    import config
    from app import app
    from persistence.db import get_db

    monkeypatch.setattr(config, "APP_URL", "")
    monkeypatch.setattr(config, "APP_ENV", "development")
    monkeypatch.setattr(config, "STRIPE_WEBHOOK_SECRET", None)
    app.dependency_overrides[get_db] = lambda: db_session
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def fake_stripe(monkeypatch):
    """Records Checkout Session calls instead of hitting Stripe."""
    import stripe

    calls = {"create": [], "retrieve": []}
    sessions = {}

    def _create(**kwargs):
        session_id = f"cs_test_{len(calls['create']) + 1}"
        calls["create"].append(kwargs)
        sessions[session_id] = {
            "id": session_id,
            "url": f"https://checkout.stripe.test/{session_id}",
            "payment_status": "unpaid",
        }
        return sessions[session_id]

    def _retrieve(session_id, **kwargs):
        calls["retrieve"].append(session_id)
        return sessions[session_id]

    monkeypatch.setattr(stripe.checkout.Session, "create", staticmethod(_create))
    monkeypatch.setattr(stripe.checkout.Session, "retrieve", staticmethod(_retrieve))
    calls["sessions"] = sessions
    return calls
