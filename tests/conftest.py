import threading

import pytest
from fastapi.testclient import TestClient

from auth import hash_password
from database import MemoryStore, get_store
from main import app
from payments import DemoGateway, get_gateway

ADMIN_EMAIL = "manager@example.com"
ADMIN_PASSWORD = "flat-white"


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def gateway():
    return DemoGateway()


@pytest.fixture
def client(store, gateway):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client, store):
    store.insert("admin_users", {
        "email": ADMIN_EMAIL,
        "name": "Manager",
        "role": "admin",
        "password_hash": hash_password(ADMIN_PASSWORD),
    })
    resp = client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['data']['token']}"}


@pytest.fixture
def make_event(store):
    def _make(**overrides):
        event = {
            "title": "Acoustic Friday",
            "slug": "acoustic-friday",
            "event_date": "2030-06-07",
            "is_published": True,
            "max_attendees": 10,
            "current_attendees": 0,
            "ticket_price": 5.00,
        }
        event.update(overrides)
        return store.insert("events", event)
    return _make


class LockstepGateway(DemoGateway):
    """Holds every ``retrieve_intent`` until ``parties`` callers have reached it."""

    def __init__(self, parties):
        super().__init__()
        self.barrier = threading.Barrier(parties, timeout=5)

    def retrieve_intent(self, intent_id):
        intent = super().retrieve_intent(intent_id)
        self.barrier.wait()
        return intent


@pytest.fixture
def lockstep_gateway():
    return LockstepGateway(parties=2)
