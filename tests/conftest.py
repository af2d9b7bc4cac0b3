"""
Shared fixtures for the chat service test suite.

Unit tests run Beanie on an in-memory ``mongomock_motor`` client. Integration
tests start the full application inside ``TestClient`` (one event loop for
every HTTP request and WebSocket session) with the database connection
swapped for the same in-memory client.
"""

import os

os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017/study_notes_test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("ALLOWED_HOSTS", '["*"]')
os.environ.setdefault("MESSAGE_SWEEP_ENABLED", "false")

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import mongomock_motor
import pytest
import pytest_asyncio
from beanie import init_beanie
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketState

from studynotes_chat.core.auth import Identity, create_access_token
from studynotes_chat.core.config import Settings
from studynotes_chat.core.database import Database
from studynotes_chat.main import create_app
from studynotes_chat.models import get_document_models
from studynotes_chat.models.user import User, UserRole


class FrozenClock:
    """Manually advanced clock injected into the store and service."""

    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2024, 5, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class RecordingPublisher:
    """Captures every event a service publishes."""

    def __init__(self):
        self.events: List[Dict[str, Any]] = []

    async def publish(self, event, data, exclude_user_id=None) -> None:
        self.events.append({"event": event, "data": data, "exclude_user_id": exclude_user_id})

    @property
    def names(self) -> List[str]:
        return [e["event"].value for e in self.events]


class FakeWebSocket:
    """Minimal stand-in for ``fastapi.WebSocket`` used by hub unit tests."""

    def __init__(self, fail_on_send: bool = False):
        self.application_state = WebSocketState.CONNECTING
        self.sent: List[Dict[str, Any]] = []
        self.closed_with: Optional[int] = None
        self.fail_on_send = fail_on_send

    async def accept(self) -> None:
        self.application_state = WebSocketState.CONNECTED

    async def send_json(self, data: Dict[str, Any]) -> None:
        if self.fail_on_send:
            raise RuntimeError("connection reset")
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: Optional[str] = None) -> None:
        self.closed_with = code
        self.application_state = WebSocketState.DISCONNECTED

    def events(self) -> List[str]:
        return [frame["event"] for frame in self.sent]


def make_identity(user_id: str, name: str, role: UserRole = UserRole.USER) -> Identity:
    return Identity(id=user_id, name=name, role=role)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        mongodb_url="mongodb://localhost:27017/study_notes_test",
        jwt_secret_key="test-secret-key",
        allowed_hosts=["*"],
        message_sweep_enabled=False,
    )


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest_asyncio.fixture(scope="function")
async def init_test_db():
    """Initialize Beanie with mongomock for testing."""
    client = mongomock_motor.AsyncMongoMockClient()
    await init_beanie(database=client.test_db, document_models=get_document_models())
    yield client.test_db
    client.close()


@pytest.fixture
def alice() -> Identity:
    return make_identity("user-alice", "Alice")


@pytest.fixture
def bob() -> Identity:
    return make_identity("user-bob", "Bob")


@pytest.fixture
def admin() -> Identity:
    return make_identity("user-admin", "Admin User", UserRole.ADMIN)


# ---------------------------------------------------------------------------
# Application fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def app(settings, monkeypatch):
    """Full application whose lifespan connects to an in-memory database."""
    mongo = mongomock_motor.AsyncMongoMockClient()
    app = create_app(settings)

    async def connect_to_mongo(app_settings=None):
        app.state.connected_with = app_settings
        await init_beanie(database=mongo.test_db, document_models=get_document_models())

    monkeypatch.setattr(Database, "connect_to_mongo", connect_to_mongo)
    return app


@pytest.fixture
def client(app):
    """FastAPI test client with the lifespan running."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def seed_user(client, settings):
    """Create a user inside the application's event loop and return (user, token)."""

    def _seed(name: str, email: str, role: UserRole = UserRole.USER, is_active: bool = True):
        user = User(name=name, email=email, role=role, is_active=is_active)
        client.portal.call(user.insert)
        return user, create_access_token(user.id, settings=settings)

    return _seed


@pytest.fixture
def alice_account(seed_user):
    return seed_user("Alice", "alice@studyhub.com")


@pytest.fixture
def bob_account(seed_user):
    return seed_user("Bob", "bob@studyhub.com")


@pytest.fixture
def admin_account(seed_user):
    return seed_user("Admin User", "admin@studyhub.com", UserRole.ADMIN)


def auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
