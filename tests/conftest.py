"""Shared pytest fixtures for the AI Interior Designer backend tests."""

import hashlib
import hmac
import json
import os
import time
from pathlib import Path

# Must be set before app.main is imported: the engine and the SPA mount read them at import
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["PUBLIC_DIR"] = str(Path(__file__).parent / "public")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings, get_settings
from app.db.base import Base
from app.db.session import get_db
from app.main import app, rate_limit_counter
from app.models.user import Plan, User
from app.utils.auth import create_session_token, hash_password

JWT_SECRET = "test-jwt-secret"
WEBHOOK_SECRET = "whsec_test_secret"
YEARLY_PRICE_ID = "price_yearly"
MONTHLY_PRICE_ID = "price_monthly"
PASSWORD = "correct-horse"


def make_settings(**overrides) -> Settings:
    values = dict(
        database_url="sqlite://",
        frontend_url="http://frontend.test",
        jwt_secret=JWT_SECRET,
        environment="test",
        huggingface_api_key="hf-test-key",
        imgbb_api_key="imgbb-test-key",
        stripe_secret_key="sk_test_123",
        stripe_webhook_secret=WEBHOOK_SECRET,
        stripe_price_yearly=YEARLY_PRICE_ID,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def engine():
    """In-memory SQLite shared by every session of a test."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    try:
        yield test_engine
    finally:
        test_engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def test_settings() -> Settings:
    return make_settings()


@pytest.fixture
def test_client(engine, test_settings):
    """TestClient with the database and settings dependencies overridden.

    Startup events do not run, so no real database connection is attempted.
    """
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    rate_limit_counter.reset()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        rate_limit_counter.reset()


@pytest.fixture
def create_user(db_session):
    """Factory inserting a user directly in the database."""

    def _create_user(
        email: str = "alice@example.com",
        password: str = PASSWORD,
        name: str = "Alice",
        plan: Plan = Plan.FREE,
        generations_used: int = 0,
        **fields,
    ) -> User:
        user = User(
            email=email,
            hashed_password=hash_password(password),
            name=name,
            plan_tier=plan.value,
            generations_used=generations_used,
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _create_user


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_session_token(user, JWT_SECRET)}"}

    return _auth_headers


def reload_user(db_session, user_id: int) -> User:
    """Read a user as currently stored, bypassing the session's identity map."""
    db_session.expire_all()
    return db_session.query(User).filter(User.id == user_id).first()


def stripe_signature_header(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int = None) -> str:
    """Build a Stripe-Signature header the way Stripe signs webhook deliveries."""
    timestamp = timestamp or int(time.time())
    signed_payload = f"{timestamp}.{payload}"
    signature = hmac.new(secret.encode("utf-8"), signed_payload.encode("utf-8"), hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def stripe_event(event_type: str, obj: dict) -> str:
    return json.dumps({
        "id": "evt_test",
        "object": "event",
        "type": event_type,
        "data": {"object": obj},
    })
