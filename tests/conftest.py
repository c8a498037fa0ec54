"""Pytest configuration and fixtures."""

import os
from datetime import date, datetime, timezone

# Set test environment variables BEFORE importing anything that loads settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dst_booking.context import WorkflowContext
from dst_booking.database import Base, get_db
from dst_booking.main import app
from dst_booking.models import (
    ApplicationStatus,
    ClientSubscription,
    Offer,
    OfferType,
    SessionOperator,
    SessionStatus,
    ShootingSession,
)

FIXED_NOW = datetime(2025, 4, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    """A fresh in-memory database shared by every connection of one test."""
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
    yield session
    session.close()


@pytest.fixture
def ctx(db):
    """Workflow context with a frozen clock."""
    return WorkflowContext(db=db, clock=lambda: FIXED_NOW)


@pytest.fixture
def client(session_factory):
    """HTTP client whose requests use the test database."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============================================================================
# Row factories
# ============================================================================


@pytest.fixture
def make_offer(db):
    def _make(**overrides) -> Offer:
        data = {
            "name": "Abonnement 10 sessions",
            "offer_type": OfferType.ABONNEMENT.value,
            "nb_sessions": 10,
            "sessions_consumed": 0,
        }
        data.update(overrides)
        offer = Offer(**data)
        db.add(offer)
        db.commit()
        db.refresh(offer)
        return offer

    return _make


@pytest.fixture
def make_session(db):
    def _make(**overrides) -> ShootingSession:
        data = {
            "client_id": "c1",
            "date": date(2025, 5, 1),
            "region_id": "idf",
            "status": SessionStatus.CONFIRMED.value,
            "marketplace_visible": True,
            "setup_ids": ["s1"],
        }
        data.update(overrides)
        session = ShootingSession(**data)
        db.add(session)
        db.commit()
        db.refresh(session)
        return session

    return _make


@pytest.fixture
def make_application(db):
    def _make(session: ShootingSession, operator_id: str, **overrides) -> SessionOperator:
        data = {
            "session_id": session.id,
            "operator_id": operator_id,
            "status": ApplicationStatus.PENDING.value,
            "applied_at": FIXED_NOW,
        }
        data.update(overrides)
        application = SessionOperator(**data)
        db.add(application)
        db.commit()
        db.refresh(application)
        return application

    return _make


@pytest.fixture
def make_subscription(db):
    def _make(offer: Offer, client_id: str = "c1", **overrides) -> ClientSubscription:
        data = {
            "client_id": client_id,
            "offer_id": offer.id,
            "subscription_date": date(2025, 1, 1),
        }
        data.update(overrides)
        subscription = ClientSubscription(**data)
        db.add(subscription)
        db.commit()
        db.refresh(subscription)
        return subscription

    return _make
