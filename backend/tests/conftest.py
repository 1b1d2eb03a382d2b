"""Shared test fixtures for the witness registry test suite.

Tests run against a throwaway SQLite database in a temporary directory,
selected through environment variables before any app import. Tables are
created on app import; every test starts from empty tables.

Set TEST_DATABASE_URL to run the suite against PostgreSQL instead.
"""

import os
import tempfile
from typing import Optional

# Use the test database and plain-text logs before any app imports.
_TMP_DIR = tempfile.mkdtemp(prefix="witness-tests-")
os.environ["DATABASE_URL"] = os.environ.get(
    "TEST_DATABASE_URL",
    f"sqlite:///{os.path.join(_TMP_DIR, 'witness_test.db')}",
)
os.environ["ENVIRONMENT"] = "development"
os.environ["LOG_FORMAT"] = "text"
os.environ["SEED_DEMO_DATA"] = "false"

import pytest
from sqlalchemy import delete
from fastapi.testclient import TestClient

from witness.core.actor import Actor
from witness.database import get_db, SessionLocal
from witness.main import app
from witness.models import AuditLog, ContributorSession, Incident, Perpetrator, Proposal, Victim
from witness.services import SessionService

# Children before parents.
_CLEAN_MODELS = [AuditLog, Proposal, Incident, Victim, Perpetrator, ContributorSession]


@pytest.fixture(autouse=True)
def _clean_tables():
    """Empty all tables before each test for isolation.

    Runs before the test (not after) so test failures leave data
    available for debugging.
    """
    db = SessionLocal()
    try:
        for model in _CLEAN_MODELS:
            db.execute(delete(model))
        db.commit()
    finally:
        db.close()
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def client(db):
    """FastAPI TestClient with the DB dependency overridden to use the test session."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_session(db, session_id: str = "session-a", trust_score: Optional[int] = None, now: Optional[int] = None) -> Actor:
    """Register a contributor session and return an Actor for it.

    ``trust_score`` overrides the initial score of 50.
    """
    SessionService(db).upsert(session_id, f"fp-{session_id}", "hash-" + session_id, now=now)
    if trust_score is not None:
        session = db.get(ContributorSession, session_id)
        session.trust_score = trust_score
        db.commit()
    return Actor(session_id=session_id, ip_hash="hash-" + session_id, user_agent="pytest")


def session_headers(session_id: str = "session-a") -> dict:
    return {"X-Session-ID": session_id}


def make_perpetrator(name: str = "Reza Farhadi", **overrides) -> dict:
    """Factory for perpetrator field payloads."""
    fields = {
        "name": name,
        "aliases": ["Farhadi"],
        "organization": "IRGC",
        "unit": "Tehran Unit 3",
        "position": "Commander",
        "rank": "Colonel",
        "status": "active",
        "last_known_province": "Tehran",
    }
    fields.update(overrides)
    return fields


def make_victim(name: str = "Sara Kamali", **overrides) -> dict:
    """Factory for victim field payloads."""
    fields = {
        "name": name,
        "age": 24,
        "hometown": "Isfahan",
        "status": "murdered",
        "incident_date": "2025-10-03",
        "incident_province": "Isfahan",
        "circumstances": "Protest response at central square.",
    }
    fields.update(overrides)
    return fields


def make_incident(perpetrator_id: str, victim_ids=None, **overrides) -> dict:
    """Factory for incident field payloads."""
    fields = {
        "perpetrator_id": perpetrator_id,
        "victim_ids": victim_ids or [],
        "date": "2025-10-03",
        "location": "Isfahan - central square",
        "description": "Security forces dispersed protesters using live fire.",
        "action_type": "killing",
    }
    fields.update(overrides)
    return fields
