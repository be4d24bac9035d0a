import os

# Must be set before the app modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CACHE_ENABLED", "false")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from hypothesis import settings

from app.main import app
from app.db.base import Base, import_models
from app.db.session import SessionLocal, engine
from tests.helpers.factories import make_user

# Register Hypothesis profiles
settings.register_profile("fast", max_examples=40, deadline=None)
settings.register_profile("thorough", max_examples=500, deadline=None)
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "fast"))

import_models()


def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


@pytest.fixture
def db():
    """Fresh schema and a session for each test."""
    reset_database()
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client(db):
    """Anonymous API client sharing the test database."""
    return TestClient(app)


@pytest.fixture
def owner(db):
    return make_user(db, "owner")


@pytest.fixture
def stranger(db):
    return make_user(db, "stranger")
