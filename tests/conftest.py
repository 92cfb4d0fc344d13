import os

# Settings are cached on first use; point them at test values before any
# application module is imported.
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-for-the-cooking-assistant-suite")
os.environ.setdefault("ANTHROPIC_API_KEY", "test-key")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from config.database import Base
import models.entities  # noqa: F401  (registers tables on Base.metadata)
from models.repositories import ProfileRepository


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
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
def make_profile(db):
    """Create a profile directly, skipping password hashing."""
    repo = ProfileRepository(db)

    def _make(email: str, full_name: str = None, username: str = None):
        profile = repo.create(email, "unused-hash", full_name=full_name)
        if username:
            profile = repo.update(profile, Username=username)
        return profile

    return _make
