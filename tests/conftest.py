"""Pytest fixtures."""

import os
import uuid

os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["ADMIN_EMAILS"] = "mod@test.com"
os.environ["MODERATION_STRIKE_LIMIT"] = "3"
os.environ["MODERATION_SUSPENSION_DAYS"] = "7"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

from gamebox.core.security import issue_identity_token
from gamebox.db.base import Base
from gamebox.models import Follow, ModerationStrike, Notification, Report, Review, SuspensionAppeal, User  # noqa: F401 - register for create_all
from gamebox.main import app
from gamebox.db.session import get_db

TEST_DATABASE_URL = "sqlite:///./test.db"
MODERATOR_EMAIL = "mod@test.com"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_user(db, name="User", is_private=False, suspended_until=None, email=None) -> User:
    """Insert a user with a unique email."""
    user = User(
        email=email or f"{name.lower()}_{uuid.uuid4().hex[:8]}@test.com",
        name=name,
        is_private=is_private,
        suspended_until=suspended_until,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_review(db, author: User, body="Great game") -> Review:
    review = Review(user_id=author.id, game_title="Hollow Knight", rating=5, body=body)
    db.add(review)
    db.commit()
    db.refresh(review)
    return review


def get_moderator(db) -> User:
    moderator = db.execute(select(User).where(User.email == MODERATOR_EMAIL)).scalar_one_or_none()
    if moderator:
        return moderator
    return create_user(db, name="Moderator", email=MODERATOR_EMAIL)


def auth(user: User) -> dict:
    """Authorization header for a user."""
    return {"Authorization": f"Bearer {issue_identity_token(user.id, user.email)}"}


@pytest.fixture(scope="session")
def setup_db():
    """Create tables once for test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(setup_db):
    """Test client with overridden DB."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db(setup_db):
    """Session for service-level tests."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
