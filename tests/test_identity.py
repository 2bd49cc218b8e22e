"""Identity token and access gate tests."""

from datetime import datetime, timedelta, timezone

from jose import jwt

from gamebox.core.config import settings
from gamebox.core.security import issue_identity_token, read_identity_token
from tests.conftest import TestingSessionLocal, auth, create_user


def test_token_round_trip():
    claims = read_identity_token(issue_identity_token(42, "a@test.com"))
    assert claims.user_id == 42
    assert claims.email == "a@test.com"


def test_expired_token_rejected():
    token = issue_identity_token(42, "a@test.com", expires_in=timedelta(seconds=-5))
    assert read_identity_token(token) is None


def test_wrong_secret_rejected():
    token = jwt.encode({"sub": "42", "email": "a@test.com"}, "not-the-secret", algorithm="HS256")
    assert read_identity_token(token) is None


def test_non_numeric_subject_rejected():
    exp = datetime.now(timezone.utc) + timedelta(minutes=5)
    token = jwt.encode({"sub": "someone@test.com", "exp": exp}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    assert read_identity_token(token) is None


def test_garbage_bearer_is_401(client):
    r = client.get("/notifications/me", headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401


def test_unknown_user_is_401(client):
    r = client.get("/notifications/me", headers={"Authorization": f"Bearer {issue_identity_token(99999999, 'x@test.com')}"})
    assert r.status_code == 401


def test_suspended_moderator_loses_admin_access(client):
    until = datetime.now(timezone.utc) + timedelta(days=1)
    with TestingSessionLocal() as db:
        suspended_mod = create_user(db, "SuspendedMod", suspended_until=until, email="MOD@test.com")
        headers = auth(suspended_mod)
    # Email matching is case-insensitive, so this user is a moderator, but suspended.
    r = client.get("/admin/reports", headers=headers)
    assert r.status_code == 403
    assert r.json()["detail"]["error"] == "account_suspended"
