"""Suspension appeal tests."""

from datetime import datetime, timedelta, timezone

import pytest

from gamebox.core.errors import InvalidOperationError
from gamebox.core.utils import as_utc
from gamebox.models.suspension_appeal import SuspensionAppeal, SuspensionAppealStatus
from gamebox.models.user import User
from gamebox.services.appeal_service import create_appeal, transition_appeal
from tests.conftest import TestingSessionLocal, auth, create_user, get_moderator


def _suspended_user(days=5):
    until = datetime.now(timezone.utc) + timedelta(days=days)
    with TestingSessionLocal() as db:
        user = create_user(db, "Suspended", suspended_until=until)
        return user.id, auth(user), auth(get_moderator(db))


def _file_appeal(client, headers, message="Please reconsider"):
    r = client.post("/appeals/me", headers=headers, json={"message": message})
    assert r.status_code == 201
    return r.json()


def test_suspended_user_can_appeal(client):
    user_id, headers, _ = _suspended_user()
    data = _file_appeal(client, headers, message="  I was joking  ")
    assert data["user_id"] == user_id
    assert data["status"] == "OPEN"
    assert data["message"] == "I was joking"


def test_appeal_without_body(client):
    _, headers, _ = _suspended_user()
    r = client.post("/appeals/me", headers=headers)
    assert r.status_code == 201
    assert r.json()["message"] is None


def test_active_user_cannot_appeal(client):
    with TestingSessionLocal() as db:
        headers = auth(create_user(db, "Fine"))
    r = client.post("/appeals/me", headers=headers, json={"message": "hi"})
    assert r.status_code == 400
    assert r.json()["detail"] == "account_not_suspended"


def test_expired_suspension_cannot_appeal(client):
    past = datetime.now(timezone.utc) - timedelta(days=1)
    with TestingSessionLocal() as db:
        headers = auth(create_user(db, "Expired", suspended_until=past))
    r = client.post("/appeals/me", headers=headers, json={})
    assert r.status_code == 400


def test_appeal_message_too_long_422(client):
    _, headers, _ = _suspended_user()
    r = client.post("/appeals/me", headers=headers, json={"message": "x" * 501})
    assert r.status_code == 422


def test_list_shows_live_suspension(client):
    """The queue reflects the user's current suspended_until, not a snapshot."""
    user_id, headers, mod_headers = _suspended_user()
    appeal = _file_appeal(client, headers)

    later = datetime.now(timezone.utc) + timedelta(days=30)
    with TestingSessionLocal() as db:
        db.get(User, user_id).suspended_until = later
        db.commit()

    r = client.get("/admin/appeals", headers=mod_headers)
    assert r.status_code == 200
    item = next(i for i in r.json()["items"] if i["id"] == appeal["id"])
    assert item["user"]["id"] == user_id
    listed = as_utc(datetime.fromisoformat(item["suspended_until"]))
    assert abs(listed - later) < timedelta(seconds=1)


def test_resolve_appeal_leaves_suspension(client):
    """Deciding an appeal never lifts the suspension by itself."""
    user_id, headers, mod_headers = _suspended_user()
    appeal = _file_appeal(client, headers)
    with TestingSessionLocal() as db:
        before = db.get(User, user_id).suspended_until

    r = client.patch(f"/admin/appeals/{appeal['id']}", headers=mod_headers, json={"status": "RESOLVED"})
    assert r.status_code == 200
    assert r.json() == {"ok": True, "status": "RESOLVED"}

    with TestingSessionLocal() as db:
        assert db.get(User, user_id).suspended_until == before
        stored = db.get(SuspensionAppeal, appeal["id"])
        assert stored.status == SuspensionAppealStatus.RESOLVED
        assert stored.resolved_by_id == get_moderator(db).id
        assert stored.resolved_at is not None


def test_rejected_appeal_is_immutable(client):
    _, headers, mod_headers = _suspended_user()
    appeal = _file_appeal(client, headers)

    r = client.patch(f"/admin/appeals/{appeal['id']}", headers=mod_headers, json={"status": "REJECTED"})
    assert r.status_code == 200
    r = client.patch(f"/admin/appeals/{appeal['id']}", headers=mod_headers, json={"status": "RESOLVED"})
    assert r.status_code == 400

    listed = client.get("/admin/appeals", headers=mod_headers, params={"status": "rejected"}).json()
    assert listed["status"] == "REJECTED"
    assert any(i["id"] == appeal["id"] for i in listed["items"])


def test_transition_missing_appeal_404(client):
    _, _, mod_headers = _suspended_user()
    r = client.patch("/admin/appeals/99999999", headers=mod_headers, json={"status": "RESOLVED"})
    assert r.status_code == 404


def test_appeal_queue_requires_moderator(client):
    _, headers, _ = _suspended_user()
    assert client.get("/admin/appeals", headers=headers).status_code == 403


def test_stale_copy_cannot_overwrite_decided_appeal(setup_db):
    with TestingSessionLocal() as db:
        user_id = create_user(db, "Appellant").id
        moderator_id = get_moderator(db).id
        appeal_id = create_appeal(db, user_id, "please").id

    stale = TestingSessionLocal()
    try:
        assert stale.get(SuspensionAppeal, appeal_id).status == SuspensionAppealStatus.OPEN

        with TestingSessionLocal() as db:
            transition_appeal(db, appeal_id, SuspensionAppealStatus.REJECTED, moderator_id)

        with pytest.raises(InvalidOperationError):
            transition_appeal(stale, appeal_id, SuspensionAppealStatus.RESOLVED, moderator_id)
    finally:
        stale.close()

    with TestingSessionLocal() as db:
        assert db.get(SuspensionAppeal, appeal_id).status == SuspensionAppealStatus.REJECTED
