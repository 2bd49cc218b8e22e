"""Notification dedup engine and read surface tests."""

from datetime import datetime, timezone

from sqlalchemy import func, select

from gamebox.models.notification import Notification, NotificationType
from gamebox.services.notification_service import ensure_unread_notification
from tests.conftest import TestingSessionLocal, auth, create_review, create_user


def _count(db, **filters) -> int:
    stmt = select(func.count()).select_from(Notification)
    for key, value in filters.items():
        stmt = stmt.where(getattr(Notification, key) == value)
    return db.execute(stmt).scalar_one()


def test_second_event_is_deduplicated_while_unread(db):
    """Two identical events produce one unread notification."""
    recipient = create_user(db, "Recipient")
    actor = create_user(db, "Actor")
    review = create_review(db, recipient)

    first = ensure_unread_notification(db, recipient.id, actor.id, NotificationType.REPORT_RESOLVED, review_id=review.id)
    second = ensure_unread_notification(db, recipient.id, actor.id, NotificationType.REPORT_RESOLVED, review_id=review.id)
    db.commit()

    assert first.id == second.id
    assert _count(db, recipient_id=recipient.id) == 1


def test_read_notification_allows_a_fresh_one(db):
    """Once read, the same event creates a new unread notification."""
    recipient = create_user(db, "Recipient")
    actor = create_user(db, "Actor")
    review = create_review(db, recipient)

    first = ensure_unread_notification(db, recipient.id, actor.id, NotificationType.REVIEW_MODERATED, review_id=review.id)
    first.read_at = datetime.now(timezone.utc)
    db.commit()

    second = ensure_unread_notification(db, recipient.id, actor.id, NotificationType.REVIEW_MODERATED, review_id=review.id)
    db.commit()

    assert second.id != first.id
    assert _count(db, recipient_id=recipient.id) == 2


def test_different_type_or_key_is_not_deduplicated(db):
    """Type and correlation keys are part of the dedup tuple."""
    recipient = create_user(db, "Recipient")
    actor = create_user(db, "Actor")
    review_a = create_review(db, recipient)
    review_b = create_review(db, recipient)

    ensure_unread_notification(db, recipient.id, actor.id, NotificationType.REPORT_RESOLVED, review_id=review_a.id)
    ensure_unread_notification(db, recipient.id, actor.id, NotificationType.REPORT_RESOLVED, review_id=review_b.id)
    ensure_unread_notification(db, recipient.id, actor.id, NotificationType.REVIEW_MODERATED, review_id=review_a.id)
    db.commit()

    assert _count(db, recipient_id=recipient.id) == 3


def test_list_and_mark_read(client):
    """The read surface lists, counts unread and marks notifications read."""
    with TestingSessionLocal() as db:
        recipient = create_user(db, "Recipient")
        actor = create_user(db, "Actor")
        review = create_review(db, recipient)
        n1 = ensure_unread_notification(db, recipient.id, actor.id, NotificationType.REPORT_RESOLVED, review_id=review.id)
        ensure_unread_notification(db, recipient.id, actor.id, NotificationType.REVIEW_MODERATED, review_id=review.id)
        db.commit()
        n1_id = n1.id
        headers = auth(recipient)

    r = client.get("/notifications/me", headers=headers)
    assert r.status_code == 200
    assert r.json()["unread_count"] == 2
    assert len(r.json()["items"]) == 2

    r = client.patch(f"/notifications/{n1_id}/read", headers=headers)
    assert r.json() == {"updated": True}
    r = client.patch(f"/notifications/{n1_id}/read", headers=headers)
    assert r.json() == {"updated": False}
    assert client.get("/notifications/me", headers=headers).json()["unread_count"] == 1

    r = client.patch("/notifications/read-all", headers=headers)
    assert r.json() == {"updated_count": 1}
    assert client.get("/notifications/me", headers=headers).json()["unread_count"] == 0


def test_cannot_mark_someone_elses_notification(client):
    """Marking another user's notification read changes nothing."""
    with TestingSessionLocal() as db:
        recipient = create_user(db, "Recipient")
        actor = create_user(db, "Actor")
        review = create_review(db, recipient)
        n = ensure_unread_notification(db, recipient.id, actor.id, NotificationType.REPORT_RESOLVED, review_id=review.id)
        db.commit()
        n_id = n.id
        actor_headers = auth(actor)

    r = client.patch(f"/notifications/{n_id}/read", headers=actor_headers)
    assert r.json() == {"updated": False}


def test_notifications_require_auth(client):
    r = client.get("/notifications/me")
    assert r.status_code == 401
