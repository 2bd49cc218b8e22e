"""Strike ledger tests."""

from datetime import datetime, timezone

from sqlalchemy import func, select

from gamebox.models.moderation_strike import ModerationStrike
from gamebox.services import strike_service
from gamebox.services.strike_service import (
    active_strike_count,
    active_strike_counts,
    issue_or_renew_strike,
    revoke_strike,
)
from tests.conftest import create_review, create_user, get_moderator


def _strike_rows(db, review_id) -> int:
    return db.execute(
        select(func.count()).select_from(ModerationStrike).where(ModerationStrike.review_id == review_id)
    ).scalar_one()


def test_issue_is_idempotent_per_review(db):
    """Issuing twice for the same review keeps a single strike."""
    author = create_user(db, "Author")
    moderator = get_moderator(db)
    review = create_review(db, author)

    issue_or_renew_strike(db, review.id, author.id, moderator.id)
    issue_or_renew_strike(db, review.id, author.id, moderator.id)
    db.commit()

    assert _strike_rows(db, review.id) == 1
    assert active_strike_count(db, author.id) == 1


def test_revoke_then_renew_reactivates_same_row(db):
    """A revoked strike is un-revoked on renew, not duplicated."""
    author = create_user(db, "Author")
    moderator = get_moderator(db)
    other_moderator = create_user(db, "OtherMod")
    review = create_review(db, author)

    strike = issue_or_renew_strike(db, review.id, author.id, moderator.id)
    strike_id = strike.id
    assert revoke_strike(db, review.id, datetime.now(timezone.utc)) is True
    db.commit()
    assert active_strike_count(db, author.id) == 0

    renewed = issue_or_renew_strike(db, review.id, author.id, other_moderator.id)
    db.commit()
    assert renewed.id == strike_id
    assert renewed.revoked_at is None
    assert renewed.issued_by_id == other_moderator.id
    assert active_strike_count(db, author.id) == 1


def test_revoke_missing_or_revoked_is_noop(db):
    author = create_user(db, "Author")
    moderator = get_moderator(db)
    review = create_review(db, author)
    now = datetime.now(timezone.utc)

    assert revoke_strike(db, review.id, now) is False

    issue_or_renew_strike(db, review.id, author.id, moderator.id)
    assert revoke_strike(db, review.id, now) is True
    assert revoke_strike(db, review.id, now) is False
    db.commit()


def test_counts_for_many_authors(db):
    """Bulk counts include authors with no strikes as zero."""
    a = create_user(db, "A")
    b = create_user(db, "B")
    moderator = get_moderator(db)
    for _ in range(2):
        review = create_review(db, a)
        issue_or_renew_strike(db, review.id, a.id, moderator.id)
    db.commit()

    assert active_strike_counts(db, [a.id, b.id]) == {a.id: 2, b.id: 0}
    assert active_strike_counts(db, []) == {}


def test_concurrent_insert_is_resolved_as_renewal(db, monkeypatch):
    """Losing the unique-constraint race on review_id renews the existing strike."""
    author = create_user(db, "Author")
    moderator = get_moderator(db)
    review = create_review(db, author)
    issue_or_renew_strike(db, review.id, author.id, moderator.id)
    revoke_strike(db, review.id, datetime.now(timezone.utc))
    db.commit()

    real_lookup = strike_service.get_strike_for_review
    calls = {"n": 0}

    def stale_lookup(session, review_id):
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return real_lookup(session, review_id)

    monkeypatch.setattr(strike_service, "get_strike_for_review", stale_lookup)
    strike = issue_or_renew_strike(db, review.id, author.id, moderator.id)
    db.commit()

    assert strike.revoked_at is None
    assert _strike_rows(db, review.id) == 1
    assert active_strike_count(db, author.id) == 1
