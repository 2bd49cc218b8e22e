"""Identity tokens.

The identity provider signs HS256 tokens with the shared secret. This module
only reads them; ``issue_identity_token`` is for operators and tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from gamebox.core.config import settings


@dataclass(frozen=True)
class IdentityClaims:
    user_id: int
    email: str


def issue_identity_token(user_id: int, email: str, expires_in: timedelta | None = None) -> str:
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_in or timedelta(minutes=settings.jwt_expire_minutes)
    claims = {"sub": str(user_id), "email": email, "iat": issued_at, "exp": issued_at + lifetime}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def read_identity_token(token: str) -> IdentityClaims | None:
    """Verify signature and expiry. None for anything unusable."""
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    try:
        user_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        return None
    return IdentityClaims(user_id=user_id, email=str(claims.get("email", "")))
