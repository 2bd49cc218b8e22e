"""Request identity and access gates."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from gamebox.core.config import settings
from gamebox.core.security import read_identity_token
from gamebox.core.utils import as_utc
from gamebox.db.session import get_db
from gamebox.models.user import User
from gamebox.services.suspension_service import is_suspended

bearer = HTTPBearer(auto_error=False)


def _unauthorized(reason: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=reason,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    db: Annotated[Session, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer)],
) -> User:
    """Resolve the caller from their identity token. 401 otherwise."""
    if not credentials:
        raise _unauthorized("Not authenticated")
    claims = read_identity_token(credentials.credentials)
    if claims is None:
        raise _unauthorized("Invalid or expired token")
    user = db.get(User, claims.user_id)
    if not user:
        raise _unauthorized("Unknown user")
    return user


def require_active_user(current_user: Annotated[User, Depends(get_current_user)]) -> User:
    """Reject suspended users with 403 and their suspension end."""
    if is_suspended(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "account_suspended",
                "suspended_until": as_utc(current_user.suspended_until).isoformat(),
            },
        )
    return current_user


def require_admin(current_user: Annotated[User, Depends(require_active_user)]) -> User:
    """Moderators are the users whose email is in ADMIN_EMAILS."""
    if current_user.email.strip().lower() not in settings.admin_email_set:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Moderator access required")
    return current_user
