"""FastAPI dependencies: DB session, current user from JWT, role gates.

SECURITY: Tokens are read from the Authorization header only. The role is
always re-read from the database, never trusted from the token.
"""
from typing import Generator, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from vendor_portal.core.exceptions import BusinessError
from vendor_portal.core.security import decode_access_token
from vendor_portal.db.session import SessionLocal
from vendor_portal.models.user import User

security = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> int:
    """Extract user ID from the bearer token."""
    if not credentials or not credentials.credentials:
        raise BusinessError.unauthorized("missing bearer token")

    sub = decode_access_token(credentials.credentials)
    if not sub:
        raise BusinessError.unauthorized("invalid or expired token")

    try:
        return int(sub)
    except ValueError:
        raise BusinessError.unauthorized(f"non-numeric token subject {sub!r}")


def get_current_user(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> User:
    """Load current user from DB."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise BusinessError.unauthorized(f"token for unknown user {user_id}")
    return user


def require_roles(*roles: str):
    """Dependency factory: 403 unless the current user has one of `roles`."""
    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise BusinessError.forbidden(
                f"user {current_user.id} role={current_user.role} needs one of {roles}"
            )
        return current_user
    return checker
