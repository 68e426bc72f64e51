"""Auth: signup, login, logout and identity lookup.

SECURITY FEATURES:
- Password hashing with bcrypt
- Password strength validation
- Generic login failure message (no user enumeration)
- Bearer token returned in the body; the portal keeps it in its session store
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from vendor_portal.api.deps import get_db, get_current_user
from vendor_portal.core.audit import AuditLog
from vendor_portal.core.config import settings
from vendor_portal.core.exceptions import BusinessError
from vendor_portal.core.security import verify_password, get_password_hash, create_access_token
from vendor_portal.models.user import User
from vendor_portal.schemas.user import (
    LoginResponse,
    SignupResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)

router = APIRouter()


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(data: UserCreate, request: Request, db: Session = Depends(get_db)):
    """
    Create a portal account.

    Password requirements:
    - Minimum MIN_PASSWORD_LENGTH characters
    - At least one number
    """
    email = data.email.lower()
    if db.query(User).filter(User.email == email).first():
        AuditLog.log_authentication("signup", email, _client_ip(request), False, reason="duplicate email")
        raise BusinessError.conflict("Email already registered")

    if len(data.password) < settings.MIN_PASSWORD_LENGTH:
        raise BusinessError.bad_request(
            f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters"
        )
    if settings.REQUIRE_NUMBERS and not any(c.isdigit() for c in data.password):
        raise BusinessError.bad_request("Password must contain at least one number")

    user = User(
        name=data.name,
        email=email,
        hashed_password=get_password_hash(data.password),
        role=data.role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    AuditLog.log_authentication("signup", email, _client_ip(request), True)
    return SignupResponse(message="Account created successfully", user=UserResponse.model_validate(user))


@router.post("/login", response_model=LoginResponse)
def login(data: UserLogin, request: Request, db: Session = Depends(get_db)):
    """
    Exchange credentials for a bearer token plus the user profile.

    The portal routes to the dashboard matching `user.role`.
    """
    email = data.email.lower()
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(data.password, user.hashed_password):
        AuditLog.log_authentication("failed_login", email, _client_ip(request), False, reason="bad credentials")
        # Generic error: don't specify which field is wrong
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = create_access_token(subject=str(user.id), role=user.role)
    AuditLog.log_authentication("login", email, _client_ip(request), True)
    return LoginResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/logout")
def logout(request: Request, current_user: User = Depends(get_current_user)):
    """Tokens are stateless; logout is recorded and the client drops its token."""
    AuditLog.log_authentication("logout", current_user.email, _client_ip(request), True)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    """Get current authenticated user."""
    return current_user
