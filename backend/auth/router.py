# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Auth endpoints – register, login, refresh, logout, current-user info.

Security notes
--------------
* Login returns the *same* error whether the email doesn't exist, the
  account has no password, or the password is wrong.  This prevents
  user-enumeration attacks.
* Refresh tokens are single use.  A refresh deletes the consumed row before
  issuing a new pair, so replaying a token fails with 401.
* Only SHA-256 hashes of refresh tokens are stored.
"""

from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from core.config import settings
from core.errors import ConflictError, UnauthorizedError, ValidationError
from core.logger import logger
from core.schemas import MessageResponse
from core.security import (
    CurrentUser,
    create_access_token,
    generate_refresh_token,
    get_current_user,
    hash_password,
    hash_refresh_token,
    verify_password,
)
from models.user import RefreshToken, User
from auth.schemas import (
    AuthResponse,
    LoginRequest,
    LogoutRequest,
    RefreshRequest,
    RegisterRequest,
    UserResponse,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _as_utc(value: datetime) -> datetime:
    """Some drivers (SQLite) hand back naive datetimes; they are stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def issue_token_pair(db: Session, user: User) -> AuthResponse:
    """
    Build a signed access token and an opaque refresh token for *user*.
    Persists only the refresh token's hash and commits.
    """
    now = datetime.now(timezone.utc)

    # Housekeeping: the user's stale sessions can never be used again
    db.query(RefreshToken).filter(
        RefreshToken.user_id == user.id,
        RefreshToken.expires_at < now,
    ).delete(synchronize_session=False)

    raw_refresh = generate_refresh_token()
    db.add(RefreshToken(
        user_id=user.id,
        token_hash=hash_refresh_token(raw_refresh),
        expires_at=now + timedelta(seconds=settings.refresh_expiry_secs),
    ))
    db.commit()
    db.refresh(user)

    return AuthResponse(
        access_token=create_access_token(user.id),
        refresh_token=raw_refresh,
        user=UserResponse.model_validate(user),
    )


# ---------------------------------------------------------------------------
# POST /api/auth/register
# ---------------------------------------------------------------------------


@router.post("/register", response_model=AuthResponse)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account and start a session."""
    if not body.email or not body.password:
        raise ValidationError("Email and password are required")

    if db.query(User).filter(User.email == body.email).first():
        raise ConflictError("Email already registered")

    display_name = body.display_name or body.email.split("@")[0] or "User"
    user = User(
        email=body.email,
        password_hash=hash_password(body.password),
        display_name=display_name,
    )
    db.add(user)
    try:
        db.flush()  # get user.id before the refresh token row references it
    except IntegrityError:
        # Lost a race with a concurrent registration of the same email
        db.rollback()
        raise ConflictError("Email already registered")

    logger.info("User registered: %s", user.id)
    return issue_token_pair(db, user)


# ---------------------------------------------------------------------------
# POST /api/auth/login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=AuthResponse)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate with email + password and start a session."""
    user = db.query(User).filter(User.email == body.email).first()

    # Unified failure path – no information leaks about which check failed
    if not user or not verify_password(body.password, user.password_hash):
        raise UnauthorizedError()

    return issue_token_pair(db, user)


# ---------------------------------------------------------------------------
# POST /api/auth/refresh
# ---------------------------------------------------------------------------


@router.post("/refresh", response_model=AuthResponse)
def refresh(body: RefreshRequest, db: Session = Depends(get_db)):
    """Rotate: consume the refresh token and issue a brand-new pair."""
    token_hash = hash_refresh_token(body.refresh_token)
    record = db.query(RefreshToken).filter(RefreshToken.token_hash == token_hash).first()

    if not record or _as_utc(record.expires_at) < datetime.now(timezone.utc):
        raise UnauthorizedError()

    user_id = record.user_id

    # The row count guards against two requests racing on the same token
    consumed = (
        db.query(RefreshToken)
        .filter(RefreshToken.token_hash == token_hash)
        .delete(synchronize_session=False)
    )
    if consumed == 0:
        db.rollback()
        raise UnauthorizedError()

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        db.rollback()
        raise UnauthorizedError()

    return issue_token_pair(db, user)


# ---------------------------------------------------------------------------
# POST /api/auth/logout
# ---------------------------------------------------------------------------


@router.post("/logout", response_model=MessageResponse)
def logout(
    body: LogoutRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Revoke a refresh token.  Idempotent – unknown tokens are ignored."""
    db.query(RefreshToken).filter(
        RefreshToken.token_hash == hash_refresh_token(body.refresh_token),
        RefreshToken.user_id == current_user.id,
    ).delete(synchronize_session=False)
    db.commit()
    return MessageResponse(message="Logged out")


# ---------------------------------------------------------------------------
# GET /api/auth/me
# ---------------------------------------------------------------------------


@router.get("/me", response_model=UserResponse)
def me(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Return the authenticated user's public profile (no secrets)."""
    user = db.query(User).filter(User.id == current_user.id).first()
    if not user:
        raise UnauthorizedError()
    return user
