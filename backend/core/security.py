# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Central security module.  All cryptographic primitives and auth guards live
here.  No other module should touch raw crypto directly.

Responsibilities
----------------
1. Password hashing / verification          (passlib argon2)
2. Refresh-token generation / hashing       (secrets + SHA-256)
3. API-key encryption / decryption          (AES-256-GCM)
4. JWT creation / decoding                  (PyJWT / HS256)
5. FastAPI dependency guards                (get_current_user, require_project_owner)
"""

import base64
import binascii
import hashlib
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt as _jwt        # PyJWT
from passlib.hash import argon2 as _argon2  # argon2-cffi backend
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from core.config import settings
from core.errors import InternalError, NotFoundError, UnauthorizedError
from database import get_db

_JWT_ALGORITHM = "HS256"
_NONCE_SIZE = 12  # 96-bit GCM nonce per NIST SP 800-38D

# ---------------------------------------------------------------------------
# 1.  argon2 – password hashing
# ---------------------------------------------------------------------------
# argon2id is memory-hard.  passlib generates a fresh random salt per hash and
# embeds it, together with the cost parameters, in the hash string.
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Hash a plaintext password.  Returns the full passlib hash string."""
    return _argon2.hash(plain)


def verify_password(plain: str, stored_hash: Optional[str]) -> bool:
    """
    Constant-time verification of *plain* against a hash produced by
    :func:`hash_password`.  A missing or malformed stored hash simply fails.
    """
    if not stored_hash:
        return False
    try:
        return _argon2.verify(plain, stored_hash)
    except (ValueError, TypeError):
        return False


# ---------------------------------------------------------------------------
# 2.  Refresh tokens – opaque, single use
# ---------------------------------------------------------------------------


def generate_refresh_token() -> str:
    """256 random bits, URL-safe.  Shown to the client exactly once."""
    return secrets.token_urlsafe(32)


def hash_refresh_token(raw: str) -> str:
    """SHA-256 hex digest – the only form of the token that is persisted."""
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


# ---------------------------------------------------------------------------
# 3.  AES-256-GCM – API key encryption
# ---------------------------------------------------------------------------


def _derive_key(secret: str) -> bytes:
    """The configured secret is never used verbatim: SHA-256 → 32-byte key."""
    return hashlib.sha256(secret.encode("utf-8")).digest()


def encrypt_api_key(plaintext: str, secret: Optional[str] = None) -> str:
    """
    Encrypt *plaintext* with AES-256-GCM.

    Each call draws a fresh 12-byte random nonce – nonce reuse with the same
    key would be catastrophic for GCM, so we never reuse.

    Returns base64( nonce || ciphertext || 16-byte GCM tag ).
    """
    key = _derive_key(secret or settings.api_key_encryption_secret)
    nonce = secrets.token_bytes(_NONCE_SIZE)
    ct_and_tag = AESGCM(key).encrypt(nonce, plaintext.encode("utf-8"), None)
    return base64.b64encode(nonce + ct_and_tag).decode("ascii")


def decrypt_api_key(encrypted_b64: str, secret: Optional[str] = None) -> str:
    """
    Decrypt a value produced by :func:`encrypt_api_key`.

    Raises :class:`InternalError` if the blob is not valid base64, is too
    short to hold a nonce, or fails the GCM authentication check (tampered
    data or wrong key).  Well-formed stored data never triggers this.
    """
    try:
        data = base64.b64decode(encrypted_b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InternalError(f"Base64 decode error: {exc}") from exc

    if len(data) < _NONCE_SIZE:
        raise InternalError("Invalid encrypted data")

    nonce, ct_and_tag = data[:_NONCE_SIZE], data[_NONCE_SIZE:]
    key = _derive_key(secret or settings.api_key_encryption_secret)
    try:
        plaintext_bytes = AESGCM(key).decrypt(nonce, ct_and_tag, None)
    except InvalidTag as exc:
        raise InternalError("Decryption failed – data may be tampered") from exc

    try:
        return plaintext_bytes.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InternalError(f"UTF-8 decode error: {exc}") from exc


# ---------------------------------------------------------------------------
# 4.  JWT – access tokens
# ---------------------------------------------------------------------------


def create_access_token(user_id: uuid.UUID, expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign a short-lived HS256 JWT whose subject is the user id.
    ``iat`` and ``exp`` claims are added automatically.
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(seconds=settings.jwt_expiry_secs))
    claims = {"sub": str(user_id), "iat": now, "exp": expire}
    return _jwt.encode(claims, settings.jwt_secret, algorithm=_JWT_ALGORITHM)


def decode_access_token(token: str) -> uuid.UUID:
    """
    Verify signature and expiry and return the subject as a UUID.
    Raises :class:`UnauthorizedError` on any failure (expired, bad
    signature, malformed token or subject).
    """
    try:
        payload = _jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[_JWT_ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
        return uuid.UUID(payload["sub"])
    except (_jwt.InvalidTokenError, ValueError, TypeError):
        raise UnauthorizedError()


# ---------------------------------------------------------------------------
# 5.  FastAPI dependency guards
# ---------------------------------------------------------------------------

# tokenUrl is only used by the generated OpenAPI docs.  auto_error is off so
# a missing header goes through the same UnauthorizedError path.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


@dataclass
class CurrentUser:
    """Verified identity of the caller, taken from the access token only."""

    id: uuid.UUID


def get_current_user(token: Optional[str] = Depends(oauth2_scheme)) -> CurrentUser:
    """
    Dependency: verify the bearer token.  Tokens are self-contained, so no
    database lookup happens here.

    Raises 401 if the header is missing or the token is invalid.
    """
    if not token:
        raise UnauthorizedError()
    return CurrentUser(id=decode_access_token(token))


def require_project_owner(
    project_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Dependency: load the project named in the path and assert the caller
    owns it.  Returns the Project ORM instance.

    A project that exists but belongs to someone else is reported exactly
    like a missing one (404) so non-owners cannot probe for ids.
    """
    # Lazy import to avoid circular dependency at module load time
    from models.project import Project  # noqa: E402

    project = (
        db.query(Project)
        .filter(Project.id == project_id, Project.user_id == current_user.id)
        .first()
    )
    if not project:
        raise NotFoundError(f"Project {project_id} not found")
    return project


# -- IP Address extraction ----------------------------------------------------


def get_client_ip(request: Request) -> str:
    """
    Extract the client IP address from the request.
    Checks X-Forwarded-For header first (for proxies), then falls back to client host.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first (original client)
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"
