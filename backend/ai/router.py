# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
AI proxy endpoints – chat completion, cached model list, and management of
the caller's own OpenRouter key.

Security notes
--------------
* A stored key is AES-256-GCM encrypted and only ever decrypted in memory
  right before the outbound call.  It is never returned or logged.
* Users without a key of their own fall back to the server-wide key when
  one is configured.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from core.config import settings
from core.errors import ValidationError
from core.logger import logger
from core.schemas import MessageResponse
from core.security import CurrentUser, decrypt_api_key, encrypt_api_key, get_current_user
from models.api_key import UserApiKey
from ai.model_cache import ModelCache, get_model_cache
from ai.provider import OpenRouterClient, build_messages, get_provider, parse_completion
from ai.schemas import (
    CompletionRequest,
    CompletionResponse,
    KeyStatusResponse,
    ModelListResponse,
    SaveKeyRequest,
)

router = APIRouter(prefix="/api/ai", tags=["ai"])

PROVIDER = "openrouter"

_NO_KEY = "No OpenRouter API key configured. Set your key in Settings."


def _stored_key(db: Session, user_id: uuid.UUID) -> Optional[UserApiKey]:
    return (
        db.query(UserApiKey)
        .filter(UserApiKey.user_id == user_id, UserApiKey.provider == PROVIDER)
        .first()
    )


def resolve_api_key(db: Session, user_id: uuid.UUID) -> Optional[str]:
    """The user's own key if stored, else the fallback key, else None."""
    row = _stored_key(db, user_id)
    if row is not None:
        return decrypt_api_key(row.encrypted_key)
    return settings.openrouter_fallback_key or None


# ---------------------------------------------------------------------------
# POST /api/ai/complete
# ---------------------------------------------------------------------------


@router.post("/complete", response_model=CompletionResponse)
def complete(
    body: CompletionRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    provider: OpenRouterClient = Depends(get_provider),
):
    api_key = resolve_api_key(db, current_user.id)
    if not api_key:
        raise ValidationError(_NO_KEY)

    # Release the connection before a call that may take minutes
    db.close()

    data = provider.chat_completion(api_key, body.model, build_messages(body.prompt, body.system_prompt))
    return CompletionResponse(**parse_completion(data, body.model))


# ---------------------------------------------------------------------------
# GET /api/ai/models
# ---------------------------------------------------------------------------


@router.get("/models", response_model=ModelListResponse)
def list_models(
    current_user: CurrentUser = Depends(get_current_user),
    provider: OpenRouterClient = Depends(get_provider),
    cache: ModelCache = Depends(get_model_cache),
):
    """Served from the shared cache while it is younger than its TTL."""
    return ModelListResponse(data=cache.get_or_refresh(provider.list_models))


# ---------------------------------------------------------------------------
# /api/ai/key
# ---------------------------------------------------------------------------


@router.get("/key", response_model=KeyStatusResponse)
def key_status(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Whether a key is stored – the key itself never leaves the server."""
    return KeyStatusResponse(
        has_key=_stored_key(db, current_user.id) is not None,
        fallback_available=bool(settings.openrouter_fallback_key),
    )


@router.put("/key", response_model=MessageResponse)
def save_key(
    body: SaveKeyRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Encrypt and upsert.  Any previous key for the provider is replaced."""
    if not body.key:
        raise ValidationError("API key cannot be empty")

    encrypted = encrypt_api_key(body.key)
    row = _stored_key(db, current_user.id)
    if row is None:
        db.add(UserApiKey(user_id=current_user.id, provider=PROVIDER, encrypted_key=encrypted))
    else:
        row.encrypted_key = encrypted

    try:
        db.commit()
    except IntegrityError:
        # A concurrent save inserted the row first – overwrite it
        db.rollback()
        _stored_key(db, current_user.id).encrypted_key = encrypted
        db.commit()

    logger.info("API key saved for user %s", current_user.id)
    return MessageResponse(message="API key saved")


@router.delete("/key", response_model=MessageResponse)
def delete_key(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Idempotent."""
    db.query(UserApiKey).filter(
        UserApiKey.user_id == current_user.id,
        UserApiKey.provider == PROVIDER,
    ).delete(synchronize_session=False)
    db.commit()
    return MessageResponse(message="API key removed")
