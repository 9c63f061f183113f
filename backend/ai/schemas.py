# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the AI proxy endpoints."""

from typing import Any, Dict, List, Optional

from core.schemas import CamelModel


# -- Requests --------------------------------------------------------------


class CompletionRequest(CamelModel):
    model: str
    prompt: str
    system_prompt: Optional[str] = None


class SaveKeyRequest(CamelModel):
    # Plaintext provider key; encrypted before it is persisted
    key: str


# -- Responses -------------------------------------------------------------


class CompletionResponse(CamelModel):
    content: str
    model: str
    usage: Optional[Dict[str, Any]] = None


class ModelListResponse(CamelModel):
    data: List[Dict[str, Any]]


class KeyStatusResponse(CamelModel):
    has_key: bool
    fallback_available: bool
