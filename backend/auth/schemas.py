# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the auth endpoints."""

import uuid
from datetime import datetime
from typing import Optional

from core.schemas import CamelModel


# -- Requests --------------------------------------------------------------


class RegisterRequest(CamelModel):
    email: str
    password: str
    display_name: Optional[str] = None


class LoginRequest(CamelModel):
    email: str
    password: str


class RefreshRequest(CamelModel):
    refresh_token: str


class LogoutRequest(CamelModel):
    refresh_token: str


# -- Responses -------------------------------------------------------------


class UserResponse(CamelModel):
    id: uuid.UUID
    email: str
    display_name: str
    created_at: datetime


class AuthResponse(CamelModel):
    access_token: str
    # Raw refresh token – returned once, only its hash is stored
    refresh_token: str
    user: UserResponse
