# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the project endpoints."""

import uuid
from datetime import datetime
from typing import Optional

from core.schemas import CamelModel


# -- Requests --------------------------------------------------------------


class ProjectCreate(CamelModel):
    name: str
    description: Optional[str] = None
    ai_model: Optional[str] = None


class ProjectUpdate(CamelModel):
    """Partial update – only the fields present in the body change."""

    name: Optional[str] = None
    description: Optional[str] = None
    zoom: Optional[float] = None
    pan_x: Optional[float] = None
    pan_y: Optional[float] = None
    ai_model: Optional[str] = None


# -- Responses -------------------------------------------------------------


class ProjectResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    description: str
    zoom: float
    pan_x: float
    pan_y: float
    ai_model: str
    created_at: datetime
    updated_at: datetime
