# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the UI variation endpoints."""

import uuid
from datetime import datetime
from typing import List, Literal

from core.schemas import CamelModel

VariationCategory = Literal["header", "hero", "features", "pricing", "footer", "dashboard", "mobile"]


# -- Requests --------------------------------------------------------------


class VariationPayload(CamelModel):
    label: str
    description: str = ""
    preview_html: str = ""
    code: str = ""
    category: VariationCategory


class VariationsSave(CamelModel):
    """A batch of generated variations for one source node."""

    source_node_client_id: str
    variations: List[VariationPayload]


# -- Responses -------------------------------------------------------------


class VariationResponse(CamelModel):
    id: uuid.UUID
    project_id: uuid.UUID
    source_node_client_id: str
    label: str
    description: str
    preview_html: str
    code: str
    category: VariationCategory
    created_at: datetime


class VariationsSaveResponse(CamelModel):
    message: str
    count: int
