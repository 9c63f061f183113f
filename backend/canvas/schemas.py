# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for nodes, connections and canvases."""

import uuid
from datetime import datetime
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import Field

from core.schemas import CamelModel

NodeType = Literal["idea", "design", "code", "import", "api", "cli", "database", "payment", "env"]
NodeStatus = Literal["idle", "generating", "ready", "running"]
NodePlatform = Literal["web", "mobile", "api", "desktop", "cli", "database", "env"]

# [fromClientId, toClientId]
ConnectionPair = Tuple[str, str]


class ElementLink(CamelModel):
    """A link from an element inside a design node to another canvas node."""

    selector: str  # CSS-selector-like locator in the visual editor
    label: str
    target_node_id: str  # client id of the target node
    element_type: Optional[str] = None  # form, button, input, link, image …


# -- Requests --------------------------------------------------------------


class NodeCreate(CamelModel):
    client_id: str
    node_type: NodeType = Field(alias="type")
    title: str
    description: str = ""
    x: float
    y: float
    width: float
    height: float
    status: Optional[NodeStatus] = None
    content: Optional[str] = None
    file_name: Optional[str] = None
    generated_code: Optional[str] = None
    picked: Optional[bool] = None
    parent_id: Optional[str] = None
    page_role: Optional[str] = None
    tag: Optional[str] = None
    platform: Optional[NodePlatform] = None
    language: Optional[str] = None
    ai_model: Optional[str] = None
    element_links: Optional[List[ElementLink]] = None
    env_vars: Optional[Dict[str, str]] = None
    # client ids this node should point at
    connected_to: Optional[List[str]] = None


class NodeUpdate(CamelModel):
    """
    PATCH body.  Fields absent from the body keep their value; an explicit
    ``null`` clears a nullable field.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    status: Optional[NodeStatus] = None
    content: Optional[str] = None
    file_name: Optional[str] = None
    generated_code: Optional[str] = None
    picked: Optional[bool] = None
    page_role: Optional[str] = None
    tag: Optional[str] = None
    platform: Optional[NodePlatform] = None
    language: Optional[str] = None
    ai_model: Optional[str] = None
    element_links: Optional[List[ElementLink]] = None
    env_vars: Optional[Dict[str, str]] = None


class ConnectRequest(CamelModel):
    from_client_id: str
    to_client_id: str


class DisconnectRequest(CamelModel):
    from_client_id: str
    to_client_id: str


class CanvasSave(CamelModel):
    """The complete desired state of a project's canvas."""

    nodes: List[NodeCreate] = []
    connections: List[ConnectionPair] = []
    zoom: Optional[float] = None
    pan_x: Optional[float] = None
    pan_y: Optional[float] = None


# -- Responses -------------------------------------------------------------


class NodeResponse(CamelModel):
    id: uuid.UUID
    client_id: str
    node_type: NodeType = Field(alias="type")
    title: str
    description: str
    x: float
    y: float
    width: float
    height: float
    status: NodeStatus
    content: Optional[str]
    file_name: Optional[str]
    generated_code: Optional[str]
    picked: bool
    parent_id: Optional[str]
    page_role: Optional[str]
    tag: Optional[str]
    platform: Optional[NodePlatform]
    language: Optional[str]
    ai_model: Optional[str]
    element_links: List[ElementLink]
    env_vars: Dict[str, str]
    connected_to: List[str]
    created_at: datetime
    updated_at: datetime


class CanvasState(CamelModel):
    nodes: List[NodeResponse]
    connections: List[ConnectionPair]
    zoom: float
    pan_x: float
    pan_y: float


class CanvasSaveResponse(CamelModel):
    message: str
    node_count: int
