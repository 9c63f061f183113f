# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""CanvasNode and NodeConnection ORM models."""

import threading
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import (
    Column,
    String,
    Text,
    Float,
    Boolean,
    Enum,
    DateTime,
    ForeignKey,
    JSON,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.sql import func

from database import Base

NODE_TYPES = ("idea", "design", "code", "import", "api", "cli", "database", "payment", "env")
NODE_STATUSES = ("idle", "generating", "ready", "running")
NODE_PLATFORMS = ("web", "mobile", "api", "desktop", "cli", "database", "env")


_stamp_lock = threading.Lock()
_last_stamp = datetime.min.replace(tzinfo=timezone.utc)


def _utcnow() -> datetime:
    """UTC now, strictly increasing within the process."""
    global _last_stamp
    with _stamp_lock:
        now = datetime.now(timezone.utc)
        if now <= _last_stamp:
            now = _last_stamp + timedelta(microseconds=1)
        _last_stamp = now
        return now


class CanvasNode(Base):
    __tablename__ = "canvas_nodes"
    __table_args__ = (
        UniqueConstraint("project_id", "client_id", name="canvas_nodes_project_id_client_id_key"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Frontend-assigned handle, stable across full canvas saves
    client_id = Column(String(255), nullable=False)
    node_type = Column(Enum(*NODE_TYPES, name="node_type"), nullable=False)
    title = Column(String(512), nullable=False)
    description = Column(Text, nullable=False, default="", server_default="")
    x = Column(Float, nullable=False)
    y = Column(Float, nullable=False)
    width = Column(Float, nullable=False)
    height = Column(Float, nullable=False)
    status = Column(Enum(*NODE_STATUSES, name="node_status"), nullable=False, default="idle")
    content = Column(Text, nullable=True)
    file_name = Column(String(512), nullable=True)
    generated_code = Column(Text, nullable=True)
    picked = Column(Boolean, nullable=False, default=False)
    # client_id of the node that generated this one – not a foreign key
    parent_id = Column(String(255), nullable=True)
    page_role = Column(String(64), nullable=True)
    tag = Column(String(64), nullable=True)
    platform = Column(Enum(*NODE_PLATFORMS, name="node_platform"), nullable=True)
    language = Column(String(64), nullable=True)
    ai_model = Column(String(255), nullable=True)
    # [{"selector", "label", "targetNodeId", "elementType"}, ...]
    element_links = Column(JSON, nullable=False, default=list)
    # {"NAME": "value", ...}
    env_vars = Column(JSON, nullable=False, default=dict)
    # Set per row on insert so a bulk save keeps the payload order
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=func.now(),
        nullable=False,
    )


class NodeConnection(Base):
    """Directed edge between two nodes of a project, by client id."""

    __tablename__ = "node_connections"
    __table_args__ = (
        UniqueConstraint(
            "project_id",
            "from_client_id",
            "to_client_id",
            name="node_connections_project_id_from_client_id_to_client_id_key",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    from_client_id = Column(String(255), nullable=False)
    to_client_id = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
