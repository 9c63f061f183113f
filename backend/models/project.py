# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Project ORM model – a named canvas owned by one user."""

import uuid

from sqlalchemy import Column, String, Text, Float, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base


class Project(Base):
    __tablename__ = "projects"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="", server_default="")
    # Viewport state – independent of the graph content
    zoom = Column(Float, nullable=False, default=1.0, server_default="1.0")
    pan_x = Column(Float, nullable=False, default=0.0, server_default="0.0")
    pan_y = Column(Float, nullable=False, default=0.0, server_default="0.0")
    # Default model for generation inside this project
    ai_model = Column(String(255), nullable=False, default="auto", server_default="auto")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    owner = relationship("User", back_populates="projects")
    # Removing a project removes its whole graph and its variations.
    nodes = relationship("CanvasNode", cascade="all, delete-orphan")
    connections = relationship("NodeConnection", cascade="all, delete-orphan")
    variations = relationship("UiVariation", cascade="all, delete-orphan")
