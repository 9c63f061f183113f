# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""UiVariation ORM model – a generated alternative rendering of a node."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, Enum, DateTime, ForeignKey, Uuid

from database import Base

VARIATION_CATEGORIES = ("header", "hero", "features", "pricing", "footer", "dashboard", "mobile")


class UiVariation(Base):
    __tablename__ = "ui_variations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    source_node_client_id = Column(String(255), nullable=False)
    label = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    preview_html = Column(Text, nullable=False, default="")
    code = Column(Text, nullable=False, default="")
    category = Column(Enum(*VARIATION_CATEGORIES, name="variation_category"), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
