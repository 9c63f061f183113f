# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""UserApiKey ORM model – a user's AI provider key, encrypted at rest."""

import uuid

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.sql import func

from database import Base


class UserApiKey(Base):
    __tablename__ = "user_api_keys"
    __table_args__ = (
        UniqueConstraint("user_id", "provider", name="user_api_keys_user_id_provider_key"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # Cascade delete: removing a user removes their stored keys atomically.
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    provider = Column(String(32), nullable=False, default="openrouter")
    # base64( 12-byte nonce || ciphertext || 16-byte GCM tag ).  Never plaintext.
    encrypted_key = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
