"""
Auth models for refresh-token tracking.

RefreshToken: one row per refresh token currently valid for a user.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from db.engine import Base


class RefreshToken(Base):
    """
    Ledger row for a refresh token.

    A token may be exchanged for a new pair only while its row exists.
    """
    __tablename__ = "refresh_tokens"

    user_id = Column(
        String(32), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    token = Column(Text, primary_key=True)
    expires_at = Column(Integer, nullable=False)  # Unix timestamp
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # Relationship
    user = relationship("User", back_populates="refresh_tokens")

    def __repr__(self):
        return f"<RefreshToken(user_id={self.user_id}, token={self.token[:8]}...)>"
