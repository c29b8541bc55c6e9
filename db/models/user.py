"""
User model.

User: Authentication and identity. Email is stored normalized (lower-case).
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import relationship

from db.engine import Base


class User(Base):
    """User account for authentication."""
    __tablename__ = "users"

    id = Column(String(32), primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # Relationships
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "hashed_password": self.hashed_password,
            "created_at": int(self.created_at.timestamp()) if self.created_at else None,
        }

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"
