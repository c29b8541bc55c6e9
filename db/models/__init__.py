"""
SQLAlchemy models for the auth database.

All models inherit from db.engine.Base.
"""

from db.models.user import User
from db.models.auth import RefreshToken

__all__ = [
    "User",
    "RefreshToken",
]
