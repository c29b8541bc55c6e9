"""
Database module for the auth service.

Provides SQLAlchemy models and engine helpers for SQL persistence.
"""

from db.engine import Base, create_db_engine, create_session_factory, init_schema

__all__ = ["Base", "create_db_engine", "create_session_factory", "init_schema"]
