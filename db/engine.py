"""
SQLAlchemy engine and session factory for the auth database.

Usage:
    from db.engine import create_db_engine, create_session_factory, init_schema

    engine = create_db_engine(config.DATABASE_URL, timeout=config.STORE_TIMEOUT_SECONDS)
    init_schema(engine)
    SessionLocal = create_session_factory(engine)

    with SessionLocal() as db:
        user = db.execute(select(User)).scalar_one_or_none()
"""

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker


# Base class for all models
Base = declarative_base()


def create_db_engine(database_url: str, timeout: float = 5.0, echo: bool = False) -> Engine:
    """Create an engine whose connects and pool checkouts give up after ``timeout``."""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"timeout": timeout, "check_same_thread": False},
            echo=echo,
        )
    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connections before use
        pool_size=10,
        max_overflow=20,
        pool_timeout=timeout,
        connect_args={"connect_timeout": max(1, int(timeout))},
        echo=echo,
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


def init_schema(engine: Engine) -> None:
    """Create auth tables that do not exist yet."""
    # Registers the models on Base.metadata.
    import db.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
