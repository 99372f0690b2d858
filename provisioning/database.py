"""
Database utilities, SQLAlchemy session management and schema bootstrap.
"""
from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import NullPool, QueuePool, StaticPool
from sqlalchemy.schema import CreateIndex

from provisioning.errors import SchemaInitFailed, StorageUnavailable

logger = logging.getLogger(__name__)

engine: Optional[Engine] = None

SessionLocal = sessionmaker(
    autoflush=False,
    expire_on_commit=False,
    future=True,
)

Base = declarative_base()


def _is_gunicorn() -> bool:
    return (
        os.environ.get('GUNICORN_CMD_ARGS') is not None or
        os.environ.get('SERVER_SOFTWARE', '').startswith('gunicorn')
    )


def configure_engine(database_url: str) -> Engine:
    """
    Build the engine for ``database_url`` and bind the session factory to it.
    Any previously configured engine is disposed.
    """
    global engine
    dispose_engine()

    connect_args = {}
    if database_url.startswith("sqlite"):
        # Required for SQLite when used across multiple request threads.
        connect_args["check_same_thread"] = False
    if database_url.startswith("postgresql"):
        # Fail fast if the database is unreachable
        connect_args.setdefault("connect_timeout", 10)

    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # In-memory database only lives as long as its single connection
        engine = create_engine(
            database_url,
            poolclass=StaticPool,
            future=True,
            connect_args=connect_args,
        )
    elif _is_gunicorn() and database_url.startswith("postgresql"):
        # Each gunicorn worker process gets fresh connections instead of pooled
        # ones inherited across the fork; the server side bounds the total
        engine = create_engine(
            database_url,
            poolclass=NullPool,
            pool_pre_ping=True,
            future=True,
            connect_args=connect_args,
        )
    else:
        engine = create_engine(
            database_url,
            poolclass=QueuePool,
            pool_pre_ping=True,
            pool_recycle=3600,
            pool_timeout=10,
            future=True,
            connect_args=connect_args,
        )

    SessionLocal.configure(bind=engine)
    logger.info(f"Database engine configured for dialect '{engine.dialect.name}'")
    return engine


def dispose_engine() -> None:
    """Release pooled connections and forget the current engine."""
    global engine
    if engine is not None:
        engine.dispose()
    engine = None
    SessionLocal.configure(bind=None)


def init_db() -> None:
    """
    Import models and create the ``clients`` and ``user`` tables if absent.
    Idempotent; invoked once during startup.
    """
    if engine is None:
        raise StorageUnavailable('Database not available')

    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database unreachable: {e}")
        raise StorageUnavailable(f'Database not available: {e}') from e

    try:
        from provisioning import models
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        logger.error(f"Error creating tables: {e}", exc_info=True)
        raise SchemaInitFailed(f'Failed to create tables: {e}') from e

    # create_all skips indexes of tables that already exist
    try:
        with engine.begin() as connection:
            for index in models.UserCredential.__table__.indexes:
                connection.execute(CreateIndex(index, if_not_exists=True))
    except IntegrityError as e:
        logger.error(f"Duplicate usernames block the unique username index: {e}")
        raise SchemaInitFailed(
            f'Failed to create unique username index, duplicate usernames exist: {e}'
        ) from e
    except SQLAlchemyError as e:
        logger.error(f"Error creating indexes: {e}", exc_info=True)
        raise SchemaInitFailed(f'Failed to create indexes: {e}') from e


@contextmanager
def db_session() -> Generator:
    """
    Context manager that yields a SQLAlchemy session and guarantees cleanup.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
