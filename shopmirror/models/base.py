"""
Base database model and connection management
"""
import os
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

from shopmirror.errors import StoreConnectionError
from shopmirror.utils.logger import log

# Base class for all models
Base = declarative_base()


def _resolve_url(url: str) -> str:
    # Resolve relative SQLite paths to absolute so cwd changes can't break it
    if url.startswith("sqlite:///") and not url.startswith("sqlite:////"):
        rel_path = url[len("sqlite:///"):]
        if rel_path and rel_path != ":memory:":
            return "sqlite:///" + os.path.abspath(rel_path)
    return url


class Database:
    """
    Owns the engine and session factory.

    Opened once at process start, shared by every request, disposed at
    shutdown.
    """

    def __init__(self, url: str, connect_timeout: float = 5.0, socket_timeout: int = 45):
        self.url = _resolve_url(url)
        self.connect_timeout = connect_timeout
        self.socket_timeout = socket_timeout
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    def _create_engine(self) -> Engine:
        if self.url.startswith("sqlite"):
            connect_args = {"check_same_thread": False, "timeout": self.connect_timeout}
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                # In-memory: every session must see the same connection
                return create_engine(self.url, connect_args=connect_args, poolclass=StaticPool)
            return create_engine(self.url, connect_args=connect_args, poolclass=NullPool)

        return create_engine(
            self.url,
            connect_args={"connect_timeout": int(self.connect_timeout)},
            pool_pre_ping=True,
            pool_size=5,
            max_overflow=10,
            pool_recycle=self.socket_timeout,
        )

    def open(self) -> "Database":
        """Connect, verify the store answers, and create missing tables."""
        if self.engine is not None:
            return self

        # Register tables on Base.metadata
        from shopmirror.models import shopify  # noqa: F401

        try:
            self.engine = self._create_engine()
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            if self.engine is not None:
                self.engine.dispose()
                self.engine = None
            raise StoreConnectionError(f"Could not connect to store: {e}") from e

        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        log.info(f"Store connected ({self.engine.dialect.name})")
        return self

    def session(self) -> Session:
        """Get a new session; callers close it."""
        if self._session_factory is None:
            raise StoreConnectionError("Store is not open")
        return self._session_factory()

    def close(self):
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            self._session_factory = None
            log.info("Store connection closed")
