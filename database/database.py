import contextlib
import logging
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from database.models import Base

logger = logging.getLogger(__name__)


def _engine_kwargs(url: str, pool_size: int) -> dict:
    if url.startswith("sqlite"):
        # Sessions are opened from worker threads (asyncio.to_thread)
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,  # Verify connections before using
        "pool_size": pool_size,
        "max_overflow": 0,
    }


class Database:
    """Owns the engine and session factory for one configured database.

    Every unit of work draws one connection from the bounded pool and
    returns it when the session closes.
    """

    def __init__(self, url: str, pool_size: int = 20):
        self.url = url
        self.engine = create_engine(url, **_engine_kwargs(url, pool_size))
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine
        )

    def create_tables(self) -> None:
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables ensured")

    def dispose(self) -> None:
        self.engine.dispose()

    @contextlib.contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope around a series of operations."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
