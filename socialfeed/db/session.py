from typing import Generator, Optional
import logging

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger("socialfeed")

# Base class for all SQLAlchemy models
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


class Database:
    """
    Process-wide connection handle.
    The engine (and its pool) is created by init() at application startup
    and released by dispose() at shutdown.
    """

    def __init__(self, url: str):
        if not url:
            logger.error("DATABASE_URL is not set or empty!")
            raise ValueError("DATABASE_URL environment variable is required")
        self.url = url
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    def init(self) -> Engine:
        if self.engine is not None:
            return self.engine

        if self.url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                # A single shared connection keeps the in-memory database alive
                kwargs["poolclass"] = StaticPool
        else:
            kwargs = {
                "pool_pre_ping": True,  # Check connection before using from pool
                "pool_recycle": 3600,   # Recycle connections after 1 hour
            }

        try:
            self.engine = create_engine(self.url, **kwargs)
        except Exception as e:
            logger.error(f"Failed to create database engine: {e}")
            raise

        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        logger.info(f"Database engine created for dialect '{self.engine.dialect.name}'")
        return self.engine

    def session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("Database is not initialized; call init() first")
        return self._session_factory()

    def dispose(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            logger.info("Database engine disposed")
        self.engine = None
        self._session_factory = None


# Database session dependency for FastAPI
def get_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.db.session()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

# get_db() creates a new session per request from the Database stored on app.state
# and closes it once the request is done; a failing request rolls its work back
