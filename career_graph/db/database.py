import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for the document store.

    In-memory SQLite shares a single connection so every session sees
    the same database.
    """
    if database_url == "sqlite://" or (database_url.startswith("sqlite") and ":memory:" in database_url):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


class Database:
    """Engine plus session factory for one document store."""

    def __init__(self, database_url: str, echo: bool = False, engine: Optional[Engine] = None):
        self.engine = engine or create_db_engine(database_url, echo=echo)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self) -> None:
        """Create all collections (tables) that do not exist yet."""
        # Import registers the models on Base.metadata
        from career_graph.db import models  # noqa: F401
        Base.metadata.create_all(self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database connection closed.")


def get_database(database_url: str, echo: bool = False) -> Database:
    """Connect to the store and make sure all collections exist."""
    db = Database(database_url, echo=echo)
    db.create_all()
    logger.info(f"Connected to document store: {db.engine.url.render_as_string(hide_password=True)}")
    return db
