"""SQLAlchemy database setup and session management for the key store."""

from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import Engine, MetaData, create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from pdfword.config import settings


# Naming convention for constraints
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    metadata = MetaData(naming_convention=convention)


def create_store_engine(url: Optional[str] = None) -> Engine:
    """Create an engine and make sure the schema exists.

    For SQLite, every transaction starts with ``BEGIN IMMEDIATE`` so a
    read-modify-write holds the write lock from its first read and
    concurrent writers cannot lose each other's updates.
    """
    url = url or settings.key_store_url
    parsed = make_url(url)
    is_sqlite = parsed.get_backend_name() == "sqlite"

    if is_sqlite and parsed.database and parsed.database != ":memory:":
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(
        url,
        echo=settings.log_level == "DEBUG",
        connect_args={"timeout": 30} if is_sqlite else {},
    )

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _disable_pysqlite_begin(dbapi_connection, connection_record):
            # Let SQLAlchemy emit BEGIN itself
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def _begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    init_db(engine)
    return engine


def init_db(engine: Engine) -> None:
    """Initialize database tables."""
    # Register the mapped tables on Base.metadata
    from . import orm_models  # noqa: F401

    Base.metadata.create_all(engine)


@lru_cache(maxsize=None)
def get_engine(url: Optional[str] = None) -> Engine:
    """Shared engine per store URL."""
    return create_store_engine(url)


@contextmanager
def get_session(engine: Optional[Engine] = None) -> Generator[Session, None, None]:
    """Open a session wrapping a single transaction."""
    factory = sessionmaker(engine or get_engine(), expire_on_commit=False)
    with factory() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
