"""Database engine, session factory and declarative base."""
from __future__ import annotations

from collections.abc import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import settings

Base = declarative_base()


def configure_sqlite_engine(engine: Engine) -> Engine:
    """Make pysqlite honour SAVEPOINT and foreign keys.

    pysqlite defers BEGIN until the first DML statement, which breaks nested
    transactions; we take over transaction control and emit BEGIN ourselves.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def build_engine(url: str | None = None, **kwargs) -> Engine:
    """Create an engine for `url` (defaults to DATABASE_URL)."""
    database_url = url or settings.DATABASE_URL
    if database_url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = create_engine(database_url, echo=settings.DATABASE_ECHO, **kwargs)
        return configure_sqlite_engine(engine)

    return create_engine(
        database_url,
        echo=settings.DATABASE_ECHO,
        pool_pre_ping=True,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        **kwargs,
    )


engine = build_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def upsert_insert(db: Session, model):
    """Dialect-specific INSERT supporting ON CONFLICT clauses."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)
    raise RuntimeError(f"ON CONFLICT inserts are not supported on {dialect}")


def get_db() -> Iterator[Session]:
    """FastAPI dependency yielding a request-scoped session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
