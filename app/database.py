"""
BotLab v1.0 - Database Engine
SQLAlchemy setup. Works with SQLite (dev/tests) and PostgreSQL (prod).
"""

import logging

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool

from app.config import DATABASE_URL

logger = logging.getLogger("botlab")


# ─── Engine Setup ────────────────────────────────────────────────────────────

_is_sqlite = DATABASE_URL.startswith("sqlite")

if _is_sqlite:
    # One shared connection so in-memory databases survive across threads
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
else:
    engine = create_engine(
        DATABASE_URL,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        echo=False,
    )


# ─── Session Factory ─────────────────────────────────────────────────────────

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


# ─── Base Class ──────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


# ─── Dependency ──────────────────────────────────────────────────────────────

def get_db():
    """FastAPI dependency: yields a database session, auto-closes."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def run_migrations():
    """Add columns introduced after the first release. Idempotent."""
    inspector = inspect(engine)
    if "saved_bots" not in inspector.get_table_names():
        return

    existing_columns = {col["name"] for col in inspector.get_columns("saved_bots")}
    json_type = "TEXT" if _is_sqlite else "JSONB"

    migrations = {
        "engine_state": f"ALTER TABLE saved_bots ADD COLUMN engine_state {json_type}",
        "template_id": "ALTER TABLE saved_bots ADD COLUMN template_id VARCHAR(50)",
    }

    with engine.begin() as conn:
        for col_name, sql in migrations.items():
            if col_name not in existing_columns:
                conn.execute(text(sql))
                logger.info(f"Migration: added column '{col_name}' to saved_bots table")


def init_db():
    """Create all tables. Called once at startup."""
    # Importing models registers them on Base.metadata
    from app import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    run_migrations()
