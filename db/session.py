from __future__ import annotations

import os
from typing import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import sessionmaker, Session
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

DB_URL_ENV = "VARIANT_REGISTRY_DB_URL"
DEFAULT_DB_URL = "sqlite:///./data/variant_registry.db"


def normalize_sqlite_url(db_url: str) -> str:
    """Ensure sqlite file URLs are absolute and anchored at repo root when relative.

    This prevents mismatched files when different processes have different CWDs.
    """
    try:
        url = make_url(db_url)
    except ArgumentError:
        return db_url
    if url.get_backend_name() != "sqlite":
        return db_url
    db_path = url.database or ""
    # skip in-memory URLs
    if db_path in ("", ":memory:"):
        return db_url
    p = Path(db_path)
    if not p.is_absolute():
        url = url.set(database=str((ROOT / p).resolve()))
        return url.render_as_string(hide_password=False)
    return db_url


def get_db_url() -> str:
    return normalize_sqlite_url(os.environ.get(DB_URL_ENV, DEFAULT_DB_URL))


DB_URL = get_db_url()

# Use NullPool so SQLite file handles are released immediately (avoids Windows file locks in tests)
engine = create_engine(DB_URL, future=True, poolclass=NullPool)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, class_=Session)


@contextmanager
def get_session() -> Generator[Session, None, None]:
    # If the environment requests a different DB URL, switch before creating a session
    env_url = os.environ.get(DB_URL_ENV)
    if env_url and normalize_sqlite_url(env_url) != DB_URL:
        reconfigure(env_url)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def reconfigure(db_url: str) -> None:
    """Rebuild the SQLAlchemy engine/session for a new DB URL."""
    global DB_URL, engine, SessionLocal
    engine.dispose()
    DB_URL = normalize_sqlite_url(db_url)
    engine = create_engine(DB_URL, future=True, poolclass=NullPool)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, class_=Session)
