#!/usr/bin/env python3
"""Registry database bootstrapper

Creates or upgrades the job_variants schema to the latest Alembic revision.

Defaults are safe:
- Uses Alembic migrations by default (no destructive operations)
- Accepts --db-url to override target DB (preferred over env var on Windows)
- Falls back to SQLAlchemy metadata create_all if Alembic is unavailable

Examples (PowerShell):
  .\\.venv\\Scripts\\python.exe scripts\\00_bootstrap\\bootstrap_db.py --db-url sqlite:///./data/variant_registry.db

Optional:
  --use-metadata      Use SQLAlchemy Base.metadata.create_all instead of Alembic
  --echo              Enable SQL echo for troubleshooting
"""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from db.models import Base
from db.session import DB_URL_ENV, DEFAULT_DB_URL, normalize_sqlite_url


def _ensure_sqlite_dir(db_url: str) -> None:
    # Create parent directory for SQLite files if needed
    try:
        url = make_url(db_url)
    except ArgumentError:
        return
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


def _run_alembic_upgrade_head(db_url: str) -> int:
    try:
        from alembic.config import Config
        from alembic import command
    except ImportError as e:
        print("[warn] Alembic not available:", e)
        return 2

    ini_path = PROJECT_ROOT / "alembic.ini"
    if not ini_path.is_file():
        print(f"[error] alembic.ini not found at {ini_path}")
        return 2

    cfg = Config(str(ini_path))
    # Ensure script location and URL are set correctly
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", db_url)
    print("Running Alembic upgrade to head...")
    try:
        command.upgrade(cfg, "head")
    except SQLAlchemyError as e:
        print(f"[error] Alembic upgrade failed: {e}")
        return 2
    print("Alembic upgrade complete.")
    return 0


def _create_with_metadata(db_url: str, echo: bool = False) -> int:
    print("Creating tables via SQLAlchemy metadata (create_all)...")
    engine = create_engine(db_url, echo=echo, future=True)
    try:
        Base.metadata.create_all(bind=engine)
    finally:
        engine.dispose()
    print("Metadata create_all complete.")
    return 0


def parse_args(argv: list[str]) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Bootstrap/upgrade the registry database schema")
    ap.add_argument("--db-url", dest="db_url", default=os.environ.get(DB_URL_ENV, DEFAULT_DB_URL),
                    help=f"Target database URL (overrides env var {DB_URL_ENV})")
    ap.add_argument("--use-metadata", action="store_true",
                    help="Use SQLAlchemy Base.metadata.create_all instead of Alembic")
    ap.add_argument("--echo", action="store_true", help="Echo SQL statements (metadata mode)")
    return ap.parse_args(argv)


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    db_url = normalize_sqlite_url(args.db_url)
    print(f"Target DB URL: {db_url}")
    _ensure_sqlite_dir(db_url)

    if args.use_metadata:
        return _create_with_metadata(db_url, echo=args.echo)

    # Prefer Alembic; fall back to metadata if Alembic is not available
    rc = _run_alembic_upgrade_head(db_url)
    if rc != 0:
        print("[warn] Falling back to SQLAlchemy metadata create_all...")
        return _create_with_metadata(db_url, echo=args.echo)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
