# database/__init__.py
from __future__ import annotations

from pathlib import Path
import sqlite3

from ..config import DB_PATH
from . import schema as schema_module
from .versioning import ensure_version
from .seeders.default_data import seed as seed_default_data


def get_connection(db_path: Path | str | None = None) -> sqlite3.Connection:
    """
    Returns a sqlite3.Connection with:
      - WAL mode
      - foreign_keys ON
      - row_factory = sqlite3.Row (so rows behave like dicts and tuples)
    Ensures schema, version stamp & seed data are applied idempotently.
    """
    path = Path(db_path) if db_path is not None else DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    conn.execute("PRAGMA journal_mode = WAL;")

    # Always apply the schema (idempotent: CREATE ... IF NOT EXISTS)
    schema_module.apply_schema(conn)
    ensure_version(conn)

    # Seeders should be safe to run repeatedly (idempotent).
    seed_default_data(conn)

    conn.commit()
    return conn


__all__ = [
    "get_connection",
]
