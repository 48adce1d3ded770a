# database/tx.py
from __future__ import annotations

from contextlib import contextmanager
import logging
import sqlite3

from ..modules.ledger.errors import PersistenceFailure

_log = logging.getLogger(__name__)


@contextmanager
def immediate_tx(conn: sqlite3.Connection, what: str = "write"):
    """
    Start an IMMEDIATE transaction (write lock taken up front, so reads made
    inside it see a stable stock picture), commit on success, rollback on error.

    sqlite3 errors are re-raised as PersistenceFailure after the rollback;
    anything else (validation, domain errors) propagates unchanged.
    """
    cur = conn.cursor()
    try:
        cur.execute("BEGIN IMMEDIATE")
        yield conn
        conn.commit()
    except sqlite3.Error as e:
        conn.rollback()
        _log.exception("%s failed; rolled back", what)
        raise PersistenceFailure(f"Could not save ({what}): {e}", original=e) from e
    except Exception:
        conn.rollback()
        raise
    finally:
        cur.close()
