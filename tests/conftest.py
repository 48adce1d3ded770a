# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - pytest-qt owns QApplication (use qapp/qtbot fixtures)
# - Qt runs headless (QT_QPA_PLATFORM=offscreen, set before PySide6 loads)
# - Every test gets its own on-disk SQLite DB under tmp_path, with the
#   schema applied and the default varieties (RC, ROHU, CATLA) seeded
# - conn.row_factory = sqlite3.Row, PRAGMA foreign_keys=ON (get_connection)
# ---------------------------------------------------------------------

from __future__ import annotations

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import sqlite3
from typing import Iterable

import pytest

from fish_ledger.config import DEFAULT_POLICY, LedgerPolicy
from fish_ledger.constants import CLIENT_DISPATCH, FARMER_INTAKE
from fish_ledger.database import get_connection
from fish_ledger.modules.ledger.types import ProposedLine
from fish_ledger.modules.loadings.service import LoadingsService
from fish_ledger.modules.payments.service import PaymentsService
from fish_ledger.modules.stock.service import StockService


# ---------- Qt: let pytest-qt own the app ----------
@pytest.fixture(scope="session")
def app(qapp):  # alias to match code that expects an `app` fixture
    return qapp


# ---------- Per-test database ----------
@pytest.fixture()
def conn(tmp_path) -> sqlite3.Connection:
    con = get_connection(tmp_path / "fish_ledger.db")
    try:
        yield con
    finally:
        con.close()


@pytest.fixture()
def policy() -> LedgerPolicy:
    return DEFAULT_POLICY


@pytest.fixture()
def loadings(conn, policy) -> LoadingsService:
    return LoadingsService(conn, policy)


@pytest.fixture()
def payments(conn, policy) -> PaymentsService:
    return PaymentsService(conn, policy)


@pytest.fixture()
def stock(conn, policy) -> StockService:
    return StockService(conn, policy)


# ---------- Handy writers ----------
@pytest.fixture()
def add_loading(loadings):
    """
    add_loading(category, party, [(code, trays, loose, price), ...], **header)
    -> CreatedLoading
    """
    def _add(category: str, party: str, lines: Iterable[tuple], **kw):
        proposed = [ProposedLine(*ln) for ln in lines]
        return loadings.create_loading(category, party, proposed, **kw)
    return _add


@pytest.fixture()
def intake(add_loading):
    def _intake(code: str, trays: int = 0, loose: float = 0.0, price: float = 0.0, party: str = "Mohan", **kw):
        return add_loading(FARMER_INTAKE, party, [(code, trays, loose, price)], **kw)
    return _intake


@pytest.fixture()
def dispatch(add_loading):
    def _dispatch(code: str, trays: int = 0, loose: float = 0.0, price: float = 0.0, party: str = "Ravi", **kw):
        return add_loading(CLIENT_DISPATCH, party, [(code, trays, loose, price)], **kw)
    return _dispatch


@pytest.fixture()
def row_count(conn):
    def _count(table: str) -> int:
        return int(conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0])
    return _count
