"""Read side of the stock ledger: snapshots built from the loadings tables."""
from __future__ import annotations

import sqlite3
from typing import List

from ...config import DEFAULT_POLICY, LedgerPolicy
from ...database.repositories.loadings_repo import LoadingsRepo
from ..ledger.stock_ledger import StockLedger
from ..ledger.types import StockPosition


class StockService:
    def __init__(self, conn: sqlite3.Connection, policy: LedgerPolicy = DEFAULT_POLICY):
        self.conn = conn
        self.policy = policy
        self.loadings = LoadingsRepo(conn)

    def ledger(self) -> StockLedger:
        """Fresh snapshot; balances are never cached."""
        return StockLedger(self.loadings.variety_movements(), self.policy)

    def positions(self) -> List[StockPosition]:
        return self.ledger().positions()

    def available_varieties(self) -> List[StockPosition]:
        return self.ledger().available_varieties()

    def net_stock(self, variety_code: str) -> StockPosition:
        return self.ledger().net_stock((variety_code or "").strip().upper())
