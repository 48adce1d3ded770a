from __future__ import annotations

"""
Repository for loadings (bills) and their line items.

Schema reference (see `database/schema.py`): `loadings` holds one row per
bill with its rolled-up totals, `loading_items` one row per variety line.
Items cascade with their loading; varieties cannot be deleted while used.

The repository stores what it is given. Line and header totals are computed
by the ledger engine and passed in; nothing here recalculates money or
weight. It never commits: the calling service owns the transaction.
"""

import sqlite3
from typing import List, Optional

from ...constants import BILL_PREFIX_BY_CATEGORY, CLIENT_DISPATCH, INTAKE_CATEGORIES
from ...modules.ledger.stock_ledger import VarietyMovement
from ...modules.ledger.types import LineItem, LoadingRecord
from ...utils.helpers import financial_year, parse_iso_date


class DomainError(Exception):
    """Domain-level error raised for validation / constraint issues."""
    pass


_HEADER_COLS = (
    "loading_id, category, bill_no, party_name, date, vehicle_ref, own_vehicle, address, "
    "total_trays, total_loose_kg, total_tray_kg, total_kg, net_weight_kg, total_price"
)
_ITEM_COLS = (
    "item_id, loading_id, variety_code, no_trays, loose_kg, tray_kg, total_kg, "
    "price_per_kg, total_price"
)


def _header(r: sqlite3.Row) -> LoadingRecord:
    d = dict(r)
    d["own_vehicle"] = bool(d["own_vehicle"])
    return LoadingRecord(**d)


def _item(r: sqlite3.Row) -> LineItem:
    return LineItem(**dict(r))


class LoadingsRepo:
    def __init__(self, conn: sqlite3.Connection):
        # ensure rows behave like dicts/tuples
        conn.row_factory = sqlite3.Row
        self.conn = conn

    # ------------------------------------------------------------------
    # Bill numbers
    # ------------------------------------------------------------------

    def next_bill_no(self, category: str, on_date: str | None = None) -> str:
        """
        <PREFIX>-<FY>-<NNNN>, e.g. CL-25-26-0001. The counter restarts every
        financial year (April to March) per category.
        """
        fy = financial_year(parse_iso_date(on_date))
        prefix = f"{BILL_PREFIX_BY_CATEGORY[category]}-{fy}-"
        row = self.conn.execute(
            "SELECT MAX(bill_no) AS m FROM loadings WHERE category=? AND bill_no LIKE ?",
            (category, prefix + "%"),
        ).fetchone()
        last = 0
        if row and row["m"]:
            tail = row["m"][len(prefix):]
            last = int(tail) if tail.isdigit() else 0
        return f"{prefix}{last + 1:04d}"

    # ------------------------------------------------------------------
    # Headers
    # ------------------------------------------------------------------

    def create(self, rec: LoadingRecord) -> int:
        """Insert header + lines. Returns the new loading_id."""
        try:
            cur = self.conn.execute(
                """
                INSERT INTO loadings(
                    category, bill_no, party_name, date, vehicle_ref, own_vehicle, address,
                    total_trays, total_loose_kg, total_tray_kg, total_kg, net_weight_kg, total_price
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    rec.category, rec.bill_no, rec.party_name, rec.date, rec.vehicle_ref,
                    int(bool(rec.own_vehicle)), rec.address,
                    rec.total_trays, rec.total_loose_kg, rec.total_tray_kg, rec.total_kg,
                    rec.net_weight_kg, rec.total_price,
                ),
            )
        except sqlite3.IntegrityError as e:
            if "UNIQUE" in str(e):
                raise DomainError(f"Bill number '{rec.bill_no}' already exists.") from e
            raise
        loading_id = int(cur.lastrowid)
        for it in rec.items:
            self.add_item(loading_id, it)
        return loading_id

    def get(self, loading_id: int) -> Optional[LoadingRecord]:
        r = self.conn.execute(
            f"SELECT {_HEADER_COLS} FROM loadings WHERE loading_id=?", (loading_id,)
        ).fetchone()
        if not r:
            return None
        rec = _header(r)
        rec.items = self.list_items(loading_id)
        return rec

    def list_loadings(self, category: str | None = None, *, with_items: bool = False) -> List[LoadingRecord]:
        if category:
            rows = self.conn.execute(
                f"SELECT {_HEADER_COLS} FROM loadings WHERE category=? ORDER BY date DESC, loading_id DESC",
                (category,),
            ).fetchall()
        else:
            rows = self.conn.execute(
                f"SELECT {_HEADER_COLS} FROM loadings ORDER BY date DESC, loading_id DESC"
            ).fetchall()
        recs = [_header(r) for r in rows]
        if with_items:
            for rec in recs:
                rec.items = self.list_items(rec.loading_id)
        return recs

    def update_totals(self, loading_id: int, totals: dict) -> None:
        self.conn.execute(
            """
            UPDATE loadings
               SET total_trays=?, total_loose_kg=?, total_tray_kg=?,
                   total_kg=?, net_weight_kg=?, total_price=?
             WHERE loading_id=?
            """,
            (
                totals["total_trays"], totals["total_loose_kg"], totals["total_tray_kg"],
                totals["total_kg"], totals["net_weight_kg"], totals["total_price"],
                loading_id,
            ),
        )

    def delete(self, loading_id: int) -> None:
        # items go with it (ON DELETE CASCADE)
        self.conn.execute("DELETE FROM loadings WHERE loading_id=?", (loading_id,))

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def list_items(self, loading_id: int) -> List[LineItem]:
        rows = self.conn.execute(
            f"SELECT {_ITEM_COLS} FROM loading_items WHERE loading_id=? ORDER BY item_id",
            (loading_id,),
        ).fetchall()
        return [_item(r) for r in rows]

    def get_item(self, item_id: int) -> Optional[LineItem]:
        r = self.conn.execute(
            f"SELECT {_ITEM_COLS} FROM loading_items WHERE item_id=?", (item_id,)
        ).fetchone()
        return _item(r) if r else None

    def item_count(self, loading_id: int) -> int:
        row = self.conn.execute(
            "SELECT COUNT(*) AS n FROM loading_items WHERE loading_id=?", (loading_id,)
        ).fetchone()
        return int(row["n"])

    def add_item(self, loading_id: int, it: LineItem) -> int:
        try:
            cur = self.conn.execute(
                """
                INSERT INTO loading_items(
                    loading_id, variety_code, no_trays, loose_kg, tray_kg, total_kg,
                    price_per_kg, total_price
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    loading_id, it.variety_code, int(it.no_trays), it.loose_kg, it.tray_kg,
                    it.total_kg, it.price_per_kg, it.total_price,
                ),
            )
        except sqlite3.IntegrityError as e:
            if "FOREIGN KEY" in str(e):
                raise DomainError(f"Unknown variety '{it.variety_code}'.") from e
            raise
        return int(cur.lastrowid)

    def update_item(self, it: LineItem) -> None:
        self.conn.execute(
            """
            UPDATE loading_items
               SET no_trays=?, loose_kg=?, tray_kg=?, total_kg=?, price_per_kg=?, total_price=?
             WHERE item_id=?
            """,
            (
                int(it.no_trays), it.loose_kg, it.tray_kg, it.total_kg,
                it.price_per_kg, it.total_price, it.item_id,
            ),
        )

    def delete_item(self, item_id: int) -> None:
        self.conn.execute("DELETE FROM loading_items WHERE item_id=?", (item_id,))

    # ------------------------------------------------------------------
    # Stock aggregation
    # ------------------------------------------------------------------

    def variety_movements(self) -> List[VarietyMovement]:
        """
        Intake and dispatch kilograms per variety over the full history.
        Every variety is listed, including ones that never moved.
        """
        intake_ph = ",".join("?" for _ in INTAKE_CATEGORIES)
        rows = self.conn.execute(
            f"""
            SELECT v.code AS variety_code,
                   v.name AS name,
                   COALESCE(SUM(CASE WHEN l.category IN ({intake_ph}) THEN li.total_kg END), 0) AS intake_kg,
                   COALESCE(SUM(CASE WHEN l.category = ? THEN li.total_kg END), 0) AS dispatched_kg
            FROM fish_varieties v
            LEFT JOIN loading_items li ON li.variety_code = v.code
            LEFT JOIN loadings l       ON l.loading_id = li.loading_id
            GROUP BY v.code, v.name
            ORDER BY v.name
            """,
            (*INTAKE_CATEGORIES, CLIENT_DISPATCH),
        ).fetchall()
        return [
            VarietyMovement(
                variety_code=r["variety_code"],
                name=r["name"],
                intake_kg=float(r["intake_kg"]),
                dispatched_kg=float(r["dispatched_kg"]),
            )
            for r in rows
        ]
