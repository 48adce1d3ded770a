from __future__ import annotations

import sqlite3
from typing import List, Optional

from ...modules.ledger.types import Payment


class PaymentsRepo:
    """
    Append-only store of counterparty payments.

    No update/delete: a payment is never mutated after
    creation. Validation happens in the payments service; the table CHECKs
    (amount > 0, known mode, installment bounds) are the last line.
    """

    _COLS = (
        "payment_id, party_kind, party_name, date, amount, payment_mode, reference_no, "
        "is_installment, installments, installment_number, account_number, ifsc, "
        "bank_name, proof_path, notes"
    )

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    @staticmethod
    def _row(r: sqlite3.Row) -> Payment:
        d = dict(r)
        d["is_installment"] = bool(d["is_installment"])
        return Payment(**d)

    def create(self, p: Payment) -> int:
        cur = self.conn.execute(
            """
            INSERT INTO payments(
                party_kind, party_name, date, amount, payment_mode, reference_no,
                is_installment, installments, installment_number,
                account_number, ifsc, bank_name, proof_path, notes
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                p.party_kind, p.party_name, p.date, float(p.amount), p.payment_mode,
                p.reference_no, int(bool(p.is_installment)), p.installments,
                p.installment_number, p.account_number, p.ifsc, p.bank_name,
                p.proof_path, p.notes,
            ),
        )
        return int(cur.lastrowid)

    def get(self, payment_id: int) -> Optional[Payment]:
        r = self.conn.execute(
            f"SELECT {self._COLS} FROM payments WHERE payment_id=?", (payment_id,)
        ).fetchone()
        return self._row(r) if r else None

    def list_payments(self, party_kind: str | None = None) -> List[Payment]:
        if party_kind:
            rows = self.conn.execute(
                f"SELECT {self._COLS} FROM payments WHERE party_kind=? ORDER BY date, payment_id",
                (party_kind,),
            ).fetchall()
        else:
            rows = self.conn.execute(
                f"SELECT {self._COLS} FROM payments ORDER BY date, payment_id"
            ).fetchall()
        return [self._row(r) for r in rows]

    def list_for_party(self, party_kind: str, party_name: str) -> List[Payment]:
        rows = self.conn.execute(
            f"""
            SELECT {self._COLS} FROM payments
            WHERE party_kind=? AND TRIM(party_name)=?
            ORDER BY date, payment_id
            """,
            (party_kind, (party_name or "").strip()),
        ).fetchall()
        return [self._row(r) for r in rows]
