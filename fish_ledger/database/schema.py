from pathlib import Path
import logging
import sqlite3
import sys

_log = logging.getLogger(__name__)

SQL = r"""
PRAGMA foreign_keys = ON;

/* ======================== MASTER DATA ======================== */

/* -------- fish varieties -------- */
CREATE TABLE IF NOT EXISTS fish_varieties (
    code TEXT PRIMARY KEY CHECK (code = UPPER(TRIM(code)) AND LENGTH(code) > 0),
    name TEXT NOT NULL
);

/* ======================== LOADINGS ======================== */

/* -------- loading header (one bill) -------- */
CREATE TABLE IF NOT EXISTS loadings (
    loading_id     INTEGER PRIMARY KEY AUTOINCREMENT,
    category       TEXT NOT NULL CHECK (category IN ('FARMER_INTAKE','AGENT_INTAKE','CLIENT_DISPATCH')),
    bill_no        TEXT NOT NULL,
    party_name     TEXT NOT NULL CHECK (LENGTH(TRIM(party_name)) > 0),
    date           DATE NOT NULL DEFAULT CURRENT_DATE,
    vehicle_ref    TEXT,
    own_vehicle    INTEGER NOT NULL DEFAULT 0 CHECK (own_vehicle IN (0,1)),
    address        TEXT,
    total_trays    INTEGER NOT NULL DEFAULT 0 CHECK (total_trays >= 0),
    total_loose_kg REAL NOT NULL DEFAULT 0 CHECK (total_loose_kg >= 0),
    total_tray_kg  REAL NOT NULL DEFAULT 0 CHECK (total_tray_kg >= 0),
    total_kg       REAL NOT NULL DEFAULT 0 CHECK (total_kg >= 0),
    net_weight_kg  REAL NOT NULL DEFAULT 0 CHECK (net_weight_kg >= 0),
    total_price    REAL NOT NULL DEFAULT 0 CHECK (total_price >= 0),
    created_at     TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (category, bill_no)
);
CREATE INDEX IF NOT EXISTS idx_loadings_party ON loadings(category, party_name);
CREATE INDEX IF NOT EXISTS idx_loadings_date  ON loadings(date);

/* -------- loading lines -------- */
CREATE TABLE IF NOT EXISTS loading_items (
    item_id      INTEGER PRIMARY KEY AUTOINCREMENT,
    loading_id   INTEGER NOT NULL,
    variety_code TEXT NOT NULL,
    no_trays     INTEGER NOT NULL DEFAULT 0 CHECK (no_trays >= 0),
    loose_kg     REAL NOT NULL DEFAULT 0 CHECK (loose_kg >= 0),
    tray_kg      REAL NOT NULL DEFAULT 0 CHECK (tray_kg >= 0),
    total_kg     REAL NOT NULL DEFAULT 0 CHECK (total_kg >= 0),
    price_per_kg REAL NOT NULL DEFAULT 0 CHECK (price_per_kg >= 0),
    total_price  REAL NOT NULL DEFAULT 0 CHECK (total_price >= 0),
    FOREIGN KEY (loading_id)   REFERENCES loadings(loading_id) ON DELETE CASCADE,
    FOREIGN KEY (variety_code) REFERENCES fish_varieties(code) ON DELETE RESTRICT
);
CREATE INDEX IF NOT EXISTS idx_loading_items_loading ON loading_items(loading_id);
CREATE INDEX IF NOT EXISTS idx_loading_items_variety ON loading_items(variety_code);

/* ======================== PAYMENTS ======================== */

/* append-only; never updated after insert */
CREATE TABLE IF NOT EXISTS payments (
    payment_id         INTEGER PRIMARY KEY AUTOINCREMENT,
    party_kind         TEXT NOT NULL CHECK (party_kind IN ('client','farmer','agent')),
    party_name         TEXT NOT NULL CHECK (LENGTH(TRIM(party_name)) > 0),
    date               DATE NOT NULL DEFAULT CURRENT_DATE,
    amount             REAL NOT NULL CHECK (amount > 0),
    payment_mode       TEXT NOT NULL CHECK (payment_mode IN ('CASH','AC','UPI','CHEQUE')),
    reference_no       TEXT,
    is_installment     INTEGER NOT NULL DEFAULT 0 CHECK (is_installment IN (0,1)),
    installments       INTEGER CHECK (installments IS NULL OR installments > 0),
    installment_number INTEGER CHECK (installment_number IS NULL OR installment_number > 0),
    account_number     TEXT,
    ifsc               TEXT,
    bank_name          TEXT,
    proof_path         TEXT,
    notes              TEXT,
    created_at         TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    CHECK (installments IS NULL OR installment_number IS NULL OR installment_number <= installments)
);
CREATE INDEX IF NOT EXISTS idx_payments_party ON payments(party_kind, party_name);

/* -------- logs -------- */
CREATE TABLE IF NOT EXISTS audit_logs (
    log_id      INTEGER PRIMARY KEY AUTOINCREMENT,
    action_type TEXT NOT NULL CHECK (action_type IN ('CREATE','UPDATE','DELETE')),
    table_name  TEXT NOT NULL,
    record_id   TEXT,
    action_time TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    old_values  TEXT,
    new_values  TEXT
);
CREATE INDEX IF NOT EXISTS idx_audit_record ON audit_logs(table_name, record_id);
"""


def apply_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(SQL)


def init_schema(db_path: Path | str = "fish_ledger.db") -> None:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        # Apply (idempotent) schema
        apply_schema(conn)
        conn.commit()
    _log.info("schema applied to %s", db_path)


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else Path(__file__).resolve().parents[1] / "data" / "fish_ledger.db"
    init_schema(target)
