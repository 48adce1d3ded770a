"""
Billing and reconciliation engine.

Pure Python: no Qt, no connections. Services in modules/loadings and
modules/payments feed it rows from the repositories.
"""
from .errors import LedgerError, ValidationError, RecordNotFound, PersistenceFailure
from .types import (
    Variety,
    LineItem,
    LoadingRecord,
    Payment,
    LineTotals,
    StockPosition,
    ClampResult,
    DueAccount,
    PaymentCheck,
    ProposedLine,
)
from .calculations import (
    line_weight,
    dispatch_grand_total,
    intake_line_total_price,
    dispatch_line_total_price,
    compute_line,
    record_totals,
)
from .stock_ledger import StockLedger, VarietyMovement
from .line_edit_session import LineEditSession, LineState
from .due_ledger import DueLedger, project_after_payment

__all__ = [
    "LedgerError",
    "ValidationError",
    "RecordNotFound",
    "PersistenceFailure",
    "Variety",
    "LineItem",
    "LoadingRecord",
    "Payment",
    "LineTotals",
    "StockPosition",
    "ClampResult",
    "DueAccount",
    "PaymentCheck",
    "ProposedLine",
    "line_weight",
    "dispatch_grand_total",
    "intake_line_total_price",
    "dispatch_line_total_price",
    "compute_line",
    "record_totals",
    "StockLedger",
    "VarietyMovement",
    "LineEditSession",
    "LineState",
    "DueLedger",
    "project_after_payment",
]
