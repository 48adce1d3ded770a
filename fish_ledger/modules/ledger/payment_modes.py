from __future__ import annotations
from typing import Optional

from .errors import ValidationError

# ---------- Canonical set & order ----------
VALID_MODES: tuple[str, ...] = ("CASH", "AC", "UPI", "CHEQUE")

# ---------- Human labels ----------
LABELS = {
    "CASH":   "Cash",
    "AC":     "Bank Transfer",
    "UPI":    "UPI",
    "CHEQUE": "Cheque",
}

# ---------- Reference field captions (UI copy) ----------
REFERENCE_HINTS = {
    "CASH":   "",
    "AC":     "Transaction reference",
    "UPI":    "UTR / TXN ID",
    "CHEQUE": "Cheque number",
}

# Bank transfer carries the counterparty's account details.
MODES_WITH_BANK_DETAILS = frozenset({"AC"})

# ---------- API ----------

def normalize(mode: Optional[str]) -> Optional[str]:
    """Uppercase & strip; return None if empty. 'BANK_TRANSFER' maps to 'AC'."""
    if mode is None:
        return None
    m = str(mode).strip().upper()
    if m in ("BANK_TRANSFER", "BANK TRANSFER"):
        m = "AC"
    return m or None


def ensure_valid(mode: Optional[str]) -> str:
    """Return the normalized mode if valid; raise ValidationError if not."""
    m = normalize(mode)
    if m not in VALID_MODES:
        raise ValidationError("payment mode must be one of: CASH, AC, UPI, CHEQUE", field="payment_mode")
    return m  # type: ignore[return-value]


def label(mode: str) -> str:
    m = normalize(mode)
    if m in LABELS:
        return LABELS[m]  # type: ignore[index]
    return (mode or "").strip().title()


def reference_hint(mode: str) -> str:
    return REFERENCE_HINTS.get(normalize(mode) or "", "")


def needs_bank_details(mode: str) -> bool:
    return normalize(mode) in MODES_WITH_BANK_DETAILS
