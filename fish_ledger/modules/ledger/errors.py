from __future__ import annotations


class LedgerError(Exception):
    """Base class for billing/reconciliation errors surfaced to the UI."""


class ValidationError(LedgerError):
    """Bad input (missing field, non-numeric or negative quantity, amount <= 0).

    Raised before any ledger mutation is attempted.
    """

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class RecordNotFound(LedgerError):
    """A loading, line item or payment id that does not exist."""


class PersistenceFailure(LedgerError):
    """A storage error; the transaction has already been rolled back."""

    def __init__(self, message: str, *, original: BaseException | None = None):
        super().__init__(message)
        self.original = original
