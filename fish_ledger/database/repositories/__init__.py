# database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from fish_ledger.database.repositories import (
        VarietiesRepo, VarietiesDomainError,
        LoadingsRepo, LoadingsDomainError,
        PaymentsRepo,
        AuditRepo, diff_values,
    )
"""

# ---------------- Varieties ----------------
from .varieties_repo import (
    VarietiesRepo,
    DomainError as VarietiesDomainError,
)

# ---------------- Loadings -----------------
from .loadings_repo import (
    LoadingsRepo,
    DomainError as LoadingsDomainError,
)

# ---------------- Payments -----------------
from .payments_repo import PaymentsRepo

# ------------------ Audit ------------------
from .audit_repo import AuditRepo, AuditEntry, diff_values

__all__ = [
    "VarietiesRepo",
    "VarietiesDomainError",
    "LoadingsRepo",
    "LoadingsDomainError",
    "PaymentsRepo",
    "AuditRepo",
    "AuditEntry",
    "diff_values",
]
