"""
Value types shared by the calculator, stock ledger and due ledger.

Loading records and payments mirror the stored rows; positions, clamp results
and due accounts are derived on demand and never persisted.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional

from ...constants import INTAKE_CATEGORIES, PARTY_KIND_BY_CATEGORY


@dataclass
class Variety:
    code: str
    name: str


@dataclass
class LineItem:
    item_id: int | None
    loading_id: int | None
    variety_code: str
    no_trays: int
    loose_kg: float
    tray_kg: float
    total_kg: float
    price_per_kg: float = 0.0
    total_price: float = 0.0

    def copy(self, **changes) -> "LineItem":
        return replace(self, **changes)


@dataclass
class LoadingRecord:
    loading_id: int | None
    category: str
    bill_no: str
    party_name: str
    date: str
    vehicle_ref: str | None = None
    own_vehicle: bool = False
    address: str | None = None
    items: List[LineItem] = field(default_factory=list)
    total_trays: int = 0
    total_loose_kg: float = 0.0
    total_tray_kg: float = 0.0
    total_kg: float = 0.0
    net_weight_kg: float = 0.0
    total_price: float = 0.0

    @property
    def grand_total(self) -> float:
        """Billed money for the record (sum of line prices)."""
        return self.total_price

    @property
    def is_intake(self) -> bool:
        return self.category in INTAKE_CATEGORIES

    @property
    def party_kind(self) -> str:
        return PARTY_KIND_BY_CATEGORY[self.category]


@dataclass
class Payment:
    payment_id: int | None
    party_kind: str
    party_name: str
    date: str
    amount: float
    payment_mode: str
    reference_no: Optional[str] = None
    is_installment: bool = False
    installments: Optional[int] = None
    installment_number: Optional[int] = None
    account_number: Optional[str] = None
    ifsc: Optional[str] = None
    bank_name: Optional[str] = None
    proof_path: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class LineTotals:
    tray_kg: float
    total_kg: float
    total_price: float


@dataclass(frozen=True)
class StockPosition:
    variety_code: str
    name: str
    intake_kg: float
    dispatched_kg: float
    kg: float
    trays: int


@dataclass(frozen=True)
class ClampResult:
    trays: int
    loose: float
    was_clamped: bool
    max_kg: float

    @property
    def notice(self) -> str:
        if not self.was_clamped:
            return ""
        return f"Stock exceeded. Capped at {self.max_kg:g} Kgs"


@dataclass(frozen=True)
class DueAccount:
    party_kind: str
    party_name: str
    total_billed: float
    total_paid: float
    due: float
    overpaid: float = 0.0

    @property
    def status(self) -> str:
        from .calculations import status_from_paid
        return status_from_paid(self.total_billed, self.total_paid)


@dataclass(frozen=True)
class PaymentCheck:
    due_before: float
    amount: float
    exceeds_due: bool

    @property
    def warning(self) -> str:
        if not self.exceeds_due:
            return ""
        return (
            f"Amount {self.amount:,.2f} exceeds the remaining due of "
            f"{self.due_before:,.2f}. Record it anyway?"
        )


@dataclass(frozen=True)
class ProposedLine:
    """One row as typed into a loading form, before validation."""
    variety_code: str
    no_trays: object
    loose_kg: object = 0
    price_per_kg: object = 0
