"""
ledger/due_ledger.py

Amount due per counterparty, derived from loadings and payments.

    billed = sum(record.total_price)   for the party's loadings
    paid   = sum(payment.amount)       for the party's payments
    due    = max(0, billed - paid)

A counterparty is (kind, name). The kind comes from the loading category
(client / farmer / agent) so a client and a farmer sharing a name keep
separate ledgers. Names are compared trimmed; case-insensitive matching is a
policy switch. Installment flags never change the arithmetic. Overpayment is
reported (`overpaid`) but never carried forward as credit.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from ...config import DEFAULT_POLICY, LedgerPolicy
from ...constants import PARTY_KIND_BY_CATEGORY
from .calculations import clamp_non_negative, round_money
from .types import DueAccount, LoadingRecord, Payment, PaymentCheck
from .validation import require_positive_amount

Key = Tuple[str, str]


class DueLedger:
    def __init__(
        self,
        records: Iterable[LoadingRecord],
        payments: Iterable[Payment],
        policy: LedgerPolicy = DEFAULT_POLICY,
    ):
        self.policy = policy
        self._records = list(records)
        self._payments = list(payments)
        # first spelling seen is the display name for the key
        self._display: Dict[Key, str] = {}
        for r in self._records:
            self._display.setdefault(self._key(r.party_kind, r.party_name), r.party_name.strip())
        for p in self._payments:
            self._display.setdefault(self._key(p.party_kind, p.party_name), p.party_name.strip())

    def name_key(self, name: str) -> str:
        n = (name or "").strip()
        return n.lower() if self.policy.case_insensitive_names else n

    def _key(self, kind: str, name: str) -> Key:
        return (kind, self.name_key(name))

    # ---- totals ----

    def billed_total(self, name: str, category: Optional[str] = None) -> float:
        """Sum of total_price over the party's records; all categories when None."""
        k = self.name_key(name)
        return round_money(sum(
            float(r.total_price or 0.0)
            for r in self._records
            if self.name_key(r.party_name) == k and (category is None or r.category == category)
        ))

    def billed_for_kind(self, name: str, kind: str) -> float:
        cats = [c for c, kd in PARTY_KIND_BY_CATEGORY.items() if kd == kind]
        return round_money(sum(self.billed_total(name, c) for c in cats))

    def paid_total(self, name: str, kind: Optional[str] = None) -> float:
        k = self.name_key(name)
        return round_money(sum(
            float(p.amount)
            for p in self._payments
            if self.name_key(p.party_name) == k and (kind is None or p.party_kind == kind)
        ))

    def due(self, name: str, kind: Optional[str] = None) -> float:
        if kind is None:
            billed = self.billed_total(name)
        else:
            billed = self.billed_for_kind(name, kind)
        return round_money(clamp_non_negative(billed - self.paid_total(name, kind)))

    # ---- accounts ----

    def account(self, name: str, kind: str) -> DueAccount:
        billed = self.billed_for_kind(name, kind)
        paid = self.paid_total(name, kind)
        return DueAccount(
            party_kind=kind,
            party_name=self._display.get(self._key(kind, name), (name or "").strip()),
            total_billed=billed,
            total_paid=paid,
            due=round_money(clamp_non_negative(billed - paid)),
            overpaid=round_money(clamp_non_negative(paid - billed)),
        )

    def accounts(self, kind: Optional[str] = None) -> List[DueAccount]:
        keys = sorted(
            (k for k in self._display if kind is None or k[0] == kind),
            key=lambda k: (k[0], self._display[k].lower(), self._display[k]),
        )
        return [self.account(self._display[k], k[0]) for k in keys]

    def pending_accounts(self, kind: Optional[str] = None) -> List[DueAccount]:
        """Accounts with something still owed, ordered by name."""
        return [a for a in self.accounts(kind) if a.due > 0]

    # ---- payments ----

    def check_payment(self, name: str, kind: str, amount) -> PaymentCheck:
        """An amount above the current due is a warning, never an error."""
        amt = require_positive_amount(amount)
        due_before = self.account(name, kind).due
        return PaymentCheck(due_before=due_before, amount=amt, exceeds_due=amt > due_before)


def project_after_payment(account: DueAccount, amount: float) -> DueAccount:
    """The account as it would read once `amount` more has been paid."""
    paid = round_money(account.total_paid + float(amount or 0.0))
    return DueAccount(
        party_kind=account.party_kind,
        party_name=account.party_name,
        total_billed=account.total_billed,
        total_paid=paid,
        due=round_money(clamp_non_negative(account.total_billed - paid)),
        overpaid=round_money(clamp_non_negative(paid - account.total_billed)),
    )
