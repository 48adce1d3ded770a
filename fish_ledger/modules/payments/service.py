"""
Payments service: due figures and recording payments.

Dues are recomputed from the full loading/payment history on every call.
An amount above the current due is accepted only when the caller confirms
it; the excess is not kept as credit.
"""
from __future__ import annotations

import logging
import sqlite3
from dataclasses import asdict, dataclass
from typing import Callable, List, Optional, Union

from ...config import DEFAULT_POLICY, LedgerPolicy
from ...database.repositories.audit_repo import AuditRepo
from ...database.repositories.loadings_repo import LoadingsRepo
from ...database.repositories.payments_repo import PaymentsRepo
from ...database.tx import immediate_tx
from ...utils.helpers import today_str
from ..ledger import payment_modes
from ..ledger.due_ledger import DueLedger, project_after_payment
from ..ledger.errors import ValidationError
from ..ledger.types import DueAccount, Payment, PaymentCheck
from ..ledger.validation import (
    normalize_party_name,
    optional_text,
    require_date,
    require_party_kind,
    require_positive_amount,
    require_positive_int,
)

_log = logging.getLogger(__name__)

Confirm = Union[bool, Callable[[PaymentCheck], bool]]


@dataclass
class PaymentOutcome:
    check: PaymentCheck
    account: DueAccount
    payment_id: Optional[int] = None

    @property
    def recorded(self) -> bool:
        return self.payment_id is not None


class PaymentsService:
    def __init__(self, conn: sqlite3.Connection, policy: LedgerPolicy = DEFAULT_POLICY):
        self.conn = conn
        self.policy = policy
        self.loadings = LoadingsRepo(conn)
        self.payments = PaymentsRepo(conn)
        self.audit = AuditRepo(conn)

    def due_ledger(self) -> DueLedger:
        return DueLedger(self.loadings.list_loadings(), self.payments.list_payments(), self.policy)

    def due_account(self, party_kind: str, party_name: str) -> DueAccount:
        return self.due_ledger().account(party_name, require_party_kind(party_kind))

    def accounts(self, party_kind: str | None = None) -> List[DueAccount]:
        kind = require_party_kind(party_kind) if party_kind else None
        return self.due_ledger().accounts(kind)

    def pending_accounts(self, party_kind: str | None = None) -> List[DueAccount]:
        kind = require_party_kind(party_kind) if party_kind else None
        return self.due_ledger().pending_accounts(kind)

    def check_payment(self, party_kind: str, party_name: str, amount) -> PaymentCheck:
        return self.due_ledger().check_payment(
            normalize_party_name(party_name), require_party_kind(party_kind), amount
        )

    def list_payments(self, party_kind: str, party_name: str) -> List[Payment]:
        return self.payments.list_for_party(require_party_kind(party_kind), party_name)

    # ---------------- write ----------------

    def build_payment(
        self,
        party_kind: str,
        party_name: str,
        amount,
        payment_mode: str,
        *,
        date: str | None = None,
        reference_no: str | None = None,
        is_installment: bool = False,
        installments=None,
        installment_number=None,
        account_number: str | None = None,
        ifsc: str | None = None,
        bank_name: str | None = None,
        proof_path: str | None = None,
        notes: str | None = None,
    ) -> Payment:
        """Validate raw form values into a Payment (raises ValidationError)."""
        kind = require_party_kind(party_kind)
        name = normalize_party_name(party_name)
        amt = require_positive_amount(amount)
        mode = payment_modes.ensure_valid(payment_mode)
        day = require_date(date or today_str())

        total_inst = inst_no = None
        if is_installment:
            total_inst = require_positive_int(installments, "Installments")
            inst_no = require_positive_int(installment_number, "Installment number")
            if inst_no > total_inst:
                raise ValidationError(
                    "Installment number cannot exceed the number of installments.",
                    field="installment_number",
                )

        ifsc_n = optional_text(ifsc)
        return Payment(
            payment_id=None,
            party_kind=kind,
            party_name=name,
            date=day,
            amount=amt,
            payment_mode=mode,
            reference_no=optional_text(reference_no),
            is_installment=bool(is_installment),
            installments=total_inst,
            installment_number=inst_no,
            account_number=optional_text(account_number),
            ifsc=ifsc_n.upper() if ifsc_n else None,
            bank_name=optional_text(bank_name),
            proof_path=optional_text(proof_path),
            notes=optional_text(notes),
        )

    def record_payment(self, payment: Payment, *, confirm_overpay: Confirm = False) -> PaymentOutcome:
        """
        Record `payment` against the party's due.

        When the amount exceeds the due, `confirm_overpay` decides: a bool, or
        a callable shown the PaymentCheck. Declined payments are not written
        and come back with payment_id None.
        """
        ledger = self.due_ledger()
        check = ledger.check_payment(payment.party_name, payment.party_kind, payment.amount)
        account = ledger.account(payment.party_name, payment.party_kind)
        if check.exceeds_due:
            ok = confirm_overpay(check) if callable(confirm_overpay) else bool(confirm_overpay)
            if not ok:
                _log.info("payment for %s %s not recorded: overpayment declined",
                          payment.party_kind, payment.party_name)
                return PaymentOutcome(check=check, account=account)
            _log.warning(
                "overpayment confirmed for %s %s: amount %.2f, due %.2f",
                payment.party_kind, payment.party_name, check.amount, check.due_before,
            )

        with immediate_tx(self.conn, "record payment"):
            payment_id = self.payments.create(payment)
            values = asdict(payment)
            values["payment_id"] = payment_id
            self.audit.log("CREATE", "payments", payment_id, None, values)

        _log.info("payment %s recorded: %s %s %.2f (%s)", payment_id, payment.party_kind,
                  payment.party_name, payment.amount, payment.payment_mode)
        return PaymentOutcome(
            check=check,
            account=project_after_payment(account, payment.amount),
            payment_id=payment_id,
        )
