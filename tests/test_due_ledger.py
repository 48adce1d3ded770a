# tests/test_due_ledger.py
from __future__ import annotations

import itertools

import pytest

from fish_ledger.config import LedgerPolicy
from fish_ledger.constants import AGENT_INTAKE, CLIENT_DISPATCH, FARMER_INTAKE
from fish_ledger.modules.ledger.due_ledger import DueLedger, project_after_payment
from fish_ledger.modules.ledger.errors import ValidationError
from fish_ledger.modules.ledger.types import LoadingRecord, Payment


def _bill(name, total, category=CLIENT_DISPATCH, bill_no="B"):
    return LoadingRecord(None, category, bill_no, name, "2025-06-01", total_price=total)


def _pay(name, amount, kind="client", **kw):
    return Payment(None, kind, name, "2025-06-02", amount, "CASH", **kw)


@pytest.fixture()
def ravi_ledger():
    records = [_bill("Ravi", 100000, bill_no="CL-1"), _bill("Ravi", 50000, bill_no="CL-2")]
    payments = [_pay("Ravi", 60000), _pay("Ravi", 20000)]
    return DueLedger(records, payments)


def test_example_due_after_two_bills_and_two_payments(ravi_ledger):
    assert ravi_ledger.billed_total("Ravi", CLIENT_DISPATCH) == 150000
    assert ravi_ledger.paid_total("Ravi", "client") == 80000
    assert ravi_ledger.due("Ravi", "client") == 70000


def test_example_overpayment_warns_and_due_floors_at_zero(ravi_ledger):
    check = ravi_ledger.check_payment("Ravi", "client", 90000)
    assert check.exceeds_due is True
    assert check.due_before == 70000
    assert "exceeds" in check.warning

    after = project_after_payment(ravi_ledger.account("Ravi", "client"), 90000)
    assert after.total_paid == 170000
    assert after.due == 0
    assert after.overpaid == 20000
    assert after.status == "paid"

    ledger = DueLedger(
        [_bill("Ravi", 100000), _bill("Ravi", 50000)],
        [_pay("Ravi", 60000), _pay("Ravi", 20000), _pay("Ravi", 90000)],
    )
    assert ledger.paid_total("Ravi") == 170000
    assert ledger.due("Ravi") == 0


def test_payment_within_due_has_no_warning(ravi_ledger):
    check = ravi_ledger.check_payment("Ravi", "client", 70000)
    assert check.exceeds_due is False
    assert check.warning == ""


@pytest.mark.parametrize("amount", [0, -5, "abc"])
def test_check_payment_rejects_non_positive_amounts(ravi_ledger, amount):
    with pytest.raises(ValidationError):
        ravi_ledger.check_payment("Ravi", "client", amount)


def test_due_is_never_negative():
    for billed, paid in itertools.product([0, 10, 999.99, 150000], [0, 5, 1000, 200000]):
        ledger = DueLedger([_bill("A", billed)] if billed else [], [_pay("A", paid)] if paid else [])
        assert ledger.due("A") >= 0
        assert ledger.due("A") == max(0, round(billed - paid, 2))


def test_names_are_trimmed_and_case_sensitive_by_default():
    ledger = DueLedger([_bill("  Ravi ", 1000), _bill("ravi", 500)], [_pay("Ravi", 200)])
    assert ledger.billed_total("Ravi") == 1000
    assert ledger.due("Ravi", "client") == 800
    assert ledger.due("ravi", "client") == 500


def test_case_insensitive_matching_is_a_policy_switch():
    ledger = DueLedger(
        [_bill("Ravi", 1000), _bill("ravi", 500)],
        [_pay("RAVI", 200)],
        LedgerPolicy(case_insensitive_names=True),
    )
    assert ledger.due("Ravi", "client") == 1300
    assert len(ledger.accounts("client")) == 1


def test_same_name_keeps_separate_ledgers_per_kind():
    ledger = DueLedger(
        [_bill("Ravi", 1000), _bill("Ravi", 400, category=FARMER_INTAKE)],
        [_pay("Ravi", 100, kind="farmer")],
    )
    assert ledger.account("Ravi", "client").due == 1000
    farmer = ledger.account("Ravi", "farmer")
    assert (farmer.total_billed, farmer.total_paid, farmer.due) == (400, 100, 300)


def test_unknown_party_has_zero_totals():
    ledger = DueLedger([], [])
    acc = ledger.account("Nobody", "client")
    assert (acc.total_billed, acc.total_paid, acc.due, acc.status) == (0, 0, 0, "paid")


def test_installments_do_not_change_arithmetic():
    plain = DueLedger([_bill("Ravi", 1000)], [_pay("Ravi", 300)])
    inst = DueLedger(
        [_bill("Ravi", 1000)],
        [_pay("Ravi", 300, is_installment=True, installments=3, installment_number=1)],
    )
    assert plain.due("Ravi", "client") == inst.due("Ravi", "client") == 700


def test_pending_accounts_only_lists_dues_by_name():
    records = [
        _bill("Suresh", 500),
        _bill("Anil", 300),
        _bill("Kiran", 200),
        _bill("Babu", 900, category=AGENT_INTAKE),
    ]
    payments = [_pay("Kiran", 200)]
    ledger = DueLedger(records, payments)
    assert [a.party_name for a in ledger.pending_accounts("client")] == ["Anil", "Suresh"]
    assert [a.party_name for a in ledger.pending_accounts("agent")] == ["Babu"]
    statuses = {a.party_name: a.status for a in ledger.accounts("client")}
    assert statuses == {"Anil": "unpaid", "Kiran": "paid", "Suresh": "unpaid"}


def test_partial_status():
    ledger = DueLedger([_bill("Ravi", 1000)], [_pay("Ravi", 1)])
    assert ledger.account("Ravi", "client").status == "partial"
