# tests/test_payment_form_ui.py
from __future__ import annotations

from PySide6.QtWidgets import QDialog

from fish_ledger.modules.ledger.types import DueAccount
from fish_ledger.modules.payments.form import PaymentForm

RAVI = DueAccount("client", "Ravi", 150000, 80000, 70000)
ANIL = DueAccount("client", "Anil", 500, 0, 500)


def _form(qtbot, confirm=None, **kw):
    form = PaymentForm([ANIL, RAVI], confirm=confirm, **kw)
    qtbot.addWidget(form)
    return form


def test_shows_billed_paid_and_remaining(qtbot):
    form = _form(qtbot, initial_party="Ravi")
    assert form.account is RAVI
    assert form.lbl_billed.text() == "150,000.00"
    assert form.lbl_paid.text() == "80,000.00"
    assert form.lbl_remaining.text() == "70,000.00"
    form.spin_amount.setValue(20000)
    assert form.lbl_after.text() == "50,000.00"


def test_overpayment_declined_keeps_dialog_open(qtbot):
    asked = []
    form = _form(qtbot, confirm=lambda chk: asked.append(chk) or False, initial_party="Ravi")
    form.spin_amount.setValue(90000)
    assert form.lbl_after.text() == "0.00"
    form.accept()
    assert asked and asked[0].due_before == 70000 and asked[0].exceeds_due
    assert form.payload() is None
    assert form.result() != QDialog.Accepted


def test_overpayment_confirmed(qtbot):
    form = _form(qtbot, confirm=lambda chk: True, initial_party="Ravi")
    form.spin_amount.setValue(90000)
    form.accept()
    p = form.payload()
    assert p["amount"] == 90000
    assert p["party_kind"] == "client"
    assert p["party_name"] == "Ravi"
    assert p["payment_mode"] == "CASH"
    assert form.confirmed_overpay is True


def test_within_due_does_not_ask(qtbot):
    asked = []
    form = _form(qtbot, confirm=lambda chk: asked.append(chk) or True)
    form.spin_amount.setValue(100)
    form.accept()
    assert asked == []
    assert form.payload()["party_name"] == "Anil"
    assert form.confirmed_overpay is False


def test_zero_amount_is_rejected(qtbot):
    form = _form(qtbot)
    form.accept()
    assert form.payload() is None
    assert not form.lbl_error.isHidden()


def test_bank_details_only_for_bank_transfer(qtbot):
    form = _form(qtbot)
    assert form.bank_box.isHidden()
    form.cmb_mode.setCurrentIndex(form.cmb_mode.findData("AC"))
    assert not form.bank_box.isHidden()
    form.edt_ifsc.setText("hdfc0000001")
    form.spin_amount.setValue(100)
    p = form.get_payload()
    assert p["payment_mode"] == "AC"
    assert p["ifsc"] == "hdfc0000001"      # uppercased by the service


def test_installment_number_cannot_exceed_total(qtbot):
    form = _form(qtbot)
    form.spin_amount.setValue(100)
    form.chk_installment.setChecked(True)
    form.spin_installments.setValue(2)
    form.spin_installment_no.setValue(3)
    assert form.get_payload() is None
    form.spin_installment_no.setValue(2)
    p = form.get_payload()
    assert (p["is_installment"], p["installments"], p["installment_number"]) == (True, 2, 2)
