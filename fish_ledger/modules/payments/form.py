"""
Dialog for recording a payment against a counterparty's due.

Collects: party (pending accounts), amount, mode, reference, date,
installment details, bank details (bank transfer), proof path, notes.
Shows billed / paid / remaining for the chosen party and what remains after
this payment.

An amount above the remaining due is not an error: the dialog asks for
confirmation through `confirm` (a callable shown the PaymentCheck; defaults
to a Yes/No message box) and stays open when declined.
"""
from __future__ import annotations

from typing import Callable, Iterable, List, Optional

from PySide6.QtCore import QDate, Qt
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDateEdit,
    QDialog,
    QDialogButtonBox,
    QDoubleSpinBox,
    QFormLayout,
    QGroupBox,
    QLabel,
    QLineEdit,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from ...utils import ui_helpers as ui
from ...utils.helpers import fmt_money
from ..ledger import payment_modes
from ..ledger.due_ledger import project_after_payment
from ..ledger.types import DueAccount, PaymentCheck


class PaymentForm(QDialog):
    def __init__(
        self,
        accounts: Iterable[DueAccount],
        parent: QWidget | None = None,
        *,
        confirm: Optional[Callable[[PaymentCheck], bool]] = None,
        initial_party: str | None = None,
    ):
        super().__init__(parent)
        self.setWindowTitle("Record Payment")
        self.setModal(True)
        self.setMinimumWidth(440)

        self._accounts: List[DueAccount] = list(accounts)
        self._confirm = confirm or (lambda chk: ui.confirm(self, "Amount exceeds due", chk.warning))
        self._confirmed_overpay = False

        # --- Party & figures -----------------------------------------------
        self.cmb_party = QComboBox()
        for a in self._accounts:
            self.cmb_party.addItem(f"{a.party_name} ({a.party_kind})", userData=a)
        if initial_party:
            for i, a in enumerate(self._accounts):
                if a.party_name == initial_party:
                    self.cmb_party.setCurrentIndex(i)
                    break

        self.lbl_billed = QLabel("")
        self.lbl_paid = QLabel("")
        self.lbl_remaining = QLabel("")
        self.lbl_after = QLabel("")
        for lbl in (self.lbl_billed, self.lbl_paid, self.lbl_remaining, self.lbl_after):
            lbl.setAlignment(Qt.AlignRight | Qt.AlignVCenter)

        # --- Payment -------------------------------------------------------
        self.spin_amount = QDoubleSpinBox()
        self.spin_amount.setMinimum(0.0)   # validation enforces > 0.0
        self.spin_amount.setMaximum(10**9)
        self.spin_amount.setDecimals(2)
        self.spin_amount.setButtonSymbols(QDoubleSpinBox.ButtonSymbols.NoButtons)
        self.spin_amount.setAlignment(Qt.AlignRight)

        self.cmb_mode = QComboBox()
        for m in payment_modes.VALID_MODES:
            self.cmb_mode.addItem(payment_modes.label(m), userData=m)

        self.edt_reference = QLineEdit()
        self.date_edit = QDateEdit()
        self.date_edit.setDisplayFormat("yyyy-MM-dd")
        self.date_edit.setCalendarPopup(True)
        self.date_edit.setDate(QDate.currentDate())

        self.chk_installment = QCheckBox("Installment")
        self.spin_installments = QSpinBox()
        self.spin_installments.setRange(1, 1000)
        self.spin_installment_no = QSpinBox()
        self.spin_installment_no.setRange(1, 1000)

        self.bank_box = QGroupBox("Bank details")
        self.edt_account_no = QLineEdit()
        self.edt_ifsc = QLineEdit()
        self.edt_bank_name = QLineEdit()
        bank_form = QFormLayout(self.bank_box)
        bank_form.addRow("Account No", self.edt_account_no)
        bank_form.addRow("IFSC", self.edt_ifsc)
        bank_form.addRow("Bank", self.edt_bank_name)

        self.edt_proof = QLineEdit()
        self.edt_proof.setPlaceholderText("Path to receipt / screenshot")
        self.edt_notes = QLineEdit()

        self.lbl_error = QLabel("")
        self.lbl_error.setObjectName("errorLabel")
        self.lbl_error.setStyleSheet("color:#b00020;")
        self.lbl_error.setVisible(False)

        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)

        # --- Layout ---------------------------------------------------------
        form = QFormLayout()
        form.addRow("Name*", self.cmb_party)
        form.addRow("Total billed", self.lbl_billed)
        form.addRow("Paid so far", self.lbl_paid)
        form.addRow("Remaining", self.lbl_remaining)
        form.addRow("Amount*", self.spin_amount)
        form.addRow("Remaining after", self.lbl_after)
        form.addRow("Mode*", self.cmb_mode)
        self.lbl_reference = QLabel("Reference")
        form.addRow(self.lbl_reference, self.edt_reference)
        form.addRow("Date*", self.date_edit)
        form.addRow("", self.chk_installment)
        form.addRow("Installments", self.spin_installments)
        form.addRow("Installment No", self.spin_installment_no)
        form.addRow("Proof", self.edt_proof)
        form.addRow("Notes", self.edt_notes)

        layout = QVBoxLayout(self)
        layout.addLayout(form)
        layout.addWidget(self.bank_box)
        layout.addWidget(self.lbl_error)
        layout.addWidget(self.buttons)

        self.cmb_party.currentIndexChanged.connect(lambda _=None: self._refresh())
        self.spin_amount.valueChanged.connect(lambda _=None: self._refresh())
        self.cmb_mode.currentIndexChanged.connect(lambda _=None: self._sync_mode())
        self.chk_installment.toggled.connect(lambda _=None: self._sync_installment())
        self._sync_mode()
        self._sync_installment()
        self._refresh()

        self._payload: Optional[dict] = None

    # ------------------------------------------------------------------
    @property
    def account(self) -> Optional[DueAccount]:
        return self.cmb_party.currentData()

    def _sync_mode(self) -> None:
        mode = self.cmb_mode.currentData() or ""
        hint = payment_modes.reference_hint(mode)
        self.lbl_reference.setText(hint or "Reference")
        self.bank_box.setVisible(payment_modes.needs_bank_details(mode))

    def _sync_installment(self) -> None:
        on = self.chk_installment.isChecked()
        self.spin_installments.setEnabled(on)
        self.spin_installment_no.setEnabled(on)

    def _refresh(self) -> None:
        a = self.account
        if a is None:
            for lbl in (self.lbl_billed, self.lbl_paid, self.lbl_remaining, self.lbl_after):
                lbl.setText("")
            return
        self.lbl_billed.setText(fmt_money(a.total_billed))
        self.lbl_paid.setText(fmt_money(a.total_paid))
        self.lbl_remaining.setText(fmt_money(a.due))
        after = project_after_payment(a, float(self.spin_amount.value()))
        self.lbl_after.setText(fmt_money(after.due))

    def _fail(self, message: str, widget_to_focus: QWidget) -> None:
        self.lbl_error.setText(message)
        self.lbl_error.setVisible(True)
        widget_to_focus.setFocus()

    # ------------------------------------------------------------------
    def get_payload(self) -> dict | None:
        """Validate inputs and return a dict or None on failure."""
        self.lbl_error.setVisible(False)
        a = self.account
        if a is None:
            self._fail("Select who is being paid.", self.cmb_party)
            return None
        amount = float(self.spin_amount.value())
        if amount <= 0.0:
            self._fail("Amount must be greater than 0.00.", self.spin_amount)
            return None
        installment = self.chk_installment.isChecked()
        if installment and self.spin_installment_no.value() > self.spin_installments.value():
            self._fail("Installment number cannot exceed the number of installments.", self.spin_installment_no)
            return None
        mode = self.cmb_mode.currentData()
        bank = payment_modes.needs_bank_details(mode)
        return {
            "party_kind": a.party_kind,
            "party_name": a.party_name,
            "amount": amount,
            "payment_mode": mode,
            "date": self.date_edit.date().toString("yyyy-MM-dd"),
            "reference_no": self.edt_reference.text().strip() or None,
            "is_installment": installment,
            "installments": self.spin_installments.value() if installment else None,
            "installment_number": self.spin_installment_no.value() if installment else None,
            "account_number": (self.edt_account_no.text().strip() or None) if bank else None,
            "ifsc": (self.edt_ifsc.text().strip() or None) if bank else None,
            "bank_name": (self.edt_bank_name.text().strip() or None) if bank else None,
            "proof_path": self.edt_proof.text().strip() or None,
            "notes": self.edt_notes.text().strip() or None,
        }

    def accept(self) -> None:  # type: ignore[override]
        p = self.get_payload()
        if p is None:
            return
        a = self.account
        check = PaymentCheck(due_before=a.due, amount=p["amount"], exceeds_due=p["amount"] > a.due)
        self._confirmed_overpay = False
        if check.exceeds_due:
            if not self._confirm(check):
                return
            self._confirmed_overpay = True
        self._payload = p
        super().accept()

    def payload(self) -> dict | None:
        """Return the last accepted payload, or None if the dialog was canceled."""
        return self._payload

    @property
    def confirmed_overpay(self) -> bool:
        return self._confirmed_overpay
