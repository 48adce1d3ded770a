from __future__ import annotations

import logging

from PySide6.QtWidgets import QDialog, QWidget

from ...config import DEFAULT_POLICY, LedgerPolicy
from ...utils import ui_helpers as ui
from ...utils.helpers import fmt_money
from ..base_module import BaseModule
from ..ledger.errors import LedgerError
from .form import PaymentForm
from .model import DueAccountsTableModel
from .service import PaymentsService
from .view import PaymentsView

_log = logging.getLogger(__name__)


class PaymentsController(BaseModule):
    """Due accounts list + the record-payment flow."""

    def __init__(self, conn, policy: LedgerPolicy = DEFAULT_POLICY):
        super().__init__()
        self.conn = conn
        self.service = PaymentsService(conn, policy)
        self.view = PaymentsView()

        self.view.cmb_kind.currentIndexChanged.connect(lambda _=None: self._reload())
        self.view.chk_pending.toggled.connect(lambda _=None: self._reload())
        self.view.btn_record.clicked.connect(self._on_record)
        self.view.tbl.doubleClicked.connect(lambda _=None: self._on_record())
        self._reload()

    def get_widget(self) -> QWidget:
        return self.view

    def _reload(self) -> None:
        kind = self.view.selected_kind
        rows = self.service.pending_accounts(kind) if self.view.pending_only else self.service.accounts(kind)
        self.model = DueAccountsTableModel(rows)
        self.view.tbl.setModel(self.model)
        self.view.tbl.resizeColumnsToContents()

    def _open_form(self, accounts, initial_party: str | None = None):
        """Open the PaymentForm; return (payload, confirmed_overpay) or None."""
        dlg = PaymentForm(accounts, self.view, initial_party=initial_party)
        if dlg.exec() != QDialog.Accepted or not dlg.payload():
            return None
        return dlg.payload(), dlg.confirmed_overpay

    def _confirm_overpay(self, already_confirmed: bool):
        # the due can drop while the form is open; ask again if it now overpays
        def _ask(check) -> bool:
            return already_confirmed or ui.confirm(self.view, "Amount exceeds due", check.warning)
        return _ask

    def _on_record(self) -> None:
        row = self.view.tbl.selected_row()
        selected = self.model.at(row) if row is not None else None
        accounts = self.service.pending_accounts(self.view.selected_kind)
        if selected is not None and selected not in accounts:
            accounts.insert(0, selected)
        if not accounts:
            ui.info(self.view, "Record Payment", "Nothing is due.")
            return
        result = self._open_form(accounts, selected.party_name if selected else None)
        if not result:
            return
        payload, confirmed = result
        try:
            payment = self.service.build_payment(**payload)
            outcome = self.service.record_payment(
                payment, confirm_overpay=self._confirm_overpay(confirmed)
            )
        except LedgerError as e:
            ui.error(self.view, "Payment not recorded", str(e))
            return
        if outcome.recorded:
            ui.info(
                self.view, "Payment recorded",
                f"Remaining due for {outcome.account.party_name}: {fmt_money(outcome.account.due)}",
            )
        else:
            ui.info(
                self.view, "Payment not recorded",
                f"Remaining due for {outcome.account.party_name} is now "
                f"{fmt_money(outcome.account.due)}; the payment was not saved.",
            )
        self._reload()
