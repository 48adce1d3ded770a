"""
Controller for the loadings module.

Wires LoadingsService <-> models <-> LoadingsView, and opens LoadingForm for
new bills and ItemEditDialog / AddItemDialog for line changes. Clamp notices
from the service are shown after saving, since the stock may have moved
between opening the form and saving it.
"""
from __future__ import annotations

import logging

from PySide6.QtWidgets import QDialog, QWidget

from ...config import DEFAULT_POLICY, LedgerPolicy
from ...constants import AGENT_INTAKE, CLIENT_DISPATCH, FARMER_INTAKE
from ...database.repositories.loadings_repo import DomainError as LoadingsDomainError
from ...database.repositories.varieties_repo import VarietiesRepo
from ...utils import ui_helpers as ui
from ..base_module import BaseModule
from ..ledger.errors import LedgerError
from .form import LoadingForm
from .item_edit_dialog import AddItemDialog, ItemEditDialog
from .model import LoadingItemsTableModel, LoadingsTableModel
from .service import LoadingsService
from .view import LoadingsView

_log = logging.getLogger(__name__)


class LoadingsController(BaseModule):
    def __init__(self, conn, policy: LedgerPolicy = DEFAULT_POLICY):
        super().__init__()
        self.conn = conn
        self.policy = policy
        self.service = LoadingsService(conn, policy)
        self.varieties = VarietiesRepo(conn)
        self.view = LoadingsView()
        self._current = None

        self.view.cmb_category.currentIndexChanged.connect(lambda _=None: self._reload())
        self.view.btn_new_farmer.clicked.connect(lambda: self._on_new(FARMER_INTAKE))
        self.view.btn_new_agent.clicked.connect(lambda: self._on_new(AGENT_INTAKE))
        self.view.btn_new_client.clicked.connect(lambda: self._on_new(CLIENT_DISPATCH))
        self.view.btn_delete_loading.clicked.connect(self._on_delete_loading)
        self.view.btn_add_item.clicked.connect(self._on_add_item)
        self.view.btn_edit_item.clicked.connect(self._on_edit_item)
        self.view.btn_delete_item.clicked.connect(self._on_delete_item)
        self.view.tbl_items.doubleClicked.connect(lambda _=None: self._on_edit_item())

        self._reload()

    def get_widget(self) -> QWidget:
        return self.view

    # ------------------------------------------------------------------
    # Data loading
    # ------------------------------------------------------------------
    def _reload(self, keep_id: int | None = None) -> None:
        rows = self.service.list_loadings(self.view.selected_category)
        self.base = LoadingsTableModel(rows)
        self.view.tbl.setModel(self.base)
        self.view.tbl.resizeColumnsToContents()
        self.view.tbl.selectionModel().selectionChanged.connect(lambda *_: self._sync_items())
        if keep_id is not None:
            for i, r in enumerate(rows):
                if r.loading_id == keep_id:
                    self.view.tbl.selectRow(i)
                    break
        self._sync_items()

    def _selected_loading(self):
        row = self.view.tbl.selected_row()
        return self.base.at(row) if row is not None else None

    def _sync_items(self) -> None:
        header = self._selected_loading()
        if header is None:
            self._current = None
            self.items_model = LoadingItemsTableModel([])
            self.view.lbl_details.setText("")
        else:
            self._current = self.service.get_loading(header.loading_id)
            self.items_model = LoadingItemsTableModel(self._current.items, self.varieties.names())
            self.view.lbl_details.setText(
                f"{self._current.bill_no}  ·  {self._current.party_name}  ·  {self._current.date}"
            )
        self.view.tbl_items.setModel(self.items_model)
        self.view.tbl_items.resizeColumnsToContents()

    def _variety_choices(self, category: str):
        if category == CLIENT_DISPATCH:
            return [(p.variety_code, p.name) for p in self.service.stock_ledger().available_varieties()]
        return [(v.code, v.name) for v in self.varieties.list_varieties()]

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def _on_new(self, category: str) -> None:
        stock = self.service.stock_ledger() if category == CLIENT_DISPATCH else None
        dlg = LoadingForm(
            category,
            self.view,
            varieties=self._variety_choices(category),
            stock=stock,
            policy=self.policy,
            bill_no_hint=self.service.next_bill_no(category),
        )
        dlg.add_line()
        if dlg.exec() != QDialog.Accepted:
            return
        p = dlg.payload()
        if not p:
            return
        try:
            created = self.service.create_loading(
                p["category"], p["party_name"], p["lines"],
                date=p["date"], vehicle_ref=p["vehicle_ref"], own_vehicle=p["own_vehicle"],
                address=p["address"], bill_no=p["bill_no"],
            )
        except (LedgerError, LoadingsDomainError) as e:
            ui.error(self.view, "Loading not saved", str(e))
            return
        if created.notices:
            ui.info(self.view, "Stock exceeded", "\n".join(created.notices))
        ui.info(self.view, "Saved", f"Bill {created.bill_no} saved.")
        self._reload(keep_id=created.loading_id)

    def _selected_item(self):
        row = self.view.tbl_items.selected_row()
        return self.items_model.at(row) if row is not None else None

    def _on_add_item(self) -> None:
        if self._current is None:
            ui.info(self.view, "Add Variety", "Select a bill first.")
            return
        dlg = AddItemDialog(self._variety_choices(self._current.category), self.view)
        if dlg.exec() != QDialog.Accepted or not dlg.payload():
            return
        p = dlg.payload()
        try:
            change = self.service.add_item_to_bill(
                self._current.loading_id, p["variety_code"], p["trays"], p["loose"], p["price"]
            )
        except LedgerError as e:
            ui.error(self.view, "Line not added", str(e))
            return
        if change.clamp is not None and change.clamp.was_clamped:
            ui.info(self.view, "Stock exceeded", change.clamp.notice)
        self._reload(keep_id=self._current.loading_id)

    def _on_edit_item(self) -> None:
        item = self._selected_item()
        if item is None:
            ui.info(self.view, "Edit Line", "Select a line first.")
            return
        try:
            session = self.service.start_edit(item.item_id)
        except LedgerError as e:
            ui.error(self.view, "Edit Line", str(e))
            return
        names = self.varieties.names()
        dlg = ItemEditDialog(session, self.view, variety_name=names.get(item.variety_code, ""))
        if dlg.exec() != QDialog.Accepted:
            return
        if not session.is_dirty:
            session.cancel()
            return
        try:
            change = self.service.save_edit(session)
        except LedgerError as e:
            ui.error(self.view, "Line not saved", str(e))
            return
        if change.clamp is not None and change.clamp.was_clamped:
            ui.info(self.view, "Stock exceeded", change.clamp.notice)
        self._reload(keep_id=item.loading_id)

    def _on_delete_item(self) -> None:
        item = self._selected_item()
        if item is None:
            ui.info(self.view, "Delete Line", "Select a line first.")
            return
        last = len(self._current.items) == 1 if self._current else False
        text = "Delete this line?"
        if last:
            text = "This is the only line on the bill. Deleting it deletes the whole bill. Continue?"
        if not ui.confirm(self.view, "Delete Line", text):
            return
        try:
            change = self.service.delete_item(item.item_id)
        except LedgerError as e:
            ui.error(self.view, "Line not deleted", str(e))
            return
        self._reload(keep_id=None if change.record_deleted else item.loading_id)

    def _on_delete_loading(self) -> None:
        header = self._selected_loading()
        if header is None:
            ui.info(self.view, "Delete Bill", "Select a bill first.")
            return
        if not ui.confirm(self.view, "Delete Bill", f"Delete bill {header.bill_no} and all its lines?"):
            return
        try:
            self.service.delete_loading(header.loading_id)
        except LedgerError as e:
            ui.error(self.view, "Bill not deleted", str(e))
            return
        self._reload()
