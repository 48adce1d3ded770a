from __future__ import annotations

from PySide6.QtWidgets import QWidget

from ...config import DEFAULT_POLICY, LedgerPolicy
from ..base_module import BaseModule
from .model import StockTableModel
from .service import StockService
from .view import StockView


class StockController(BaseModule):
    def __init__(self, conn, policy: LedgerPolicy = DEFAULT_POLICY):
        super().__init__()
        self.service = StockService(conn, policy)
        self.view = StockView()
        self.view.btn_refresh.clicked.connect(self.reload)
        self.view.chk_available.toggled.connect(lambda _=None: self.reload())
        self.reload()

    def get_widget(self) -> QWidget:
        return self.view

    def reload(self) -> None:
        if self.view.chk_available.isChecked():
            rows = self.service.available_varieties()
        else:
            rows = self.service.positions()
        self.model = StockTableModel(rows)
        self.view.tbl.setModel(self.model)
        self.view.tbl.resizeColumnsToContents()
