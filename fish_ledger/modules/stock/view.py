from __future__ import annotations

from PySide6.QtWidgets import QCheckBox, QHBoxLayout, QPushButton, QVBoxLayout, QWidget

from ...widgets.table_view import TableView


class StockView(QWidget):
    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self.setWindowTitle("Stock")
        root = QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)

        top = QHBoxLayout()
        self.chk_available = QCheckBox("Only varieties with a full tray available")
        top.addWidget(self.chk_available)
        top.addStretch(1)
        self.btn_refresh = QPushButton("Refresh")
        top.addWidget(self.btn_refresh)
        root.addLayout(top)

        self.tbl = TableView()
        root.addWidget(self.tbl, 1)
