from __future__ import annotations

from PySide6.QtWidgets import QCheckBox, QComboBox, QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget

from ...constants import PARTY_AGENT, PARTY_CLIENT, PARTY_FARMER
from ...widgets.table_view import TableView


class PaymentsView(QWidget):
    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self.setWindowTitle("Payments")

        root = QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)

        top = QHBoxLayout()
        top.addWidget(QLabel("Show:"))
        self.cmb_kind = QComboBox()
        self.cmb_kind.addItem("All", userData=None)
        self.cmb_kind.addItem("Clients", userData=PARTY_CLIENT)
        self.cmb_kind.addItem("Farmers", userData=PARTY_FARMER)
        self.cmb_kind.addItem("Agents", userData=PARTY_AGENT)
        top.addWidget(self.cmb_kind)
        self.chk_pending = QCheckBox("Pending only")
        self.chk_pending.setChecked(True)
        top.addWidget(self.chk_pending)
        top.addStretch(1)
        self.btn_record = QPushButton("Record Payment")
        top.addWidget(self.btn_record)
        root.addLayout(top)

        self.tbl = TableView()
        root.addWidget(self.tbl, 1)

    @property
    def selected_kind(self) -> str | None:
        return self.cmb_kind.currentData()

    @property
    def pending_only(self) -> bool:
        return self.chk_pending.isChecked()
