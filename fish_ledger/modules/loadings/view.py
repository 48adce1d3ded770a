from __future__ import annotations

from PySide6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSplitter,
    QVBoxLayout,
    QWidget,
)
from PySide6.QtCore import Qt

from ...constants import AGENT_INTAKE, CLIENT_DISPATCH, FARMER_INTAKE
from ...widgets.table_view import TableView


class LoadingsView(QWidget):
    """Bills on top, lines of the selected bill below."""

    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self.setWindowTitle("Loadings")

        root = QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)

        top = QHBoxLayout()
        top.addWidget(QLabel("Show:"))
        self.cmb_category = QComboBox()
        self.cmb_category.addItem("All", userData=None)
        self.cmb_category.addItem("Farmer loadings", userData=FARMER_INTAKE)
        self.cmb_category.addItem("Agent loadings", userData=AGENT_INTAKE)
        self.cmb_category.addItem("Client loadings", userData=CLIENT_DISPATCH)
        top.addWidget(self.cmb_category)
        top.addStretch(1)
        self.btn_new_farmer = QPushButton("New Farmer Loading")
        self.btn_new_agent = QPushButton("New Agent Loading")
        self.btn_new_client = QPushButton("New Client Loading")
        self.btn_delete_loading = QPushButton("Delete Bill")
        top.addWidget(self.btn_new_farmer)
        top.addWidget(self.btn_new_agent)
        top.addWidget(self.btn_new_client)
        top.addWidget(self.btn_delete_loading)
        root.addLayout(top)

        self.tbl = TableView()
        self.tbl_items = TableView()

        items_box = QWidget()
        items_lay = QVBoxLayout(items_box)
        items_lay.setContentsMargins(0, 0, 0, 0)
        row = QHBoxLayout()
        self.lbl_details = QLabel("")
        row.addWidget(self.lbl_details, 1)
        self.btn_add_item = QPushButton("Add Variety")
        self.btn_edit_item = QPushButton("Edit Line")
        self.btn_delete_item = QPushButton("Delete Line")
        row.addWidget(self.btn_add_item)
        row.addWidget(self.btn_edit_item)
        row.addWidget(self.btn_delete_item)
        items_lay.addLayout(row)
        items_lay.addWidget(self.tbl_items)

        split = QSplitter(Qt.Vertical)
        split.addWidget(self.tbl)
        split.addWidget(items_box)
        root.addWidget(split, 1)

    @property
    def selected_category(self) -> str | None:
        return self.cmb_category.currentData()
