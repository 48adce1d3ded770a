"""
Table models for loadings (bills) and their lines.

Fed with LoadingRecord / LineItem lists from LoadingsService; no data
manipulation happens here. Money through `fmt_money`, weights through
`fmt_kg`.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from ...utils.helpers import fmt_kg, fmt_money
from ..ledger.types import LineItem, LoadingRecord

CATEGORY_LABELS = {
    "FARMER_INTAKE": "Farmer",
    "AGENT_INTAKE": "Agent",
    "CLIENT_DISPATCH": "Client",
}


class LoadingsTableModel(QAbstractTableModel):
    HEADERS: List[str] = ["Bill No", "Date", "Type", "Name", "Trays", "Total Kgs", "Grand Total Kgs", "Amount"]

    def __init__(self, rows: List[LoadingRecord]):
        super().__init__()
        self._rows = rows or []

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        return len(self._rows)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        return len(self.HEADERS)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole) -> Any:  # type: ignore[override]
        if not index.isValid():
            return None
        r = self._rows[index.row()]
        col = index.column()
        if role == Qt.DisplayRole:
            return (
                r.bill_no,
                r.date,
                CATEGORY_LABELS.get(r.category, r.category),
                r.party_name,
                r.total_trays,
                fmt_kg(r.total_kg),
                fmt_kg(r.net_weight_kg),
                fmt_money(r.grand_total),
            )[col]
        if role == Qt.TextAlignmentRole and col >= 4:
            return int(Qt.AlignRight | Qt.AlignVCenter)
        return None

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.DisplayRole) -> Any:  # type: ignore[override]
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def at(self, row: int) -> Optional[LoadingRecord]:
        return self._rows[row] if 0 <= row < len(self._rows) else None


class LoadingItemsTableModel(QAbstractTableModel):
    HEADERS: List[str] = ["Variety", "Trays", "Loose Kgs", "Tray Kgs", "Total Kgs", "Price/Kg", "Total Price"]

    def __init__(self, rows: List[LineItem], names: Dict[str, str] | None = None):
        super().__init__()
        self._rows = rows or []
        self._names = names or {}

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        return len(self._rows)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        return len(self.HEADERS)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole) -> Any:  # type: ignore[override]
        if not index.isValid():
            return None
        it = self._rows[index.row()]
        col = index.column()
        if role == Qt.DisplayRole:
            return (
                self._names.get(it.variety_code, it.variety_code),
                it.no_trays,
                fmt_kg(it.loose_kg),
                fmt_kg(it.tray_kg),
                fmt_kg(it.total_kg),
                fmt_money(it.price_per_kg),
                fmt_money(it.total_price),
            )[col]
        if role == Qt.TextAlignmentRole and col >= 1:
            return int(Qt.AlignRight | Qt.AlignVCenter)
        return None

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.DisplayRole) -> Any:  # type: ignore[override]
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def at(self, row: int) -> Optional[LineItem]:
        return self._rows[row] if 0 <= row < len(self._rows) else None
