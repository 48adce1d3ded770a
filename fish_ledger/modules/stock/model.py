from __future__ import annotations

from typing import Any, List

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from ...utils.helpers import fmt_kg
from ..ledger.types import StockPosition


class StockTableModel(QAbstractTableModel):
    HEADERS: List[str] = ["Code", "Variety", "Intake Kgs", "Dispatched Kgs", "Net Kgs", "Trays"]

    def __init__(self, rows: List[StockPosition]):
        super().__init__()
        self._rows = rows or []

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        return len(self._rows)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        return len(self.HEADERS)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole) -> Any:  # type: ignore[override]
        if not index.isValid():
            return None
        p = self._rows[index.row()]
        col = index.column()
        if role == Qt.DisplayRole:
            return (
                p.variety_code,
                p.name,
                fmt_kg(p.intake_kg),
                fmt_kg(p.dispatched_kg),
                fmt_kg(p.kg),
                p.trays,
            )[col]
        if role == Qt.TextAlignmentRole and col >= 2:
            return int(Qt.AlignRight | Qt.AlignVCenter)
        return None

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.DisplayRole) -> Any:  # type: ignore[override]
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)
