from __future__ import annotations

from typing import Any, List, Optional

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from ...utils.helpers import fmt_money
from ..ledger.types import DueAccount


class DueAccountsTableModel(QAbstractTableModel):
    """One row per counterparty: billed, paid, remaining due and status."""

    HEADERS: List[str] = ["Name", "Type", "Total Billed", "Paid", "Due", "Status"]

    def __init__(self, rows: List[DueAccount]):
        super().__init__()
        self._rows = rows or []

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        return len(self._rows)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        return len(self.HEADERS)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole) -> Any:  # type: ignore[override]
        if not index.isValid():
            return None
        a = self._rows[index.row()]
        col = index.column()
        if role == Qt.DisplayRole:
            return (
                a.party_name,
                a.party_kind.title(),
                fmt_money(a.total_billed),
                fmt_money(a.total_paid),
                fmt_money(a.due),
                a.status.title(),
            )[col]
        if role == Qt.TextAlignmentRole and col in (2, 3, 4):
            return int(Qt.AlignRight | Qt.AlignVCenter)
        return None

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.DisplayRole) -> Any:  # type: ignore[override]
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def at(self, row: int) -> Optional[DueAccount]:
        return self._rows[row] if 0 <= row < len(self._rows) else None
