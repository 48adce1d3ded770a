"""
Dialog for entering a loading (one bill with several variety lines).

Collects: party, date, bill no (optional, auto when blank), vehicle, own
vehicle flag, address, and the lines (variety, trays, loose kg, price/kg).

For a client dispatch the form is given a StockLedger snapshot and clamps
every line as it is typed: rows are settled top to bottom and a row asking
for more than is left is cut back, with a notice under the grid. The
service clamps again when saving.

On accept, `payload()` returns a dict for LoadingsService.create_loading.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from PySide6.QtCore import QDate, Qt
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDateEdit,
    QDialog,
    QDialogButtonBox,
    QDoubleSpinBox,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from ...config import DEFAULT_POLICY, LedgerPolicy
from ...constants import CLIENT_DISPATCH, FARMER_INTAKE, AGENT_INTAKE
from ...utils.helpers import fmt_kg, fmt_money
from ...utils.validators import non_empty
from ..ledger.calculations import compute_line, record_totals
from ..ledger.stock_ledger import StockLedger
from ..ledger.types import LineItem, ProposedLine

TITLES = {
    FARMER_INTAKE: "Farmer Loading",
    AGENT_INTAKE: "Agent Loading",
    CLIENT_DISPATCH: "Client Loading",
}


class _LineRow(QWidget):
    """One editable line: variety, trays, loose kg, price/kg, and its totals."""

    def __init__(self, varieties: Iterable[Tuple[str, str]], parent: QWidget | None = None):
        super().__init__(parent)
        self.cmb_variety = QComboBox()
        for code, name in varieties:
            self.cmb_variety.addItem(f"{name} ({code})", userData=code)

        self.spin_trays = QSpinBox()
        self.spin_trays.setRange(0, 100000)
        self.spin_trays.setButtonSymbols(QSpinBox.ButtonSymbols.NoButtons)

        self.spin_loose = QDoubleSpinBox()
        self.spin_loose.setRange(0.0, 10**7)
        self.spin_loose.setDecimals(3)
        self.spin_loose.setButtonSymbols(QDoubleSpinBox.ButtonSymbols.NoButtons)

        self.spin_price = QDoubleSpinBox()
        self.spin_price.setRange(0.0, 10**7)
        self.spin_price.setDecimals(2)
        self.spin_price.setButtonSymbols(QDoubleSpinBox.ButtonSymbols.NoButtons)

        self.lbl_totals = QLabel("")
        self.lbl_totals.setMinimumWidth(180)
        self.btn_remove = QPushButton("×")
        self.btn_remove.setFixedWidth(24)
        self.btn_remove.setToolTip("Remove line")

        lay = QHBoxLayout(self)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.addWidget(self.cmb_variety, 2)
        lay.addWidget(QLabel("Trays"))
        lay.addWidget(self.spin_trays, 1)
        lay.addWidget(QLabel("Loose Kgs"))
        lay.addWidget(self.spin_loose, 1)
        lay.addWidget(QLabel("Price/Kg"))
        lay.addWidget(self.spin_price, 1)
        lay.addWidget(self.lbl_totals, 2)
        lay.addWidget(self.btn_remove)

    @property
    def variety_code(self) -> Optional[str]:
        return self.cmb_variety.currentData()

    def set_quantities(self, trays: int, loose: float) -> None:
        for w in (self.spin_trays, self.spin_loose):
            w.blockSignals(True)
        self.spin_trays.setValue(int(trays))
        self.spin_loose.setValue(float(loose))
        for w in (self.spin_trays, self.spin_loose):
            w.blockSignals(False)

    def proposed(self) -> ProposedLine:
        return ProposedLine(
            variety_code=self.variety_code or "",
            no_trays=self.spin_trays.value(),
            loose_kg=self.spin_loose.value(),
            price_per_kg=self.spin_price.value(),
        )


class LoadingForm(QDialog):
    """Modal dialog for a new loading of one category."""

    def __init__(
        self,
        category: str,
        parent: QWidget | None = None,
        *,
        varieties: Iterable[Tuple[str, str]] = (),
        stock: StockLedger | None = None,
        policy: LedgerPolicy = DEFAULT_POLICY,
        bill_no_hint: str = "",
    ):
        super().__init__(parent)
        self.category = category
        self.policy = policy
        self.stock = stock if category == CLIENT_DISPATCH else None
        self._varieties = list(varieties)
        self.setWindowTitle(TITLES.get(category, "Loading"))
        self.setModal(True)
        self.setMinimumWidth(760)

        # --- Header widgets -------------------------------------------------
        self.edt_party = QLineEdit()
        self.edt_party.setPlaceholderText("Client name" if category == CLIENT_DISPATCH else "Farmer / agent name")
        self.edt_party.setClearButtonEnabled(True)

        self.date_edit = QDateEdit()
        self.date_edit.setDisplayFormat("yyyy-MM-dd")
        self.date_edit.setCalendarPopup(True)
        self.date_edit.setDate(QDate.currentDate())

        self.edt_bill_no = QLineEdit()
        self.edt_bill_no.setPlaceholderText(bill_no_hint or "Auto")

        self.edt_vehicle = QLineEdit()
        self.chk_own_vehicle = QCheckBox("Own vehicle (no weight deduction)")
        self.chk_own_vehicle.setVisible(category == CLIENT_DISPATCH)
        self.chk_own_vehicle.toggled.connect(lambda _=None: self._refresh_totals())
        self.edt_address = QLineEdit()

        # --- Lines ----------------------------------------------------------
        self.rows: List[_LineRow] = []
        self.lines_box = QVBoxLayout()
        self.btn_add_line = QPushButton("Add Variety")
        self.btn_add_line.clicked.connect(lambda: self.add_line())

        self.lbl_notice = QLabel("")
        self.lbl_notice.setObjectName("clampNotice")
        self.lbl_notice.setStyleSheet("color:#b26a00;")
        self.lbl_notice.setVisible(False)

        self.lbl_summary = QLabel("")
        self.lbl_summary.setAlignment(Qt.AlignRight)

        self.lbl_error = QLabel("")
        self.lbl_error.setObjectName("errorLabel")
        self.lbl_error.setStyleSheet("color:#b00020;")
        self.lbl_error.setVisible(False)

        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)

        # --- Layout ---------------------------------------------------------
        layout = QVBoxLayout(self)
        form = QFormLayout()
        form.addRow("Name*", self.edt_party)
        form.addRow("Date*", self.date_edit)
        form.addRow("Bill No", self.edt_bill_no)
        form.addRow("Vehicle", self.edt_vehicle)
        form.addRow("", self.chk_own_vehicle)
        form.addRow("Address", self.edt_address)
        layout.addLayout(form)
        layout.addLayout(self.lines_box)
        layout.addWidget(self.btn_add_line, 0, Qt.AlignLeft)
        layout.addWidget(self.lbl_notice)
        layout.addWidget(self.lbl_summary)
        layout.addWidget(self.lbl_error)
        layout.addWidget(self.buttons)

        self._payload: Optional[dict] = None
        self._notices: List[str] = []

    # ------------------------------------------------------------------
    # Lines
    # ------------------------------------------------------------------
    def add_line(self, variety_code: str | None = None, trays: int = 0,
                 loose: float = 0.0, price: float = 0.0) -> _LineRow:
        row = _LineRow(self._varieties, self)
        if variety_code:
            idx = row.cmb_variety.findData(variety_code)
            if idx >= 0:
                row.cmb_variety.setCurrentIndex(idx)
        row.set_quantities(trays, loose)
        row.spin_price.setValue(float(price))

        row.cmb_variety.currentIndexChanged.connect(lambda _=None: self._on_lines_changed())
        row.spin_trays.valueChanged.connect(lambda _=None: self._on_lines_changed())
        row.spin_loose.valueChanged.connect(lambda _=None: self._on_lines_changed())
        row.spin_price.valueChanged.connect(lambda _=None: self._refresh_totals())
        row.btn_remove.clicked.connect(lambda: self.remove_line(row))

        self.rows.append(row)
        self.lines_box.addWidget(row)
        self._on_lines_changed()
        return row

    def remove_line(self, row: _LineRow) -> None:
        if row in self.rows:
            self.rows.remove(row)
            self.lines_box.removeWidget(row)
            row.deleteLater()
            self._on_lines_changed()

    def _on_lines_changed(self) -> None:
        self._apply_clamp()
        self._refresh_totals()

    def _apply_clamp(self) -> None:
        self._notices = []
        if self.stock is None:
            self.lbl_notice.setVisible(False)
            return
        proposals = [(r.variety_code or "", r.spin_trays.value(), r.spin_loose.value()) for r in self.rows]
        results = self.stock.clamp_form_lines(proposals)
        for row, res in zip(self.rows, results):
            if res.was_clamped:
                row.set_quantities(res.trays, res.loose)
                self._notices.append(f"{row.variety_code}: {res.notice}")
        self.lbl_notice.setText("\n".join(self._notices))
        self.lbl_notice.setVisible(bool(self._notices))

    def _preview_items(self) -> List[LineItem]:
        items = []
        for r in self.rows:
            t = compute_line(
                self.category, r.spin_trays.value(), r.spin_loose.value(),
                r.spin_price.value(), self.policy, own_vehicle=self.own_vehicle,
            )
            r.lbl_totals.setText(f"{fmt_kg(t.total_kg)} Kgs  |  {fmt_money(t.total_price)}")
            items.append(LineItem(
                item_id=None, loading_id=None, variety_code=r.variety_code or "",
                no_trays=r.spin_trays.value(), loose_kg=r.spin_loose.value(),
                tray_kg=t.tray_kg, total_kg=t.total_kg,
                price_per_kg=r.spin_price.value(), total_price=t.total_price,
            ))
        return items

    def _refresh_totals(self) -> None:
        totals = record_totals(
            self._preview_items(), category=self.category, policy=self.policy, own_vehicle=self.own_vehicle,
        )
        self.lbl_summary.setText(
            f"Trays: {totals['total_trays']}   Total Kgs: {fmt_kg(totals['total_kg'])}   "
            f"Grand Total: {fmt_kg(totals['net_weight_kg'])} Kgs   Amount: {fmt_money(totals['total_price'])}"
        )

    # ------------------------------------------------------------------
    # Validation & payload
    # ------------------------------------------------------------------
    @property
    def own_vehicle(self) -> bool:
        return self.category == CLIENT_DISPATCH and self.chk_own_vehicle.isChecked()

    @property
    def notices(self) -> List[str]:
        return list(self._notices)

    def _fail(self, message: str, widget_to_focus: QWidget) -> None:
        self.lbl_error.setText(message)
        self.lbl_error.setVisible(True)
        widget_to_focus.setFocus()

    def get_payload(self) -> dict | None:
        """Validate inputs and return a dict or None on failure."""
        self.lbl_error.setVisible(False)
        if not non_empty(self.edt_party.text()):
            self._fail("Name cannot be empty.", self.edt_party)
            return None
        lines = [r.proposed() for r in self.rows if r.spin_trays.value() > 0 or r.spin_loose.value() > 0]
        if not lines:
            self._fail("Add at least one variety with trays or loose kilograms.", self.btn_add_line)
            return None
        if any(not ln.variety_code for ln in lines):
            self._fail("Select a variety for every line.", self.btn_add_line)
            return None
        return {
            "category": self.category,
            "party_name": self.edt_party.text().strip(),
            "date": self.date_edit.date().toString("yyyy-MM-dd"),
            "bill_no": self.edt_bill_no.text().strip() or None,
            "vehicle_ref": self.edt_vehicle.text().strip() or None,
            "own_vehicle": self.own_vehicle,
            "address": self.edt_address.text().strip() or None,
            "lines": lines,
        }

    def accept(self) -> None:  # type: ignore[override]
        p = self.get_payload()
        if p is None:
            return
        self._payload = p
        super().accept()

    def payload(self) -> dict | None:
        """Return the last accepted payload, or None if the dialog was canceled."""
        return self._payload
