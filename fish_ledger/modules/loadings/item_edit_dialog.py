"""
Edit one saved bill line.

Drives a LineEditSession: every change goes through the session, which
recalculates with the per-tray weight the line was billed at (and clamps
dispatch lines against stock). Cancel discards the session's shadow copy;
saving is left to the controller (LoadingsService.save_edit).
"""
from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QDoubleSpinBox,
    QFormLayout,
    QLabel,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from ...utils.helpers import fmt_kg, fmt_money
from ..ledger.errors import ValidationError
from ..ledger.line_edit_session import LineEditSession


class ItemEditDialog(QDialog):
    def __init__(self, session: LineEditSession, parent: QWidget | None = None, *, variety_name: str = ""):
        super().__init__(parent)
        self.session = session
        shadow = session.preview()
        self.setWindowTitle(f"Edit {variety_name or shadow.variety_code}")
        self.setModal(True)
        self.setMinimumWidth(360)

        self.spin_trays = QSpinBox()
        self.spin_trays.setRange(0, 100000)
        self.spin_trays.setValue(int(shadow.no_trays))

        self.spin_loose = QDoubleSpinBox()
        self.spin_loose.setRange(0.0, 10**7)
        self.spin_loose.setDecimals(3)
        self.spin_loose.setValue(float(shadow.loose_kg))

        self.spin_price = QDoubleSpinBox()
        self.spin_price.setRange(0.0, 10**7)
        self.spin_price.setDecimals(2)
        self.spin_price.setValue(float(shadow.price_per_kg))

        self.lbl_per_tray = QLabel(f"{fmt_kg(session.per_tray_weight)} Kgs")
        self.lbl_tray_kg = QLabel("")
        self.lbl_total_kg = QLabel("")
        self.lbl_total_price = QLabel("")
        for lbl in (self.lbl_tray_kg, self.lbl_total_kg, self.lbl_total_price):
            lbl.setAlignment(Qt.AlignRight | Qt.AlignVCenter)

        self.lbl_notice = QLabel("")
        self.lbl_notice.setObjectName("clampNotice")
        self.lbl_notice.setStyleSheet("color:#b26a00;")
        self.lbl_notice.setVisible(False)

        self.lbl_error = QLabel("")
        self.lbl_error.setObjectName("errorLabel")
        self.lbl_error.setStyleSheet("color:#b00020;")
        self.lbl_error.setVisible(False)

        self.buttons = QDialogButtonBox(QDialogButtonBox.Save | QDialogButtonBox.Cancel)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)

        form = QFormLayout()
        form.addRow("No. of Trays", self.spin_trays)
        form.addRow("Loose Kgs", self.spin_loose)
        form.addRow("Price / Kg", self.spin_price)
        form.addRow("Per-tray weight", self.lbl_per_tray)
        form.addRow("Tray Kgs", self.lbl_tray_kg)
        form.addRow("Total Kgs", self.lbl_total_kg)
        form.addRow("Total Price", self.lbl_total_price)

        layout = QVBoxLayout(self)
        layout.addLayout(form)
        layout.addWidget(self.lbl_notice)
        layout.addWidget(self.lbl_error)
        layout.addWidget(self.buttons)

        self.spin_trays.valueChanged.connect(lambda v: self._apply(self.session.set_trays, v))
        self.spin_loose.valueChanged.connect(lambda v: self._apply(self.session.set_loose, v))
        self.spin_price.valueChanged.connect(lambda v: self._apply(self.session.set_price, v))
        self._show(shadow)

    def _apply(self, setter, value) -> None:
        self.lbl_error.setVisible(False)
        try:
            shadow = setter(value)
        except ValidationError as e:
            self.lbl_error.setText(str(e))
            self.lbl_error.setVisible(True)
            return
        clamp = self.session.last_clamp
        if clamp is not None and clamp.was_clamped:
            for w in (self.spin_trays, self.spin_loose):
                w.blockSignals(True)
            self.spin_trays.setValue(int(shadow.no_trays))
            self.spin_loose.setValue(float(shadow.loose_kg))
            for w in (self.spin_trays, self.spin_loose):
                w.blockSignals(False)
            self.lbl_notice.setText(clamp.notice)
            self.lbl_notice.setVisible(True)
        else:
            self.lbl_notice.setVisible(False)
        self._show(shadow)

    def _show(self, item) -> None:
        self.lbl_tray_kg.setText(fmt_kg(item.tray_kg))
        self.lbl_total_kg.setText(fmt_kg(item.total_kg))
        self.lbl_total_price.setText(fmt_money(item.total_price))

    def reject(self) -> None:  # type: ignore[override]
        self.session.cancel()
        super().reject()


class AddItemDialog(QDialog):
    """Pick a variety and quantities to append to an existing bill."""

    def __init__(self, varieties, parent: QWidget | None = None):
        super().__init__(parent)
        self.setWindowTitle("Add Variety")
        self.setModal(True)

        self.cmb_variety = QComboBox()
        for code, name in varieties:
            self.cmb_variety.addItem(f"{name} ({code})", userData=code)

        self.spin_trays = QSpinBox()
        self.spin_trays.setRange(0, 100000)
        self.spin_loose = QDoubleSpinBox()
        self.spin_loose.setRange(0.0, 10**7)
        self.spin_loose.setDecimals(3)
        self.spin_price = QDoubleSpinBox()
        self.spin_price.setRange(0.0, 10**7)
        self.spin_price.setDecimals(2)

        self.lbl_error = QLabel("")
        self.lbl_error.setStyleSheet("color:#b00020;")
        self.lbl_error.setVisible(False)

        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)

        form = QFormLayout()
        form.addRow("Variety*", self.cmb_variety)
        form.addRow("No. of Trays", self.spin_trays)
        form.addRow("Loose Kgs", self.spin_loose)
        form.addRow("Price / Kg", self.spin_price)
        layout = QVBoxLayout(self)
        layout.addLayout(form)
        layout.addWidget(self.lbl_error)
        layout.addWidget(self.buttons)
        self._payload: dict | None = None

    def accept(self) -> None:  # type: ignore[override]
        if self.cmb_variety.currentData() is None:
            self.lbl_error.setText("Select a variety.")
            self.lbl_error.setVisible(True)
            return
        if self.spin_trays.value() == 0 and self.spin_loose.value() == 0:
            self.lbl_error.setText("Enter trays or loose kilograms.")
            self.lbl_error.setVisible(True)
            return
        self._payload = {
            "variety_code": self.cmb_variety.currentData(),
            "trays": self.spin_trays.value(),
            "loose": self.spin_loose.value(),
            "price": self.spin_price.value(),
        }
        super().accept()

    def payload(self) -> dict | None:
        return self._payload
