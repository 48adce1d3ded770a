from __future__ import annotations

import sys

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QSizePolicy,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from .config import DEFAULT_POLICY, LedgerPolicy
from .constants import APP_NAME
from .database import get_connection
from .modules.base_module import BaseModule
from .modules.loadings.controller import LoadingsController
from .modules.payments.controller import PaymentsController
from .modules.stock.controller import StockController
from .utils.loggers import get_logger


class MainWindow(QMainWindow):
    def __init__(self, conn, policy: LedgerPolicy = DEFAULT_POLICY):
        super().__init__()
        self.setWindowTitle(APP_NAME)
        self.setWindowFlag(Qt.WindowMinimizeButtonHint, True)
        self.setWindowFlag(Qt.WindowMaximizeButtonHint, True)
        self.setMinimumSize(960, 600)

        self.conn = conn
        self.policy = policy

        # ---- Central layout: left nav + stacked pages ----
        central = QWidget(self)
        layout = QVBoxLayout(central)
        self.setCentralWidget(central)

        self.nav = QListWidget()
        self.nav.setFixedWidth(110)
        self.nav.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Expanding)
        self.stack = QStackedWidget()

        row = QWidget()
        row_lay = QHBoxLayout(row)
        row_lay.addWidget(self.nav)
        row_lay.addWidget(self.stack, 1)
        layout.addWidget(row, 1)

        self.modules: list[tuple[str, BaseModule]] = []
        self.nav.currentRowChanged.connect(self._on_nav_item_changed)

        self.add_module("Loadings", LoadingsController(conn, policy))
        self.add_module("Stock", StockController(conn, policy))
        self.add_module("Payments", PaymentsController(conn, policy))

        if self.nav.count():
            self.nav.setCurrentRow(0)

    def add_module(self, title: str, module: BaseModule):
        page = module.get_widget()
        self.nav.addItem(QListWidgetItem(title))
        self.stack.addWidget(page)
        self.modules.append((title, module))

    def _on_nav_item_changed(self, index: int):
        if index < 0 or index >= len(self.modules):
            return
        # balances are derived, so pages re-read when shown
        _, mod = self.modules[index]
        for hook in ("reload", "_reload"):
            fn = getattr(mod, hook, None)
            if callable(fn):
                fn()
                break
        self.stack.setCurrentIndex(index)


def main(argv: list[str] | None = None) -> int:
    log = get_logger()
    app = QApplication(argv if argv is not None else sys.argv)
    conn = get_connection()
    log.info("%s started", APP_NAME)
    win = MainWindow(conn, DEFAULT_POLICY)
    win.show()
    try:
        return app.exec()
    finally:
        conn.close()


if __name__ == "__main__":
    sys.exit(main())
