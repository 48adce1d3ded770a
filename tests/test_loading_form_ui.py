# tests/test_loading_form_ui.py
from __future__ import annotations

from fish_ledger.constants import CLIENT_DISPATCH, FARMER_INTAKE
from fish_ledger.modules.ledger.line_edit_session import LineEditSession, LineState
from fish_ledger.modules.ledger.stock_ledger import StockLedger, VarietyMovement
from fish_ledger.modules.ledger.types import LineItem
from fish_ledger.modules.loadings.form import LoadingForm
from fish_ledger.modules.loadings.item_edit_dialog import ItemEditDialog

VARIETIES = [("RC", "Rupchand"), ("ROHU", "Rohu")]


def _dispatch_form(qtbot, intake_kg=500.0):
    stock = StockLedger([VarietyMovement("RC", "Rupchand", intake_kg, 0)])
    form = LoadingForm(CLIENT_DISPATCH, varieties=VARIETIES, stock=stock)
    qtbot.addWidget(form)
    return form


def test_dispatch_row_is_clamped_as_typed(qtbot):
    form = _dispatch_form(qtbot)
    row = form.add_line("RC", 16, 0, 100)
    assert row.spin_trays.value() == 14
    assert row.spin_loose.value() == 10.0
    assert not form.lbl_notice.isHidden()
    assert "Capped at 500 Kgs" in form.lbl_notice.text()


def test_second_row_sees_the_first(qtbot):
    form = _dispatch_form(qtbot)
    first = form.add_line("RC", 10, 0, 100)
    second = form.add_line("RC", 0, 0, 100)
    second.spin_trays.setValue(10)
    assert first.spin_trays.value() == 10
    assert (second.spin_trays.value(), second.spin_loose.value()) == (4, 10.0)

    form.remove_line(first)
    second.spin_trays.setValue(10)
    assert (second.spin_trays.value(), second.spin_loose.value()) == (10, 10.0)


def test_fitting_rows_show_no_notice(qtbot):
    form = _dispatch_form(qtbot)
    form.add_line("RC", 14, 10, 100)
    assert form.lbl_notice.isHidden()
    assert form.notices == []


def test_intake_form_is_not_clamped_and_builds_payload(qtbot):
    form = LoadingForm(FARMER_INTAKE, varieties=VARIETIES)
    qtbot.addWidget(form)
    row = form.add_line("ROHU", 100, 50, 100)
    assert row.spin_trays.value() == 100
    assert "3,550" in row.lbl_totals.text()
    assert "337,250.00" in row.lbl_totals.text()
    assert "Grand Total: 3,550 Kgs" in form.lbl_summary.text()

    assert form.get_payload() is None                  # no name yet
    assert not form.lbl_error.isHidden()

    form.edt_party.setText("  Mohan ")
    p = form.get_payload()
    assert p["party_name"] == "Mohan"
    assert p["category"] == FARMER_INTAKE
    assert p["own_vehicle"] is False
    assert p["bill_no"] is None
    (line,) = p["lines"]
    assert (line.variety_code, line.no_trays, line.loose_kg, line.price_per_kg) == ("ROHU", 100, 50, 100)


def test_own_vehicle_changes_summary(qtbot):
    form = _dispatch_form(qtbot)
    form.add_line("RC", 10, 0, 100)
    assert "33,250.00" in form.lbl_summary.text()
    form.chk_own_vehicle.setChecked(True)
    assert "35,000.00" in form.lbl_summary.text()
    form.edt_party.setText("Ravi")
    assert form.get_payload()["own_vehicle"] is True


def test_item_edit_dialog_drives_the_session(qtbot, policy):
    item = LineItem(1, 1, "RC", 100, 50, 3500, 3550, 100, 337250)
    session = LineEditSession(item, FARMER_INTAKE, policy=policy)
    session.begin()
    dlg = ItemEditDialog(session, variety_name="Rupchand")
    qtbot.addWidget(dlg)

    dlg.spin_trays.setValue(90)
    assert dlg.lbl_tray_kg.text() == "3,150"
    assert dlg.lbl_total_kg.text() == "3,200"
    assert dlg.lbl_total_price.text() == "304,000.00"
    assert session.preview().no_trays == 90

    dlg.reject()
    assert session.state is LineState.CREATED
    assert session.item.no_trays == 100


def test_item_edit_dialog_shows_clamp(qtbot, policy):
    stock = StockLedger([VarietyMovement("RC", "Rupchand", 500, 350)], policy)
    item = LineItem(4, 2, "RC", 10, 0, 350, 350, 100, 33250)
    session = LineEditSession(item, CLIENT_DISPATCH, policy=policy, stock=stock)
    session.begin()
    dlg = ItemEditDialog(session)
    qtbot.addWidget(dlg)

    dlg.spin_trays.setValue(16)
    assert dlg.spin_trays.value() == 14
    assert dlg.spin_loose.value() == 10.0
    assert not dlg.lbl_notice.isHidden()
