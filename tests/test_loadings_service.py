# tests/test_loadings_service.py
from __future__ import annotations

import sqlite3

import pytest

from fish_ledger.constants import AGENT_INTAKE, CLIENT_DISPATCH, FARMER_INTAKE
from fish_ledger.database.repositories import AuditRepo, LoadingsDomainError, VarietiesDomainError, VarietiesRepo
from fish_ledger.modules.ledger.errors import PersistenceFailure, RecordNotFound, ValidationError
from fish_ledger.modules.ledger.line_edit_session import LineState
from fish_ledger.modules.ledger.types import ProposedLine

DAY = "2025-06-01"


# ---------------- create ----------------

def test_intake_is_written_with_line_and_header_totals(intake, loadings, row_count):
    created = intake("RC", 100, 50, 100, date=DAY)
    rec = loadings.get_loading(created.loading_id)
    assert rec.category == FARMER_INTAKE
    assert rec.bill_no == "FL-25-26-0001"
    (item,) = rec.items
    assert (item.no_trays, item.loose_kg, item.tray_kg, item.total_kg) == (100, 50, 3500, 3550)
    assert item.total_price == 337250                  # round(3550 * 100 * 0.95)
    assert rec.total_trays == 100
    assert rec.total_kg == 3550
    assert rec.net_weight_kg == 3550                   # no weight deduction on intake
    assert rec.total_price == rec.grand_total == 337250
    assert row_count("loadings") == 1
    assert row_count("loading_items") == 1


def test_dispatch_is_clamped_at_commit(intake, dispatch, loadings, stock):
    intake("RC", 10, 150, 10, date=DAY)                # 500 kg
    created = dispatch("RC", 16, 0, 100, date=DAY)
    assert created.notices == ["Stock exceeded. Capped at 500 Kgs"]
    (item,) = loadings.get_loading(created.loading_id).items
    assert (item.no_trays, item.loose_kg, item.total_kg) == (14, 10, 500)
    assert item.total_price == 47500.0
    assert created.bill_no.startswith("CL-25-26-")
    assert stock.net_stock("RC").kg == 0


def test_dispatch_drops_rows_without_stock(intake, add_loading, loadings):
    intake("RC", 0, 500, 10, date=DAY)
    created = add_loading(CLIENT_DISPATCH, "Ravi", [("RC", 10, 0, 100), ("ROHU", 2, 0, 100)], date=DAY)
    assert len(created.clamps) == 2
    assert created.clamps[1].was_clamped
    assert [i.variety_code for i in loadings.get_loading(created.loading_id).items] == ["RC"]


def test_dispatch_with_no_stock_is_refused(dispatch, row_count):
    with pytest.raises(ValidationError):
        dispatch("RC", 2, 0, 100, date=DAY)
    assert row_count("loadings") == 0


def test_own_vehicle_flag_round_trips(intake, dispatch, loadings):
    intake("RC", 10, 0, 10, date=DAY)
    created = dispatch("RC", 10, 0, 100, date=DAY, own_vehicle=True)
    rec = loadings.get_loading(created.loading_id)
    assert rec.own_vehicle is True
    assert rec.total_price == 35000.0
    assert rec.net_weight_kg == 350


def test_intake_grand_total_weight_is_not_deducted(add_loading, loadings):
    created = add_loading(AGENT_INTAKE, "Suresh", [("RC", 10, 0, 0)], date=DAY)
    rec = loadings.get_loading(created.loading_id)
    assert rec.total_kg == 350
    assert rec.net_weight_kg == rec.total_kg

    session = loadings.start_edit(rec.items[0].item_id)
    session.set_loose(4.5)
    loadings.save_edit(session)
    rec = loadings.get_loading(created.loading_id)
    assert rec.net_weight_kg == 355                    # round(354.5)


@pytest.mark.parametrize(
    "category, party, lines",
    [
        (FARMER_INTAKE, "Mohan", [("RC", -1, 0, 10)]),
        (FARMER_INTAKE, "Mohan", [("RC", 1.5, 0, 10)]),
        (FARMER_INTAKE, "Mohan", [("RC", 1, -2, 10)]),
        (FARMER_INTAKE, "Mohan", [("RC", 1, 0, -10)]),
        (FARMER_INTAKE, "Mohan", [("RC", 0, 0, 10)]),
        (FARMER_INTAKE, "Mohan", [("XYZ", 1, 0, 10)]),
        (FARMER_INTAKE, "   ", [("RC", 1, 0, 10)]),
        (FARMER_INTAKE, "Mohan", []),
        ("SHIPMENT", "Mohan", [("RC", 1, 0, 10)]),
    ],
)
def test_validation_happens_before_any_write(add_loading, row_count, category, party, lines):
    with pytest.raises(ValidationError):
        add_loading(category, party, lines, date=DAY)
    assert row_count("loadings") == 0
    assert row_count("loading_items") == 0
    assert row_count("audit_logs") == 0


def test_bad_date_is_rejected(intake):
    with pytest.raises(ValidationError):
        intake("RC", 1, 0, 10, date="01/06/2025")


def test_duplicate_bill_number_leaves_nothing_behind(intake, row_count):
    intake("RC", 1, 0, 10, date=DAY, bill_no="FL-MANUAL-1")
    with pytest.raises(LoadingsDomainError):
        intake("ROHU", 2, 0, 10, date=DAY, bill_no="FL-MANUAL-1")
    assert row_count("loadings") == 1
    assert row_count("loading_items") == 1


def test_storage_failure_rolls_back_and_is_wrapped(conn, intake, row_count):
    conn.execute("DROP TABLE audit_logs")
    with pytest.raises(PersistenceFailure) as exc:
        intake("RC", 1, 0, 10, date=DAY)
    assert isinstance(exc.value.original, sqlite3.Error)
    assert row_count("loadings") == 0
    assert row_count("loading_items") == 0


# ---------------- bill numbers ----------------

def test_bill_numbers_count_per_category_and_financial_year(intake, add_loading, loadings):
    assert intake("RC", 1, 0, 1, date="2025-03-31").bill_no == "FL-24-25-0001"
    assert intake("RC", 1, 0, 1, date="2025-04-01").bill_no == "FL-25-26-0001"
    assert intake("RC", 1, 0, 1, date="2026-03-31").bill_no == "FL-25-26-0002"
    agent = add_loading(AGENT_INTAKE, "Gopal", [("RC", 1, 0, 1)], date="2025-04-02")
    assert agent.bill_no == "AL-25-26-0001"
    assert loadings.next_bill_no(CLIENT_DISPATCH, "2025-08-15") == "CL-25-26-0001"


# ---------------- line edits ----------------

def test_example_edit_session_saved_through_service(intake, loadings, conn):
    created = intake("RC", 100, 50, 100, date=DAY)
    item_id = created.record.items[0].item_id

    s = loadings.start_edit(item_id)
    assert s.per_tray_weight == 35
    s.set_trays(90)
    change = loadings.save_edit(s)

    assert s.state is LineState.SAVED
    assert (change.item.tray_kg, change.item.total_kg, change.item.total_price) == (3150, 3200, 304000)
    rec = loadings.get_loading(created.loading_id)
    assert (rec.total_trays, rec.total_kg, rec.total_price) == (90, 3200, 304000)

    (entry,) = AuditRepo(conn).list_for("loading_items", item_id)[1:]
    assert entry.action_type == "UPDATE"
    assert set(entry.old_values) == {"no_trays", "tray_kg", "total_kg", "total_price"}
    assert entry.new_values["no_trays"] == 90


def test_cancelled_session_changes_nothing(intake, loadings):
    created = intake("RC", 10, 5, 100, date=DAY)
    item = created.record.items[0]
    s = loadings.start_edit(item.item_id)
    s.set_trays(1)
    s.cancel()
    assert loadings.get_loading(created.loading_id).items == [item]


def test_dispatch_edit_is_clamped_again_when_saved(intake, dispatch, loadings, stock):
    intake("RC", 10, 150, 10, date=DAY)                # 500 kg
    first = dispatch("RC", 10, 0, 100, date=DAY)       # 350 kg
    s = loadings.start_edit(first.record.items[0].item_id)
    s.set_trays(14)                                    # fits the snapshot (500 room)
    assert not s.last_clamp.was_clamped

    dispatch("RC", 4, 0, 100, party="Sunil", date=DAY)  # takes 140 of the 150 left

    change = loadings.save_edit(s)
    assert change.clamp.was_clamped
    assert change.clamp.max_kg == 360
    assert (change.item.no_trays, change.item.loose_kg, change.item.total_kg) == (10, 10, 360)
    assert stock.net_stock("RC").kg == 0


def test_add_item_to_bill_recomputes_totals(intake, loadings):
    created = intake("RC", 10, 0, 100, date=DAY)
    change = loadings.add_item_to_bill(created.loading_id, "rohu", 2, 5, 50)
    assert change.item.variety_code == "ROHU"
    assert change.item.total_kg == 75
    assert change.item.total_price == 3563             # round(3562.5)
    rec = loadings.get_loading(created.loading_id)
    assert len(rec.items) == 2
    assert rec.total_kg == 425
    assert rec.total_price == 33250 + 3563


def test_add_item_to_dispatch_bill_is_clamped(intake, dispatch, loadings):
    intake("RC", 10, 150, 10, date=DAY)
    created = dispatch("RC", 10, 0, 100, date=DAY)
    change = loadings.add_item_to_bill(created.loading_id, "RC", 10, 0, 100)
    assert change.clamp.was_clamped
    assert (change.item.no_trays, change.item.loose_kg) == (4, 10)
    with pytest.raises(ValidationError):
        loadings.add_item_to_bill(created.loading_id, "RC", 1, 0, 100)


def test_deleting_last_line_deletes_the_bill(add_loading, loadings, row_count, conn):
    created = add_loading(FARMER_INTAKE, "Mohan", [("RC", 10, 0, 100), ("ROHU", 0, 20, 50)], date=DAY)
    rc, rohu = created.record.items

    change = loadings.delete_item(rc.item_id)
    assert change.record_deleted is False
    rec = loadings.get_loading(created.loading_id)
    assert [i.variety_code for i in rec.items] == ["ROHU"]
    assert rec.total_kg == 20

    change = loadings.delete_item(rohu.item_id)
    assert change.record_deleted is True
    with pytest.raises(RecordNotFound):
        loadings.get_loading(created.loading_id)
    assert row_count("loading_items") == 0
    deletes = [e for e in AuditRepo(conn).list_for("loadings") if e.action_type == "DELETE"]
    assert len(deletes) == 1


def test_deleting_a_dispatch_bill_returns_its_stock(intake, dispatch, loadings, stock, row_count, conn):
    intake("RC", 10, 0, 10, date=DAY)
    created = dispatch("RC", 4, 0, 100, date=DAY)
    assert stock.net_stock("RC").kg == 210

    loadings.delete_loading(created.loading_id)

    assert stock.net_stock("RC").kg == 350
    assert row_count("loadings") == 1
    assert row_count("loading_items") == 1
    actions = [e.action_type for e in AuditRepo(conn).list_for("loadings", created.loading_id)]
    assert actions == ["CREATE", "DELETE"]


def test_missing_ids_raise_record_not_found(loadings):
    with pytest.raises(RecordNotFound):
        loadings.start_edit(999)
    with pytest.raises(RecordNotFound):
        loadings.delete_item(999)
    with pytest.raises(RecordNotFound):
        loadings.add_item_to_bill(999, "RC", 1, 0, 0)
    with pytest.raises(RecordNotFound):
        loadings.delete_loading(999)


# ---------------- stock & varieties ----------------

def test_stock_positions_follow_loadings(intake, dispatch, stock):
    intake("RC", 20, 0, 10, date=DAY)                  # 700
    intake("ROHU", 0, 30, 10, date=DAY)                # under one tray
    dispatch("RC", 5, 3, 100, date=DAY)                # 178
    rc = stock.net_stock("rc")
    assert (rc.intake_kg, rc.dispatched_kg, rc.kg, rc.trays) == (700, 178, 522, 14)
    assert [p.variety_code for p in stock.available_varieties()] == ["RC"]
    assert {p.variety_code for p in stock.positions()} == {"RC", "ROHU", "CATLA"}


def test_used_variety_cannot_be_deleted(intake, conn):
    intake("RC", 1, 0, 10, date=DAY)
    repo = VarietiesRepo(conn)
    with pytest.raises(VarietiesDomainError):
        repo.delete("RC")
    repo.delete("CATLA")
    assert repo.get("CATLA") is None
    assert repo.create(" pangas ", "Pangas") == "PANGAS"
