# tests/test_calculations.py
from __future__ import annotations

import itertools

import pytest

from fish_ledger.config import LedgerPolicy
from fish_ledger.constants import AGENT_INTAKE, CLIENT_DISPATCH, FARMER_INTAKE
from fish_ledger.modules.ledger.calculations import (
    compute_line,
    dispatch_grand_total,
    dispatch_line_total_price,
    effective_deduction,
    floor_trays,
    implied_per_tray_weight,
    intake_line_total_price,
    line_weight,
    record_totals,
    round_half_up,
    status_from_paid,
)
from fish_ledger.modules.ledger.types import LineItem


def test_line_weight_is_trays_times_weight_plus_loose():
    assert line_weight(10, 5, 35) == 355
    assert line_weight(0, 12.5, 35) == 12.5
    assert line_weight(3, 0, 33.5) == pytest.approx(100.5)


def test_line_weight_monotonic_in_trays_and_loose():
    trays = [0, 1, 2, 7, 40]
    loose = [0, 0.5, 3, 34.999, 100]
    for t, lo in itertools.product(trays, loose):
        w = line_weight(t, lo, 35)
        assert w == pytest.approx(t * 35 + lo)
        assert line_weight(t + 1, lo, 35) >= w
        assert line_weight(t, lo + 0.25, 35) >= w


@pytest.mark.parametrize(
    "total_kg, pct, expected",
    [
        (1000, 5, 950),
        (101, 5, 96),     # 95.95
        (10, 5, 10),      # 9.5 rounds half-up
        (10, 0, 10),
        (0, 5, 0),
    ],
)
def test_dispatch_grand_total(total_kg, pct, expected):
    assert dispatch_grand_total(total_kg, pct) == expected


def test_intake_line_total_price_rounds_to_whole_units():
    assert intake_line_total_price(3200, 100, 0.95) == 304000
    assert intake_line_total_price(10.5, 33, 0.95) == 329      # 329.175
    assert intake_line_total_price(1, 0.5, 1.0) == 1           # half-up


def test_dispatch_line_total_price_to_the_paisa():
    assert dispatch_line_total_price(100, 50, 5) == 4750.0
    assert dispatch_line_total_price(10.5, 3, 5) == 29.93      # 29.925
    assert dispatch_line_total_price(100, 50, 0) == 5000.0


def test_pure_functions_are_repeatable():
    first = (dispatch_grand_total(777.7, 5), intake_line_total_price(777.7, 91, 0.95))
    for _ in range(3):
        assert (dispatch_grand_total(777.7, 5), intake_line_total_price(777.7, 91, 0.95)) == first


def test_deduction_points_stay_separate():
    # weight-side deduction for dispatch, price-side factor for intake
    p = LedgerPolicy(dispatch_deduction_percent=10.0, intake_net_factor=0.5)
    intake = compute_line(FARMER_INTAKE, 0, 100, 10, p)
    client = compute_line(CLIENT_DISPATCH, 0, 100, 10, p)
    assert intake.total_price == 500
    assert client.total_price == 900.0


def test_own_vehicle_removes_the_dispatch_deduction(policy):
    assert effective_deduction(policy, True) == 0.0
    assert effective_deduction(policy, False) == 5.0
    assert compute_line(CLIENT_DISPATCH, 10, 0, 100, policy, own_vehicle=True).total_price == 35000.0
    assert compute_line(CLIENT_DISPATCH, 10, 0, 100, policy).total_price == 33250.0


def test_implied_per_tray_weight():
    assert implied_per_tray_weight(3500, 100) == 35
    assert implied_per_tray_weight(335, 10) == 33.5
    assert implied_per_tray_weight(0, 0) == 0.0
    assert implied_per_tray_weight(120, 0) == 0.0


def test_compute_line_with_pinned_per_tray_weight(policy):
    t = compute_line(FARMER_INTAKE, 90, 50, 100, policy, per_tray_weight=35)
    assert (t.tray_kg, t.total_kg, t.total_price) == (3150, 3200, 304000)

    t = compute_line(AGENT_INTAKE, 10, 5, 0, policy, per_tray_weight=33.5)
    assert (t.tray_kg, t.total_kg, t.total_price) == (335, 340, 0)


def test_record_totals(policy):
    items = [
        LineItem(None, None, "RC", 10, 10, 350, 360, 100, 34200),
        LineItem(None, None, "ROHU", 0, 5.5, 0, 5.5, 80, 418),
    ]
    t = record_totals(items, category=CLIENT_DISPATCH, policy=policy)
    assert t["total_trays"] == 10
    assert t["total_loose_kg"] == 15.5
    assert t["total_tray_kg"] == 350
    assert t["total_kg"] == 365.5
    assert t["net_weight_kg"] == 347       # round(347.225)
    assert t["total_price"] == 34618

    assert record_totals(items, category=CLIENT_DISPATCH, policy=policy, own_vehicle=True)["net_weight_kg"] == 366


@pytest.mark.parametrize("category", [FARMER_INTAKE, AGENT_INTAKE])
def test_intake_grand_total_weight_has_no_deduction(policy, category):
    items = [
        LineItem(None, None, "RC", 10, 0, 350, 350, 0, 0),
        LineItem(None, None, "ROHU", 0, 5.5, 0, 5.5, 80, 418),
    ]
    t = record_totals(items, category=category, policy=policy)
    assert t["total_kg"] == 355.5
    assert t["net_weight_kg"] == 356       # round(355.5), price carries the loss


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.125, 2) == 0.13
    assert round_half_up("not a number") == 0


@pytest.mark.parametrize(
    "total, paid, status",
    [(100, 0, "unpaid"), (100, 50, "partial"), (100, 100, "paid"), (100, 150, "paid"), (0, 0, "paid")],
)
def test_status_from_paid(total, paid, status):
    assert status_from_paid(total, paid) == status


def test_floor_trays_tolerates_float_noise():
    assert floor_trays(489.99999999999994, 35) == 14
    assert floor_trays(34.999, 35) == 0
    assert floor_trays(70, 0) == 0
