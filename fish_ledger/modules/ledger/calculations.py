"""
ledger/calculations.py

Pure weight/price helpers for loadings and bills.

- line_weight():             trays x per-tray weight + loose kilograms
- dispatch_grand_total():    payable weight after the weight-side deduction
- intake_line_total_price(): money for an intake line after the price-side yield factor

Do not import repos or open DB connections here.
Only compute numbers; formatting belongs in the UI.

Intermediate math is done in Decimal from the str() of each input and only
final outputs are rounded (half-up), so repeated edits do not drift.
"""
from __future__ import annotations

import math
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Dict, Iterable, Optional

from ...config import LedgerPolicy
from ...constants import INTAKE_CATEGORIES
from .types import LineItem, LineTotals

__all__ = [
    "WEIGHT_PLACES",
    "MONEY_PLACES",
    "round_half_up",
    "round_weight",
    "round_money",
    "clamp_non_negative",
    "tray_kg",
    "line_weight",
    "dispatch_grand_total",
    "intake_line_total_price",
    "dispatch_line_total_price",
    "effective_deduction",
    "implied_per_tray_weight",
    "line_total_price",
    "compute_line",
    "record_totals",
    "status_from_paid",
    "floor_trays",
]

# Weights are stored to the gram, money to the paisa.
WEIGHT_PLACES = 3
MONEY_PLACES = 2


# -----------------------------
# Rounding & utility helpers
# -----------------------------

def _to_decimal(x: Any) -> Decimal:
    try:
        return Decimal(str(x))
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def round_half_up(x: Any, places: int = 0) -> float:
    """Round to `places` decimals using half-up (typical financial rounding)."""
    q = Decimal(1).scaleb(-places)
    return float(_to_decimal(x).quantize(q, rounding=ROUND_HALF_UP))


def round_weight(kg: Any) -> float:
    return round_half_up(kg, WEIGHT_PLACES)


def round_money(amount: Any) -> float:
    return round_half_up(amount, MONEY_PLACES)


def clamp_non_negative(x: float) -> float:
    """Return x if x > 0, else 0.0."""
    return x if x > 0.0 else 0.0


# -----------------------------
# Weight
# -----------------------------

def tray_kg(trays: float, per_tray_weight: float) -> float:
    """Weight held in full trays. Negative inputs count as zero."""
    return clamp_non_negative(float(trays)) * clamp_non_negative(float(per_tray_weight))


def line_weight(trays: float, loose: float, per_tray_weight: float) -> float:
    """
    total_kg = trays * per_tray_weight + loose

    Both quantities are clamped to >= 0 before use. Callers reject negative
    input earlier (see validation.py); this is never a silent correction path.
    """
    return tray_kg(trays, per_tray_weight) + clamp_non_negative(float(loose))


def dispatch_grand_total(total_kg: float, deduction_percent: float) -> float:
    """
    Payable weight for a dispatch: round(total_kg * (1 - deduction_percent/100)).

    The shrinkage is taken off the WEIGHT (in-transit loss), not the price.
    """
    factor = Decimal(1) - _to_decimal(deduction_percent) / Decimal(100)
    return round_half_up(_to_decimal(total_kg) * factor, 0)


def intake_line_total_price(total_kg: float, price_per_kg: float, net_factor: float) -> float:
    """
    Money for an intake line: round(total_kg * price_per_kg * net_factor).

    The yield factor is taken off the PRICE (processing yield). Keep this
    separate from dispatch_grand_total(); the two model different losses.
    """
    gross = _to_decimal(total_kg) * _to_decimal(price_per_kg)
    return round_half_up(gross * _to_decimal(net_factor), 0)


def dispatch_line_total_price(total_kg: float, price_per_kg: float, deduction_percent: float) -> float:
    """
    Money for a priced client dispatch line: payable weight x price, to the paisa.

    Payable weight here is the unrounded weight after the dispatch deduction.
    """
    factor = Decimal(1) - _to_decimal(deduction_percent) / Decimal(100)
    payable = _to_decimal(total_kg) * factor
    return round_half_up(payable * _to_decimal(price_per_kg), MONEY_PLACES)


def effective_deduction(policy: LedgerPolicy, own_vehicle: bool) -> float:
    """No transit deduction when the business's own vehicle carried the load."""
    return 0.0 if own_vehicle else float(policy.dispatch_deduction_percent)


def implied_per_tray_weight(stored_tray_kg: float, stored_trays: int) -> float:
    """
    Per-tray weight a saved line was billed at: stored_tray_kg / stored_trays,
    or 0 when the line has no trays. Not rounded.
    """
    trays = float(stored_trays or 0)
    if trays <= 0:
        return 0.0
    return float(stored_tray_kg or 0.0) / trays


# -----------------------------
# Line & record roll-ups
# -----------------------------

def line_total_price(
    category: str,
    total_kg: float,
    price_per_kg: float,
    policy: LedgerPolicy,
    *,
    own_vehicle: bool = False,
) -> float:
    """Pick the price formula for the loading category."""
    if category in INTAKE_CATEGORIES:
        return intake_line_total_price(total_kg, price_per_kg, policy.intake_net_factor)
    return dispatch_line_total_price(total_kg, price_per_kg, effective_deduction(policy, own_vehicle))


def compute_line(
    category: str,
    trays: int,
    loose: float,
    price_per_kg: float,
    policy: LedgerPolicy,
    *,
    own_vehicle: bool = False,
    per_tray_weight: Optional[float] = None,
) -> LineTotals:
    """
    Derived totals for one line.

    `per_tray_weight` overrides the policy constant; edit sessions pass the
    weight pinned from the stored line.
    """
    w = policy.per_tray_kg if per_tray_weight is None else per_tray_weight
    trays_kg = round_weight(tray_kg(trays, w))
    total = round_weight(trays_kg + clamp_non_negative(float(loose)))
    price = line_total_price(category, total, price_per_kg, policy, own_vehicle=own_vehicle)
    return LineTotals(tray_kg=trays_kg, total_kg=total, total_price=price)


def record_totals(
    items: Iterable[LineItem],
    *,
    category: str,
    policy: LedgerPolicy,
    own_vehicle: bool = False,
) -> Dict[str, float]:
    """
    Header roll-up for a loading record from its (already computed) lines.

    net_weight_kg is the "grand total" weight: total_kg less the transit
    deduction for client dispatches, and simply round(total_kg) for intake,
    whose loss is taken off the price instead. total_price is the billed
    money and is what the due ledger sums.
    """
    items = list(items)
    total_kg = round_weight(sum(float(i.total_kg) for i in items))
    if category in INTAKE_CATEGORIES:
        deduction = 0.0
    else:
        deduction = effective_deduction(policy, own_vehicle)
    return {
        "total_trays": int(sum(int(i.no_trays) for i in items)),
        "total_loose_kg": round_weight(sum(float(i.loose_kg) for i in items)),
        "total_tray_kg": round_weight(sum(float(i.tray_kg) for i in items)),
        "total_kg": total_kg,
        "net_weight_kg": dispatch_grand_total(total_kg, deduction),
        "total_price": round_money(sum(float(i.total_price) for i in items)),
    }


# -----------------------------
# Common status helper
# -----------------------------

def status_from_paid(total: float, paid: float) -> str:
    """
    Threshold helper for status badges:
      - 'paid'    if paid >= total (and something was billed or paid)
      - 'partial' if 0 < paid < total
      - 'unpaid'  if paid == 0
    """
    if paid > 0 and paid >= total:
        return "paid"
    if paid > 0:
        return "partial"
    if total <= 0:
        return "paid"
    return "unpaid"


def floor_trays(kg: float, per_tray_weight: float) -> int:
    """Whole trays that fit in `kg`; 0 when the per-tray weight is not positive."""
    if per_tray_weight <= 0:
        return 0
    # tolerate float noise such as 489.99999999999994 / 35
    return max(0, int(math.floor(kg / per_tray_weight + 1e-9)))
