"""
ledger/stock_ledger.py

Net stock per fish variety and the dispatch-line clamp.

Stock is never stored. It is derived from the full movement history:
    net_kg = sum(intake line total_kg) - sum(dispatch line total_kg)

A StockLedger is a snapshot built from those sums (see
LoadingsRepo.variety_movements) and is cheap to rebuild per request.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from ...config import DEFAULT_POLICY, LedgerPolicy
from ...constants import INTAKE_CATEGORIES
from .calculations import clamp_non_negative, floor_trays, round_weight
from .types import ClampResult, LoadingRecord, StockPosition

_log = logging.getLogger(__name__)

# float noise allowed when comparing weights that were rounded to the gram
_EPS = 1e-6


@dataclass(frozen=True)
class VarietyMovement:
    variety_code: str
    name: str
    intake_kg: float = 0.0
    dispatched_kg: float = 0.0


class StockLedger:
    def __init__(
        self,
        movements: Iterable[VarietyMovement],
        policy: LedgerPolicy = DEFAULT_POLICY,
    ):
        self.policy = policy
        self._movements: Dict[str, VarietyMovement] = {
            m.variety_code: m for m in movements
        }

    @classmethod
    def from_records(
        cls,
        records: Iterable[LoadingRecord],
        names: Optional[Dict[str, str]] = None,
        policy: LedgerPolicy = DEFAULT_POLICY,
    ) -> "StockLedger":
        """Build the snapshot from in-memory records (tests, previews)."""
        intake: Dict[str, float] = {}
        dispatched: Dict[str, float] = {}
        for rec in records:
            bucket = intake if rec.category in INTAKE_CATEGORIES else dispatched
            for it in rec.items:
                bucket[it.variety_code] = bucket.get(it.variety_code, 0.0) + float(it.total_kg)
        names = names or {}
        codes = set(intake) | set(dispatched) | set(names)
        return cls(
            (
                VarietyMovement(
                    variety_code=c,
                    name=names.get(c, c),
                    intake_kg=round_weight(intake.get(c, 0.0)),
                    dispatched_kg=round_weight(dispatched.get(c, 0.0)),
                )
                for c in codes
            ),
            policy,
        )

    # ---- positions ----

    def _raw_kg(self, variety_code: str) -> float:
        m = self._movements.get(variety_code)
        if m is None:
            return 0.0
        return float(m.intake_kg) - float(m.dispatched_kg)

    def net_stock(self, variety_code: str) -> StockPosition:
        m = self._movements.get(variety_code) or VarietyMovement(variety_code, variety_code)
        kg = round_weight(clamp_non_negative(self._raw_kg(variety_code)))
        return StockPosition(
            variety_code=m.variety_code,
            name=m.name,
            intake_kg=round_weight(m.intake_kg),
            dispatched_kg=round_weight(m.dispatched_kg),
            kg=kg,
            trays=floor_trays(kg, self.policy.per_tray_kg),
        )

    def positions(self) -> List[StockPosition]:
        return sorted(
            (self.net_stock(code) for code in self._movements),
            key=lambda p: (p.name, p.variety_code),
        )

    def available_varieties(self) -> List[StockPosition]:
        """Varieties with at least one full tray on hand, by name."""
        return [p for p in self.positions() if p.trays > 0]

    def max_dispatchable_kg(
        self,
        variety_code: str,
        other_lines_kg: Sequence[float] = (),
        *,
        released_kg: float = 0.0,
    ) -> float:
        """
        Kilograms a single line may still take.

        `released_kg` is the stored weight of the line being edited; it is
        already counted as dispatched, so it is credited back first.
        """
        room = self._raw_kg(variety_code) + float(released_kg or 0.0)
        room -= sum(float(k or 0.0) for k in other_lines_kg)
        return round_weight(clamp_non_negative(room))

    # ---- clamp ----

    def clamp_proposed_line(
        self,
        variety_code: str,
        proposed_trays: int,
        proposed_loose: float,
        other_lines_kg: Sequence[float] = (),
        *,
        released_kg: float = 0.0,
        per_tray_weight: Optional[float] = None,
    ) -> ClampResult:
        """
        Fit a proposed dispatch line into the remaining stock.

        A proposal that fits comes back unchanged. Otherwise trays drop to
        the whole trays that fit and the remainder is topped up with loose
        kilograms, so loose may end up above what was typed while the total
        weight never exceeds the original proposal. The result is the
        heaviest line <= max_kg that keeps as many full trays as possible.
        """
        w = self.policy.per_tray_kg if per_tray_weight is None else float(per_tray_weight)
        max_kg = self.max_dispatchable_kg(
            variety_code, other_lines_kg, released_kg=released_kg
        )
        trays = int(proposed_trays)
        loose = float(proposed_loose)
        want = trays * w + loose
        if want <= max_kg + _EPS:
            return ClampResult(trays=trays, loose=loose, was_clamped=False, max_kg=max_kg)

        if w > 0:
            trays = min(trays, floor_trays(max_kg, w))
        remainder = clamp_non_negative(max_kg - trays * w)
        loose = round_weight(min(want - trays * w, remainder))
        _log.info(
            "clamp %s: proposed %s trays + %s kg exceeds %s kg; capped to %s trays + %s kg",
            variety_code, proposed_trays, proposed_loose, max_kg, trays, loose,
        )
        return ClampResult(trays=trays, loose=loose, was_clamped=True, max_kg=max_kg)

    def clamp_form_lines(
        self,
        lines: Sequence[tuple],
        *,
        released_kg_by_variety: Optional[Dict[str, float]] = None,
    ) -> List[ClampResult]:
        """
        Clamp every (variety_code, trays, loose) row of a dispatch form.

        Rows are settled top to bottom: each row sees the already-clamped
        weight of the rows above it for the same variety.
        """
        released = dict(released_kg_by_variety or {})
        taken: Dict[str, List[float]] = {}
        out: List[ClampResult] = []
        w = self.policy.per_tray_kg
        for code, trays, loose in lines:
            res = self.clamp_proposed_line(
                code, trays, loose, taken.get(code, ()),
                released_kg=released.get(code, 0.0),
            )
            taken.setdefault(code, []).append(res.trays * w + res.loose)
            out.append(res)
        return out

