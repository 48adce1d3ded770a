"""
Editing a saved loading line.

A line is recalculated with the per-tray weight it was billed at, not the
current policy constant: `per_tray = stored tray_kg / stored trays` is pinned
when editing begins and every recalculation in the session uses it. Changing
only the loose kilograms therefore leaves tray_kg untouched.

States:
    CREATED -> EDITING -> SAVED
    EDITING -> (cancel) -> previous state
    any     -> DELETED
"""
from __future__ import annotations

import enum
import logging
from typing import Optional

from ...config import DEFAULT_POLICY, LedgerPolicy
from ...constants import CLIENT_DISPATCH
from .calculations import compute_line, implied_per_tray_weight
from .errors import LedgerError
from .stock_ledger import StockLedger
from .types import ClampResult, LineItem
from .validation import require_non_negative, require_trays

_log = logging.getLogger(__name__)


class LineState(enum.Enum):
    CREATED = "created"
    EDITING = "editing"
    SAVED = "saved"
    DELETED = "deleted"


class LineEditSession:
    def __init__(
        self,
        item: LineItem,
        category: str,
        *,
        policy: LedgerPolicy = DEFAULT_POLICY,
        own_vehicle: bool = False,
        stock: Optional[StockLedger] = None,
    ):
        self.item = item
        self.category = category
        self.policy = policy
        self.own_vehicle = own_vehicle
        self.stock = stock
        self.state = LineState.CREATED
        self.per_tray_weight: float = 0.0
        self._shadow: Optional[LineItem] = None
        self._before_edit = LineState.CREATED
        self._last_clamp: Optional[ClampResult] = None

    # ---- lifecycle ----

    def begin(self) -> LineItem:
        if self.state is LineState.DELETED:
            raise LedgerError("line was deleted")
        if self.state is LineState.EDITING:
            return self._shadow  # type: ignore[return-value]
        self.per_tray_weight = implied_per_tray_weight(self.item.tray_kg, self.item.no_trays)
        self._before_edit = self.state
        self._shadow = self.item.copy()
        self._last_clamp = None
        self.state = LineState.EDITING
        return self._shadow

    def cancel(self) -> LineItem:
        self._require_editing()
        self._shadow = None
        self._last_clamp = None
        self.state = self._before_edit
        return self.item

    def mark_saved(self, saved: Optional[LineItem] = None) -> LineItem:
        """Adopt the shadow copy (or the row as persisted) as the line."""
        self._require_editing()
        self.item = saved if saved is not None else self._shadow  # type: ignore[assignment]
        self._shadow = None
        self.state = LineState.SAVED
        return self.item

    def mark_deleted(self) -> None:
        self._shadow = None
        self.state = LineState.DELETED

    # ---- edits ----

    def set_trays(self, trays) -> LineItem:
        self._require_editing()
        return self._recalc(no_trays=require_trays(trays))

    def set_loose(self, loose) -> LineItem:
        self._require_editing()
        return self._recalc(loose_kg=require_non_negative(loose, "Loose Kgs"))

    def set_price(self, price) -> LineItem:
        self._require_editing()
        return self._recalc(price_per_kg=require_non_negative(price, "Price"))

    def preview(self) -> LineItem:
        self._require_editing()
        return self._shadow  # type: ignore[return-value]

    @property
    def shadow_item(self) -> Optional[LineItem]:
        return self._shadow

    @property
    def last_clamp(self) -> Optional[ClampResult]:
        return self._last_clamp

    @property
    def is_dirty(self) -> bool:
        return self._shadow is not None and self._shadow != self.item

    # ---- internals ----

    def _require_editing(self) -> None:
        if self.state is not LineState.EDITING or self._shadow is None:
            raise LedgerError("line is not being edited")

    def _recalc(self, **changes) -> LineItem:
        s = self._shadow.copy(**changes)  # type: ignore[union-attr]
        trays, loose = s.no_trays, s.loose_kg
        self._last_clamp = None
        if self.category == CLIENT_DISPATCH and self.stock is not None:
            res = self.stock.clamp_proposed_line(
                s.variety_code, trays, loose,
                released_kg=self.item.total_kg,
                per_tray_weight=self.per_tray_weight,
            )
            self._last_clamp = res
            trays, loose = res.trays, res.loose
        totals = compute_line(
            self.category, trays, loose, s.price_per_kg, self.policy,
            own_vehicle=self.own_vehicle, per_tray_weight=self.per_tray_weight,
        )
        self._shadow = s.copy(
            no_trays=trays,
            loose_kg=loose,
            tray_kg=totals.tray_kg,
            total_kg=totals.total_kg,
            total_price=totals.total_price,
        )
        _log.debug("line %s recalculated: %s", self.item.item_id, self._shadow)
        return self._shadow
