"""
Loadings service: the write side for bills and their lines.

Every public write runs in one IMMEDIATE transaction. For client dispatches
the stock snapshot is read inside that transaction and each line is clamped
again before it is written, so two forms racing for the same stock cannot
both get it. Validation happens before the transaction opens.
"""
from __future__ import annotations

import logging
import sqlite3
from dataclasses import asdict, dataclass, field
from typing import Iterable, List, Optional, Tuple

from ...config import DEFAULT_POLICY, LedgerPolicy
from ...constants import CLIENT_DISPATCH
from ...database.repositories.audit_repo import AuditRepo
from ...database.repositories.loadings_repo import LoadingsRepo
from ...database.repositories.varieties_repo import VarietiesRepo
from ...database.tx import immediate_tx
from ...utils.helpers import today_str
from ..ledger.calculations import compute_line, record_totals
from ..ledger.errors import RecordNotFound, ValidationError
from ..ledger.line_edit_session import LineEditSession
from ..ledger.stock_ledger import StockLedger
from ..ledger.types import ClampResult, LineItem, LoadingRecord, ProposedLine
from ..ledger.validation import (
    normalize_party_name,
    normalize_variety_code,
    optional_text,
    require_category,
    require_date,
    require_non_negative,
    require_trays,
)

_log = logging.getLogger(__name__)

# (variety_code, trays, loose_kg, price_per_kg)
_Row = Tuple[str, int, float, float]


@dataclass
class CreatedLoading:
    loading_id: int
    bill_no: str
    record: LoadingRecord
    clamps: List[ClampResult] = field(default_factory=list)

    @property
    def notices(self) -> List[str]:
        return [c.notice for c in self.clamps if c.was_clamped]


@dataclass
class ItemChange:
    item: Optional[LineItem]
    clamp: Optional[ClampResult] = None
    record_deleted: bool = False


def _header_values(rec: LoadingRecord) -> dict:
    d = asdict(rec)
    d.pop("items", None)
    return d


class LoadingsService:
    def __init__(self, conn: sqlite3.Connection, policy: LedgerPolicy = DEFAULT_POLICY):
        self.conn = conn
        self.policy = policy
        self.loadings = LoadingsRepo(conn)
        self.varieties = VarietiesRepo(conn)
        self.audit = AuditRepo(conn)

    # ---------------- reads ----------------

    def get_loading(self, loading_id: int) -> LoadingRecord:
        rec = self.loadings.get(loading_id)
        if rec is None:
            raise RecordNotFound(f"Loading {loading_id} not found.")
        return rec

    def list_loadings(self, category: str | None = None) -> List[LoadingRecord]:
        return self.loadings.list_loadings(category)

    def next_bill_no(self, category: str, on_date: str | None = None) -> str:
        return self.loadings.next_bill_no(require_category(category), on_date)

    def stock_ledger(self) -> StockLedger:
        return StockLedger(self.loadings.variety_movements(), self.policy)

    # ---------------- validation ----------------

    def _validate_row(self, variety_code, trays, loose, price) -> _Row:
        code = normalize_variety_code(variety_code)
        if self.varieties.get(code) is None:
            raise ValidationError(f"Unknown variety '{code}'.", field="variety_code")
        t = require_trays(trays)
        lo = require_non_negative(loose, "Loose Kgs")
        p = require_non_negative(price, "Price")
        if t == 0 and lo == 0:
            raise ValidationError("Enter trays or loose kilograms for each line.", field="no_trays")
        return code, t, lo, p

    def _validate_lines(self, lines: Iterable[ProposedLine]) -> List[_Row]:
        rows = [
            self._validate_row(ln.variety_code, ln.no_trays, ln.loose_kg, ln.price_per_kg)
            for ln in lines
        ]
        if not rows:
            raise ValidationError("Add at least one line.", field="items")
        return rows

    def _line(self, category: str, row: _Row, *, own_vehicle: bool,
              per_tray_weight: float | None = None) -> LineItem:
        code, trays, loose, price = row
        t = compute_line(
            category, trays, loose, price, self.policy,
            own_vehicle=own_vehicle, per_tray_weight=per_tray_weight,
        )
        return LineItem(
            item_id=None, loading_id=None, variety_code=code, no_trays=trays,
            loose_kg=loose, tray_kg=t.tray_kg, total_kg=t.total_kg,
            price_per_kg=price, total_price=t.total_price,
        )

    def _recompute_totals(self, loading_id: int) -> LoadingRecord:
        rec = self.get_loading(loading_id)
        totals = record_totals(
            rec.items, category=rec.category, policy=self.policy, own_vehicle=rec.own_vehicle
        )
        self.loadings.update_totals(loading_id, totals)
        for k, v in totals.items():
            setattr(rec, k, v)
        return rec

    # ---------------- create ----------------

    def create_loading(
        self,
        category: str,
        party_name: str,
        lines: Iterable[ProposedLine],
        *,
        date: str | None = None,
        vehicle_ref: str | None = None,
        own_vehicle: bool = False,
        address: str | None = None,
        bill_no: str | None = None,
    ) -> CreatedLoading:
        """
        Write a loading with all its lines, or nothing.

        Dispatch lines are clamped against the stock read inside the
        transaction; rows clamped to nothing are dropped. If no row keeps any
        weight the loading is refused.
        """
        category = require_category(category)
        party = normalize_party_name(party_name)
        day = require_date(date or today_str())
        rows = self._validate_lines(lines)
        own_vehicle = bool(own_vehicle)

        with immediate_tx(self.conn, "create loading"):
            clamps: List[ClampResult] = []
            if category == CLIENT_DISPATCH:
                clamps = self.stock_ledger().clamp_form_lines([(c, t, lo) for c, t, lo, _ in rows])
                rows = [(c, r.trays, r.loose, p) for (c, _, _, p), r in zip(rows, clamps)]
                rows = [r for r in rows if r[1] > 0 or r[2] > 0]
                if not rows:
                    raise ValidationError("No stock available for the selected varieties.", field="items")

            items = [self._line(category, r, own_vehicle=own_vehicle) for r in rows]
            rec = LoadingRecord(
                loading_id=None,
                category=category,
                bill_no=optional_text(bill_no) or self.loadings.next_bill_no(category, day),
                party_name=party,
                date=day,
                vehicle_ref=optional_text(vehicle_ref),
                own_vehicle=own_vehicle,
                address=optional_text(address),
                items=items,
                **record_totals(items, category=category, policy=self.policy, own_vehicle=own_vehicle),
            )
            loading_id = self.loadings.create(rec)
            self.audit.log("CREATE", "loadings", loading_id, None, _header_values(rec))
            saved = self.get_loading(loading_id)
            for it in saved.items:
                self.audit.log("CREATE", "loading_items", it.item_id, None, asdict(it))

        for c in clamps:
            if c.was_clamped:
                _log.info("loading %s (%s): %s", saved.bill_no, category, c.notice)
        _log.info("created %s %s for %s: %d line(s)", category, saved.bill_no, party, len(saved.items))
        return CreatedLoading(loading_id=loading_id, bill_no=saved.bill_no, record=saved, clamps=clamps)

    # ---------------- line edits ----------------

    def start_edit(self, item_id: int) -> LineEditSession:
        """Open an edit session on a saved line (per-tray weight pinned)."""
        item = self.loadings.get_item(item_id)
        if item is None:
            raise RecordNotFound(f"Line {item_id} not found.")
        rec = self.get_loading(item.loading_id)
        stock = self.stock_ledger() if rec.category == CLIENT_DISPATCH else None
        session = LineEditSession(
            item, rec.category, policy=self.policy, own_vehicle=rec.own_vehicle, stock=stock,
        )
        session.begin()
        return session

    def save_edit(self, session: LineEditSession) -> ItemChange:
        shadow = session.preview()
        clamp = None
        with immediate_tx(self.conn, "save line"):
            stored = self.loadings.get_item(shadow.item_id)
            if stored is None:
                raise RecordNotFound(f"Line {shadow.item_id} not found.")
            if session.category == CLIENT_DISPATCH:
                clamp = self.stock_ledger().clamp_proposed_line(
                    shadow.variety_code, shadow.no_trays, shadow.loose_kg,
                    released_kg=stored.total_kg, per_tray_weight=session.per_tray_weight,
                )
                if clamp.was_clamped:
                    fresh = self._line(
                        session.category,
                        (shadow.variety_code, clamp.trays, clamp.loose, shadow.price_per_kg),
                        own_vehicle=session.own_vehicle,
                        per_tray_weight=session.per_tray_weight,
                    )
                    shadow = fresh.copy(item_id=shadow.item_id, loading_id=shadow.loading_id)
            self.loadings.update_item(shadow)
            self.audit.log("UPDATE", "loading_items", shadow.item_id, asdict(stored), asdict(shadow))
            self._recompute_totals(shadow.loading_id)

        _log.info("line %s saved: %s trays + %s kg", shadow.item_id, shadow.no_trays, shadow.loose_kg)
        return ItemChange(item=session.mark_saved(shadow), clamp=clamp)

    def add_item_to_bill(self, loading_id: int, variety_code, trays, loose, price=0) -> ItemChange:
        """Append a variety line to an existing bill and roll the totals up again."""
        row = self._validate_row(variety_code, trays, loose, price)
        rec = self.get_loading(loading_id)
        clamp = None
        with immediate_tx(self.conn, "add line"):
            if rec.category == CLIENT_DISPATCH:
                code, t, lo, p = row
                clamp = self.stock_ledger().clamp_proposed_line(code, t, lo)
                if clamp.trays == 0 and clamp.loose <= 0:
                    raise ValidationError(f"No stock available for {code}.", field="variety_code")
                row = (code, clamp.trays, clamp.loose, p)
            item = self._line(rec.category, row, own_vehicle=rec.own_vehicle)
            item.item_id = self.loadings.add_item(loading_id, item)
            item.loading_id = loading_id
            self.audit.log("CREATE", "loading_items", item.item_id, None, asdict(item))
            self._recompute_totals(loading_id)
        if clamp is not None and clamp.was_clamped:
            _log.info("bill %s: %s", rec.bill_no, clamp.notice)
        return ItemChange(item=item, clamp=clamp)

    def delete_item(self, item_id: int) -> ItemChange:
        """Delete a line; the last line takes its loading with it."""
        with immediate_tx(self.conn, "delete line"):
            stored = self.loadings.get_item(item_id)
            if stored is None:
                raise RecordNotFound(f"Line {item_id} not found.")
            self.loadings.delete_item(item_id)
            self.audit.log("DELETE", "loading_items", item_id, asdict(stored), None)
            deleted = self.loadings.item_count(stored.loading_id) == 0
            if deleted:
                rec = self.get_loading(stored.loading_id)
                self.loadings.delete(stored.loading_id)
                self.audit.log("DELETE", "loadings", stored.loading_id, _header_values(rec), None)
            else:
                self._recompute_totals(stored.loading_id)
        if deleted:
            _log.info("loading %s deleted with its last line", stored.loading_id)
        return ItemChange(item=None, record_deleted=deleted)

    def delete_loading(self, loading_id: int) -> None:
        with immediate_tx(self.conn, "delete loading"):
            rec = self.get_loading(loading_id)
            self.loadings.delete(loading_id)
            self.audit.log("DELETE", "loadings", loading_id, _header_values(rec), None)
