# utils/helpers.py
from datetime import date
import logging
from typing import Union, Optional

NumberLike = Union[float, int, str]

_log = logging.getLogger(__name__)


def today_str() -> str:
    """Return today's date as ISO string (YYYY-MM-DD)."""
    return date.today().isoformat()


def financial_year(on: Optional[date] = None) -> str:
    """
    Short April-March financial year label for a date.

    2025-04-01 .. 2026-03-31 -> '25-26'
    """
    d = on or date.today()
    start = d.year if d.month >= 4 else d.year - 1
    return f"{start % 100:02d}-{(start + 1) % 100:02d}"


def parse_iso_date(value: Union[str, date, None]) -> Optional[date]:
    """Accept a date or 'YYYY-MM-DD'; return None when it cannot be parsed."""
    if value is None:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        _log.debug("parse_iso_date: failed to parse %r", value)
        return None


def fmt_money(
    v: NumberLike,
    places: int = 2,
    *,
    strict: bool = False,
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number as money with thousands separators and a fixed number of decimals.

    Behavior on parse failure:
      - By default (strict=False, sentinel=None), returns str(v).
      - If `sentinel` is provided (e.g., "N/A"), returns that sentinel instead.
      - If `strict=True`, raises ValueError on parse failures.
    """
    try:
        x = float(v)
    except (TypeError, ValueError) as e:
        _log.debug("fmt_money: failed to parse %r as float: %s", v, e)
        if strict:
            raise ValueError(f"Could not parse {v!r} as a number.") from e
        return str(sentinel) if sentinel is not None else str(v)
    return f"{x:,.{places}f}"


def fmt_kg(v: NumberLike) -> str:
    """Weights: up to 3 decimals, trailing zeros dropped."""
    try:
        return f"{float(v):,.3f}".rstrip("0").rstrip(".")
    except (TypeError, ValueError):
        return str(v)
