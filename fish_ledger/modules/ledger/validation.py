"""
Input validation for loadings, line edits and payments.

Everything here raises ValidationError before any ledger mutation is
attempted. Parsing rules come from utils.validators so forms and services
agree on what a number is.
"""
from __future__ import annotations

from typing import Any, Optional

from ...constants import LOADING_CATEGORIES, PARTY_KIND_BY_CATEGORY
from ...utils.helpers import parse_iso_date
from ...utils.validators import non_empty, try_parse_float, is_whole_number
from .errors import ValidationError


def require_text(value: Any, field: str) -> str:
    if not non_empty(value):
        raise ValidationError(f"{field} is required.", field=field)
    return str(value).strip()


def optional_text(value: Any) -> Optional[str]:
    return str(value).strip() if non_empty(value) else None


def require_non_negative(value: Any, field: str) -> float:
    ok, val = try_parse_float(value)
    if not ok:
        raise ValidationError(f"{field} must be a number.", field=field)
    if val < 0:
        raise ValidationError(f"{field} cannot be negative.", field=field)
    return float(val)


def require_trays(value: Any, field: str = "Trays") -> int:
    val = require_non_negative(value, field)
    if not is_whole_number(val):
        raise ValidationError(f"{field} must be a whole number.", field=field)
    return int(val)


def require_positive_amount(value: Any, field: str = "Amount") -> float:
    ok, val = try_parse_float(value)
    if not ok:
        raise ValidationError(f"{field} must be a number.", field=field)
    if val <= 0:
        raise ValidationError(f"{field} must be greater than zero.", field=field)
    return float(val)


def require_positive_int(value: Any, field: str) -> int:
    ok, val = try_parse_float(value)
    if not ok or val <= 0 or not float(val).is_integer():
        raise ValidationError(f"{field} must be a whole number greater than zero.", field=field)
    return int(val)


def require_date(value: Any, field: str = "Date") -> str:
    d = parse_iso_date(value)
    if d is None:
        raise ValidationError(f"{field} must be a valid date (YYYY-MM-DD).", field=field)
    return d.isoformat()


def require_category(category: Any) -> str:
    c = str(category or "").strip().upper()
    if c not in LOADING_CATEGORIES:
        raise ValidationError(
            "category must be one of: " + ", ".join(LOADING_CATEGORIES), field="category"
        )
    return c


def require_party_kind(kind: Any) -> str:
    k = str(kind or "").strip().lower()
    if k not in PARTY_KIND_BY_CATEGORY.values():
        raise ValidationError("party kind must be one of: client, farmer, agent", field="party_kind")
    return k


def normalize_variety_code(code: Any) -> str:
    """Variety codes are unique and stored uppercase."""
    return require_text(code, "Variety").upper()


def normalize_party_name(name: Any) -> str:
    """Trimmed, case preserved; matching policy lives in the due ledger."""
    return require_text(name, "Party name")
