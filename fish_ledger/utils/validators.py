# utils/validators.py
import math


def non_empty(text: str) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


# ---- Numbers typed into forms ----

def try_parse_float(x):
    """
    Best-effort parse to float.

    Returns:
        (ok: bool, value: float|None)

    ok == False means parsing failed (or the value is NaN/inf) and value is None.
    """
    if isinstance(x, bool):
        return False, None
    try:
        val = float(str(x).strip()) if isinstance(x, str) else float(x)
    except (TypeError, ValueError):
        return False, None
    if not math.isfinite(val):
        return False, None
    return True, val


def is_whole_number(x) -> bool:
    """True iff x parses to a finite float with no fractional part."""
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and float(val).is_integer())
