from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .constants import DATA_DIR, DB_FILE_NAME

BASE_DIR = Path(__file__).resolve().parent
DATA_PATH = BASE_DIR / DATA_DIR
DB_PATH = DATA_PATH / DB_FILE_NAME


@dataclass(frozen=True)
class LedgerPolicy:
    """
    Business constants the engine is parameterised with.

    per_tray_kg                 kilograms in one full tray (35 in the reference business)
    dispatch_deduction_percent  weight-side shrinkage applied to dispatch grand totals
    intake_net_factor           price-side yield factor applied to intake line prices
    case_insensitive_names      match counterparties ignoring case (off: exact, trimmed)
    """
    per_tray_kg: float = 35.0
    dispatch_deduction_percent: float = 5.0
    intake_net_factor: float = 0.95
    case_insensitive_names: bool = False


DEFAULT_POLICY = LedgerPolicy()
