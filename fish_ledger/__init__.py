"""Fish Ledger: stock-constrained billing and reconciliation for a fish-trading business."""

__version__ = "0.1.0"
