"""Ledger package.

Public API:
- StateStore: trade ledger and per-symbol position state, parquet export.
- AccountingEngine: average-cost trade application, portfolio and PnL views.
"""

from .engine import AccountingEngine  # re-export
from .store import StateStore  # re-export
