"""cryptopnl: average-cost position and PnL tracking for crypto trades.

Public API:
- StateStore: trade ledger and per-symbol position state.
- AccountingEngine: applies trades and derives portfolio / PnL views.
- PriceCache: latest market prices consumed by the engine.
"""

from .ledger import AccountingEngine, StateStore  # re-export
from .prices import PriceCache  # re-export

__all__ = ["AccountingEngine", "StateStore", "PriceCache"]
