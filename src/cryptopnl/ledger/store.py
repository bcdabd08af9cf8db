from __future__ import annotations

from typing import Dict, List, Tuple
import os
import threading
import pandas as pd
from .model import SymbolPositionState, Trade


class StateStore:
    """Chronological trade ledger plus per-symbol average-cost state.

    The store does no accounting. Callers that mutate state obtained from
    `get_or_create_state` must hold `lock` for the whole read-modify-write.
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._trades: List[Trade] = []
        self._states: Dict[str, SymbolPositionState] = {}

    def record_trade(self, trade: Trade) -> None:
        with self.lock:
            self._trades.append(trade)

    def get_or_create_state(self, symbol: str) -> SymbolPositionState:
        with self.lock:
            state = self._states.get(symbol)
            if state is None:
                state = SymbolPositionState()
                self._states[symbol] = state
            return state

    def all_states(self) -> List[Tuple[str, SymbolPositionState]]:
        """Point-in-time copies of every symbol's state, in first-seen order."""
        with self.lock:
            return [(sym, st.copy()) for sym, st in self._states.items()]

    def trades(self) -> List[Trade]:
        with self.lock:
            return list(self._trades)

    def reset(self) -> None:
        # Test isolation only
        with self.lock:
            self._trades.clear()
            self._states.clear()

    def write_parquet(self, base_dir: str = "data") -> None:
        os.makedirs(base_dir, exist_ok=True)
        trades = self.trades()
        states = self.all_states()
        trades_df = pd.DataFrame(
            [t.to_dict() for t in trades],
            columns=["id", "symbol", "side", "price", "quantity", "timestamp"],
        )
        positions_df = pd.DataFrame(
            [
                {
                    "symbol": sym,
                    "open_quantity": st.open_quantity,
                    "open_cost": st.open_cost,
                    "realized_pnl": st.realized_pnl,
                }
                for sym, st in states
            ],
            columns=["symbol", "open_quantity", "open_cost", "realized_pnl"],
        )
        trades_df.to_parquet(os.path.join(base_dir, "trades.parquet"))
        positions_df.to_parquet(os.path.join(base_dir, "positions.parquet"))
