from __future__ import annotations

import logging
import dataclasses
from typing import List, Optional, Protocol

from .model import PnlSummary, PortfolioPosition, SymbolPositionState, Trade
from .store import StateStore
from ..exceptions import InsufficientPosition
from ..logs.trade_log import log_trade_event
from ..metrics.accounting import (
    get_open_quantity_gauge,
    get_realized_pnl_gauge,
    get_trades_applied_total,
    get_trades_rejected_total,
)

logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 1e-9


class PriceSource(Protocol):
    def get_latest_price(self, symbol: str) -> Optional[float]:
        ...


class AccountingEngine:
    """Average-cost accounting over a StateStore.

    Buys accumulate quantity and cost; sells realize PnL against the current
    average entry price and remove cost proportionally, so a partial sell
    leaves the average of the remainder unchanged.
    """

    def __init__(self, store: StateStore, prices: PriceSource, epsilon: float = DEFAULT_EPSILON):
        self.store = store
        self.prices = prices
        self.epsilon = float(epsilon)
        # Metrics
        self.trades_applied = get_trades_applied_total()
        self.trades_rejected = get_trades_rejected_total()
        self.realized_gauge = get_realized_pnl_gauge()
        self.open_qty_gauge = get_open_quantity_gauge()

    def apply_trade(self, trade: Trade) -> Trade:
        """Apply a validated trade and append it to the ledger.

        Returns the trade as recorded: a sell that overshoots the open quantity
        by no more than epsilon is recorded with the quantity actually sold.
        Raises InsufficientPosition when a sell exceeds the open quantity; the
        symbol's state is left untouched in that case.
        """
        realized: Optional[float] = None
        with self.store.lock:
            state = self.store.get_or_create_state(trade.symbol)
            if trade.side == "buy":
                state.open_quantity += trade.quantity
                state.open_cost += trade.price * trade.quantity
            else:
                if trade.quantity - state.open_quantity > self.epsilon:
                    self.trades_rejected.labels("insufficient_position", trade.symbol).inc()
                    log_trade_event("trade_rejected", trade, reason="insufficient_position")
                    raise InsufficientPosition(trade.symbol, trade.quantity, state.open_quantity)
                if trade.quantity > state.open_quantity:
                    trade = dataclasses.replace(trade, quantity=state.open_quantity)
                realized = self._realize(state, trade)
            self.store.record_trade(trade)
            open_qty = state.open_quantity
            realized_total = state.realized_pnl

        self.trades_applied.labels(trade.side, trade.symbol).inc()
        self.open_qty_gauge.labels(trade.symbol).set(open_qty)
        self.realized_gauge.labels(trade.symbol).set(realized_total)
        log_trade_event("trade_applied", trade, realized_increment=realized)
        return trade

    def _realize(self, state: SymbolPositionState, trade: Trade) -> float:
        qty = trade.quantity
        avg_entry = state.open_cost / state.open_quantity if state.open_quantity > 0 else 0.0
        increment = (trade.price - avg_entry) * qty
        state.realized_pnl += increment
        state.open_quantity -= qty
        state.open_cost -= avg_entry * qty
        if abs(state.open_quantity) <= self.epsilon:
            state.open_quantity = 0.0
            state.open_cost = 0.0
        elif abs(state.open_cost) <= self.epsilon:
            state.open_cost = 0.0
        return increment

    def get_portfolio(self) -> List[PortfolioPosition]:
        positions: List[PortfolioPosition] = []
        for symbol, state in self.store.all_states():
            quantity = state.open_quantity
            if quantity == 0:
                continue
            if quantity < 0:
                logger.warning(f"Negative open quantity for {symbol}: {quantity}")

            avg_entry = state.avg_entry_price
            market_price = self.prices.get_latest_price(symbol)

            market_value: Optional[float] = None
            unrealized: Optional[float] = None
            if market_price is not None and avg_entry is not None:
                market_value = market_price * quantity
                unrealized = (market_price - avg_entry) * quantity

            positions.append(
                PortfolioPosition(
                    symbol=symbol,
                    quantity=quantity,
                    avg_entry_price=avg_entry,
                    market_price=market_price,
                    market_value=market_value,
                    unrealized_pnl=unrealized,
                )
            )
        return positions

    def get_pnl_summary(self) -> PnlSummary:
        """Realized and unrealized PnL per symbol and in total.

        Flat symbols stay in the summary with their realized PnL. Unrealized PnL
        is 0.0 (not None) when there is no open quantity or no market price.
        """
        summary = PnlSummary()
        for symbol, state in self.store.all_states():
            summary.realized.add(symbol, state.realized_pnl)

            unrealized = 0.0
            latest = self.prices.get_latest_price(symbol)
            if state.open_quantity > 0 and latest is not None:
                avg_entry = state.open_cost / state.open_quantity
                unrealized = (latest - avg_entry) * state.open_quantity
            summary.unrealized.add(symbol, unrealized)
        return summary

    def trades(self) -> List[Trade]:
        return self.store.trades()

    def reset(self) -> None:
        self.store.reset()
