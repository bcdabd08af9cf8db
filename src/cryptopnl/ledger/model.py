from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional
import uuid

Side = Literal["buy", "sell"]


def new_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Trade:
    id: str
    symbol: str
    side: Side
    price: float
    quantity: float
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "symbol": self.symbol,
            "side": self.side,
            "price": self.price,
            "quantity": self.quantity,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class SymbolPositionState:
    """Running average-cost state for one symbol.

    open_cost is the cost basis of the unconsumed buy volume; the average entry
    price is derived from it and never stored.
    """

    open_quantity: float = 0.0
    open_cost: float = 0.0
    realized_pnl: float = 0.0

    @property
    def avg_entry_price(self) -> Optional[float]:
        if self.open_quantity > 0:
            return self.open_cost / self.open_quantity
        return None

    def copy(self) -> "SymbolPositionState":
        return SymbolPositionState(
            open_quantity=self.open_quantity,
            open_cost=self.open_cost,
            realized_pnl=self.realized_pnl,
        )


@dataclass
class PortfolioPosition:
    symbol: str
    quantity: float
    avg_entry_price: Optional[float]
    market_price: Optional[float]
    market_value: Optional[float]
    unrealized_pnl: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "quantity": self.quantity,
            "avgEntryPrice": self.avg_entry_price,
            "marketPrice": self.market_price,
            "marketValue": self.market_value,
            "unrealizedPnl": self.unrealized_pnl,
        }


@dataclass
class PnlBreakdown:
    by_symbol: Dict[str, float] = field(default_factory=dict)
    total: float = 0.0

    def add(self, symbol: str, value: float) -> None:
        self.by_symbol[symbol] = value
        self.total += value

    def to_dict(self) -> Dict[str, Any]:
        return {"bySymbol": dict(self.by_symbol), "total": self.total}


@dataclass
class PnlSummary:
    realized: PnlBreakdown = field(default_factory=PnlBreakdown)
    unrealized: PnlBreakdown = field(default_factory=PnlBreakdown)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "realized": self.realized.to_dict(),
            "unrealized": self.unrealized.to_dict(),
        }
