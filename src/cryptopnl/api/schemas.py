"""Request models for the HTTP boundary.

The accounting engine only ever receives a well-formed `Trade`; everything
about parsing raw request bodies lives here.
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, model_validator

from ..ledger.model import Side, Trade, new_id, utc_now

SYMBOL_RE = re.compile(r"^[A-Z0-9]+$")


def _to_finite(v: Any) -> float:
    if not isinstance(v, (int, float)) or isinstance(v, bool):
        raise ValueError("price and quantity must be valid numbers")
    try:
        out = float(v)
    except OverflowError:
        raise ValueError("price and quantity must be valid numbers") from None
    if not math.isfinite(out):
        raise ValueError("price and quantity must be valid numbers")
    return out


def parse_timestamp(raw: Any) -> datetime:
    if not isinstance(raw, str):
        raise ValueError("invalid timestamp")
    try:
        ts = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValueError("invalid timestamp") from None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


class TradeIn(BaseModel):
    """POST /trades body: {symbol, side, price, quantity, timestamp?}."""
    symbol: str
    side: Side
    price: float
    quantity: float
    timestamp: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def check_body(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            raise ValueError("request body must be a JSON object")
        raw_symbol = data.get("symbol")
        symbol = raw_symbol.strip().upper() if isinstance(raw_symbol, str) else None
        side = data.get("side")
        price = data.get("price")
        quantity = data.get("quantity")

        if not symbol or side not in ("buy", "sell") or price is None or quantity is None:
            raise ValueError("symbol, side, price and quantity are required")
        if not SYMBOL_RE.match(symbol):
            raise ValueError("symbol must contain only alphanumeric characters")
        price = _to_finite(price)
        quantity = _to_finite(quantity)
        if price <= 0 or quantity <= 0:
            raise ValueError("price and quantity must be positive")

        raw_ts = data.get("timestamp")
        timestamp = parse_timestamp(raw_ts) if raw_ts else None
        return {
            "symbol": symbol,
            "side": side,
            "price": price,
            "quantity": quantity,
            "timestamp": timestamp,
        }

    def to_trade(self) -> Trade:
        return Trade(
            id=new_id(),
            symbol=self.symbol,
            side=self.side,
            price=self.price,
            quantity=self.quantity,
            timestamp=self.timestamp or utc_now(),
        )
