"""Error hierarchy for cryptopnl."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    INSUFFICIENT_POSITION = "INSUFFICIENT_POSITION"


class PnlError(Exception):
    """Base typed exception converted to API error responses."""

    def __init__(self, code: ErrorCode, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_error_payload(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class InsufficientPosition(PnlError):
    """A sell asked for more than the open quantity of a symbol."""

    def __init__(self, symbol: str, requested: float = 0.0, available: float = 0.0) -> None:
        super().__init__(
            ErrorCode.INSUFFICIENT_POSITION,
            f"Insufficient quantity to sell for symbol {symbol}",
            details={"symbol": symbol, "requested": requested, "available": available},
        )
        self.symbol = symbol
