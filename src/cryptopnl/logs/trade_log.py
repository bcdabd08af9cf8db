from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from ..ledger.model import Trade


def log_trade_event(
    event_type: str,
    trade: Trade,
    realized_increment: Optional[float] = None,
    reason: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    """Emit a structured JSON log line for a trade being applied or rejected.

    Keys: event, trade_id, symbol, side, price, quantity, ts, realized_increment,
    reason, severity, component, schema_version
    """
    try:
        logger = logging.getLogger("cryptopnl.trades")
        payload: Dict[str, Any] = {
            "event": str(event_type),
            "trade_id": trade.id,
            "symbol": trade.symbol,
            "side": trade.side,
            "price": float(trade.price),
            "quantity": float(trade.quantity),
            "ts": trade.timestamp.isoformat(),
            "realized_increment": float(realized_increment) if realized_increment is not None else None,
            "reason": str(reason) if reason is not None else None,
            "severity": "INFO" if reason is None else "WARNING",
            "component": "accounting",
            "schema_version": "v1",
        }
        if extra:
            payload["extra"] = extra
        line = json.dumps(payload, separators=(",", ":"))
        if reason is None:
            logger.info(line)
        else:
            logger.warning(line)
    except Exception:
        # Logging must never throw
        pass
