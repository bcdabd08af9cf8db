"""Accounting and price-cache metrics.

Counters:
- trades_applied_total{side,symbol}
- trades_rejected_total{reason,symbol}
- price_fetch_total{source="exchange|fallback"}

Gauges:
- realized_pnl_usd{symbol}
- open_quantity{symbol}
"""

from __future__ import annotations

from typing import Optional
import os
from prometheus_client import Counter, Gauge, REGISTRY

_trades_applied: Optional[Counter] = None
_trades_rejected: Optional[Counter] = None
_price_fetch: Optional[Counter] = None
_realized_pnl: Optional[Gauge] = None
_open_quantity: Optional[Gauge] = None


class _NoOp:
    def labels(self, *args, **kwargs):
        return self
    def inc(self, *args, **kwargs):
        return None
    def set(self, *args, **kwargs):
        return None


def _existing(name: str):
    # Counters register without the _total suffix
    names = getattr(REGISTRY, "_names_to_collectors", {})
    return names.get(name) or names.get(name[: -len("_total")] if name.endswith("_total") else name)


def _safe_counter(name: str, doc: str, labelnames):
    if os.getenv("DISABLE_PROMETHEUS", "0") == "1":
        return _NoOp()
    try:
        return Counter(name, doc, labelnames)
    except ValueError:
        coll = _existing(name)
        return coll if coll is not None else _NoOp()


def _safe_gauge_labels(name: str, doc: str, labelnames):
    if os.getenv("DISABLE_PROMETHEUS", "0") == "1":
        return _NoOp()
    try:
        return Gauge(name, doc, labelnames)
    except ValueError:
        coll = _existing(name)
        return coll if isinstance(coll, Gauge) else _NoOp()


def get_trades_applied_total():
    global _trades_applied
    if _trades_applied is None:
        _trades_applied = _safe_counter("trades_applied_total", "Trades applied to the ledger", ["side", "symbol"])
    return _trades_applied


def get_trades_rejected_total():
    global _trades_rejected
    if _trades_rejected is None:
        _trades_rejected = _safe_counter("trades_rejected_total", "Trades rejected", ["reason", "symbol"])
    return _trades_rejected


def get_price_fetch_total():
    global _price_fetch
    if _price_fetch is None:
        _price_fetch = _safe_counter("price_fetch_total", "Price cache refreshes", ["source"])
    return _price_fetch


def get_realized_pnl_gauge():
    global _realized_pnl
    if _realized_pnl is None:
        _realized_pnl = _safe_gauge_labels("realized_pnl_usd", "Cumulative realized PnL", ["symbol"])
    return _realized_pnl


def get_open_quantity_gauge():
    global _open_quantity
    if _open_quantity is None:
        _open_quantity = _safe_gauge_labels("open_quantity", "Open position quantity", ["symbol"])
    return _open_quantity
