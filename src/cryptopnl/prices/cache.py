"""
Latest-price cache backed by a ccxt exchange client.

What it does:
- Holds the most recently fetched USD-ish price per base symbol (e.g. "BTC").
- `fetch_latest_prices` pulls last prices for `BASE/QUOTE` pairs via ccxt
  `fetch_tickers`, and falls back to static prices if the exchange fails.
- `get_latest_price` is a plain dict lookup; it never triggers a fetch.

Where it is used:
- Injected into `AccountingEngine` as its price source.
- Populated once on API startup (see `cryptopnl.api.app`).
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Iterable, Optional

import ccxt

from ..metrics.accounting import get_price_fetch_total

logger = logging.getLogger(__name__)


class PriceCache:
    STABLE_COINS = {"USD", "USDT", "USDC", "BUSD", "TUSD"}

    def __init__(
        self,
        symbols: Iterable[str] = (),
        quote_currency: str = "USDT",
        fallback_prices: Optional[Dict[str, float]] = None,
        exchange_id: str = "binance",
        exchange: Any = None,
    ):
        self.symbols = [s.upper() for s in symbols]
        self.quote_currency = quote_currency.upper()
        self.fallback_prices = {k.upper(): float(v) for k, v in (fallback_prices or {}).items()}
        self.exchange_id = exchange_id
        self._exchange = exchange
        self._prices: Dict[str, float] = {}
        self._lock = threading.Lock()
        self.fetch_total = get_price_fetch_total()

    @classmethod
    def from_settings(cls, settings) -> "PriceCache":
        return cls(
            symbols=settings.symbols,
            quote_currency=settings.quote_currency,
            fallback_prices=settings.fallback_prices,
            exchange_id=settings.exchange,
        )

    def _init_exchange(self):
        """Create a public (no credentials) ccxt client for ticker lookups."""
        exchange_class = getattr(ccxt, self.exchange_id)
        return exchange_class({"enableRateLimit": True})

    @property
    def exchange(self):
        if self._exchange is None:
            self._exchange = self._init_exchange()
        return self._exchange

    def get_latest_price(self, symbol: str) -> Optional[float]:
        return self._prices.get(symbol.upper())

    def set_price(self, symbol: str, price: float) -> None:
        with self._lock:
            self._prices[symbol.upper()] = float(price)

    def snapshot(self) -> Dict[str, float]:
        with self._lock:
            return dict(self._prices)

    def clear(self) -> None:
        with self._lock:
            self._prices.clear()

    def fetch_latest_prices(self) -> Dict[str, float]:
        """Refresh the cache from the exchange, or fallback prices on error."""
        pairs = {
            f"{sym}/{self.quote_currency}": sym
            for sym in self.symbols
            if sym != self.quote_currency
        }
        try:
            tickers = self.exchange.fetch_tickers(list(pairs.keys()))
        except Exception as e:
            logger.warning(f"Error fetching prices from {self.exchange_id}, using fallback: {e}")
            self.set_fallback_prices()
            return self.snapshot()

        fetched: Dict[str, float] = {}
        for pair, sym in pairs.items():
            ticker = tickers.get(pair) or {}
            last = ticker.get("last") or ticker.get("close")
            if last:
                fetched[sym] = float(last)
        # The quote asset is priced in itself
        if self.quote_currency in self.symbols and self.quote_currency in self.STABLE_COINS:
            fetched[self.quote_currency] = 1.0
        with self._lock:
            self._prices.update(fetched)
        self.fetch_total.labels("exchange").inc()
        logger.info(f"Fetched latest prices: {fetched}")
        return self.snapshot()

    def set_fallback_prices(self) -> None:
        with self._lock:
            self._prices.update(self.fallback_prices)
        self.fetch_total.labels("fallback").inc()
        logger.info(f"Using fallback prices: {self.fallback_prices}")
