"""
Main entrypoint for cryptopnl.

What it does:
- Loads runtime settings from `config/config.yaml` and `CRYPTOPNL_*` env vars.
- Starts the Prometheus metrics server (bind failures are logged, not fatal).
- Builds the state store, price cache and accounting engine, then serves the
  HTTP API with uvicorn. Prices are fetched once on startup.

Where it is used:
- Invoked by `python -m cryptopnl.main` or the `cryptopnl` console script.
"""
import logging
import os

import uvicorn

from .api import create_app
from .config.loader import load_settings
from .ledger import AccountingEngine, StateStore
from .metrics.core import start_server_safe
from .prices import PriceCache


def main() -> None:
    settings = load_settings(os.getenv("CRYPTOPNL_CONFIG", "config/config.yaml"))
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )
    logging.info(f"Exchange: {settings.exchange}, symbols: {','.join(settings.symbols)}")

    start_server_safe(settings.prometheus_port)

    prices = PriceCache.from_settings(settings)
    engine = AccountingEngine(StateStore(), prices, epsilon=settings.epsilon)
    app = create_app(engine, prices, settings)

    logging.info(f"Server listening on port {settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
