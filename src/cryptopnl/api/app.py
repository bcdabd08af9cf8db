from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .schemas import TradeIn
from ..config.loader import Settings
from ..exceptions import PnlError
from ..ledger import AccountingEngine, StateStore
from ..prices import PriceCache

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid request"
    first = errors[0]
    if first.get("type") == "missing":
        return "symbol, side, price and quantity are required"
    msg = str(first.get("msg", "invalid request"))
    prefix = "Value error, "
    return msg[len(prefix):] if msg.startswith(prefix) else msg


def create_app(
    engine: Optional[AccountingEngine] = None,
    prices: Optional[PriceCache] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Build the FastAPI app around an engine and its price cache.

    Missing collaborators are created from `settings` (or defaults).
    """
    settings = settings or Settings()
    if prices is None:
        prices = PriceCache.from_settings(settings)
    if engine is None:
        engine = AccountingEngine(StateStore(), prices, epsilon=settings.epsilon)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.fetch_prices_on_startup:
            logger.info("Fetching latest crypto prices...")
            await asyncio.to_thread(prices.fetch_latest_prices)
        yield
        if settings.export_dir:
            engine.store.write_parquet(settings.export_dir)
            logger.info(f"Wrote ledger export to {settings.export_dir}")

    app = FastAPI(title="cryptopnl", lifespan=lifespan)
    app.state.engine = engine
    app.state.prices = prices
    app.state.settings = settings

    @app.exception_handler(RequestValidationError)
    async def on_validation_error(_request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(PnlError)
    async def on_pnl_error(_request: Request, exc: PnlError):
        return JSONResponse(status_code=400, content={"error": exc.message, **exc.to_error_payload()})

    @app.get("/")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/trades", status_code=201)
    def add_trade(body: TradeIn) -> Dict[str, Any]:
        recorded = engine.apply_trade(body.to_trade())
        return recorded.to_dict()

    @app.get("/trades")
    def list_trades() -> List[Dict[str, Any]]:
        return [t.to_dict() for t in engine.trades()]

    @app.get("/portfolio")
    def portfolio() -> List[Dict[str, Any]]:
        return [p.to_dict() for p in engine.get_portfolio()]

    @app.get("/pnl")
    def pnl() -> Dict[str, Any]:
        return engine.get_pnl_summary().to_dict()

    return app
