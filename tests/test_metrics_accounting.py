from prometheus_client import REGISTRY

from src.cryptopnl.exceptions import InsufficientPosition
from src.cryptopnl.ledger import AccountingEngine, StateStore
from src.cryptopnl.ledger.model import Trade, new_id
from src.cryptopnl.prices import PriceCache


def _sample(metric: str, labels: dict) -> float:
    val = REGISTRY.get_sample_value(metric, labels)
    return 0.0 if val is None else float(val)


def test_applied_and_rejected_counters():
    eng = AccountingEngine(StateStore(), PriceCache())
    applied = {"side": "buy", "symbol": "MTRA"}
    rejected = {"reason": "insufficient_position", "symbol": "MTRA"}
    before_applied = _sample("trades_applied_total", applied)
    before_rejected = _sample("trades_rejected_total", rejected)

    eng.apply_trade(Trade(id=new_id(), symbol="MTRA", side="buy", price=10.0, quantity=1.0))
    try:
        eng.apply_trade(Trade(id=new_id(), symbol="MTRA", side="sell", price=10.0, quantity=5.0))
    except InsufficientPosition:
        pass

    assert _sample("trades_applied_total", applied) - before_applied == 1.0
    assert _sample("trades_rejected_total", rejected) - before_rejected == 1.0


def test_realized_and_open_quantity_gauges():
    eng = AccountingEngine(StateStore(), PriceCache())
    eng.apply_trade(Trade(id=new_id(), symbol="MTRB", side="buy", price=10.0, quantity=2.0))
    eng.apply_trade(Trade(id=new_id(), symbol="MTRB", side="sell", price=12.5, quantity=1.0))
    assert _sample("realized_pnl_usd", {"symbol": "MTRB"}) == 2.5
    assert _sample("open_quantity", {"symbol": "MTRB"}) == 1.0


def test_price_fetch_fallback_counter():
    class Broken:
        def fetch_tickers(self, symbols):
            raise RuntimeError("down")

    labels = {"source": "fallback"}
    before = _sample("price_fetch_total", labels)
    PriceCache(["BTC"], fallback_prices={"BTC": 1.0}, exchange=Broken()).fetch_latest_prices()
    assert _sample("price_fetch_total", labels) - before == 1.0


def test_metrics_server_bind_failure_returns_none(monkeypatch):
    from src.cryptopnl.metrics import core

    def _busy(port):
        raise OSError("address already in use")

    monkeypatch.setattr(core, "start_http_server", _busy)
    assert core.start_server_safe(8000) is None
    monkeypatch.setattr(core, "start_http_server", lambda port: None)
    assert core.start_server_safe(8001) == 8001
