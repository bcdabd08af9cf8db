import pytest

from src.cryptopnl.ledger import StateStore
from src.cryptopnl.ledger.model import Trade, new_id


def test_get_or_create_state_is_lazy_and_stable():
    store = StateStore()
    assert store.all_states() == []
    s1 = store.get_or_create_state("BTC")
    assert (s1.open_quantity, s1.open_cost, s1.realized_pnl) == (0.0, 0.0, 0.0)
    assert store.get_or_create_state("BTC") is s1


def test_all_states_returns_snapshots():
    store = StateStore()
    store.get_or_create_state("ETH").open_quantity = 2.0
    (sym, snap), = store.all_states()
    snap.open_quantity = 99.0
    assert sym == "ETH"
    assert store.get_or_create_state("ETH").open_quantity == 2.0


def test_write_parquet(tmp_path):
    pd = pytest.importorskip("pandas")
    pytest.importorskip("pyarrow")
    store = StateStore()
    store.record_trade(Trade(id=new_id(), symbol="BTC", side="buy", price=100.0, quantity=1.5))
    st = store.get_or_create_state("BTC")
    st.open_quantity, st.open_cost = 1.5, 150.0

    store.write_parquet(str(tmp_path))
    trades = pd.read_parquet(tmp_path / "trades.parquet")
    positions = pd.read_parquet(tmp_path / "positions.parquet")
    assert list(trades["symbol"]) == ["BTC"]
    assert positions.loc[0, "open_cost"] == 150.0
