import pytest
from pydantic import ValidationError

from src.cryptopnl.config.loader import load_settings, DEFAULT_SYMBOLS


def test_missing_file_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.delenv("CRYPTOPNL_PORT", raising=False)
    s = load_settings(str(tmp_path / "nope.yaml"))
    assert s.port == 3000
    assert s.symbols == DEFAULT_SYMBOLS
    assert s.fallback_prices["BTC"] == 40000.0
    assert s.export_dir is None


def test_yaml_and_env_overrides(tmp_path, monkeypatch):
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "port: 4000\n"
        "exchange: kraken\n"
        "symbols: [btc, ' eth ']\n"
        "fallback_prices: {btc: 30000}\n"
    )
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.setenv("CRYPTOPNL_PORT", "5050")
    monkeypatch.setenv("CRYPTOPNL_FETCH_PRICES_ON_STARTUP", "false")
    s = load_settings(str(cfg))
    assert s.port == 5050
    assert s.exchange == "kraken"
    assert s.symbols == ["BTC", "ETH"]
    assert s.fallback_prices == {"BTC": 30000.0}
    assert s.fetch_prices_on_startup is False


def test_bare_port_env_is_honoured(tmp_path, monkeypatch):
    monkeypatch.delenv("CRYPTOPNL_PORT", raising=False)
    monkeypatch.setenv("PORT", "8081")
    assert load_settings(str(tmp_path / "nope.yaml")).port == 8081


def test_non_positive_fallback_price_rejected(tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("fallback_prices: {BTC: 0}\n")
    with pytest.raises(ValidationError):
        load_settings(str(cfg))
