"""
Configuration loader for cryptopnl.

What it does:
- Reads static settings from `config/config.yaml` (defaults apply when the file
  is missing).
- Applies `CRYPTOPNL_*` environment overrides, plus the bare `PORT` variable
  used by container platforms.
- Validates the resulting configuration using Pydantic models.

Where it is used:
- Called by `cryptopnl.main` to build a `Settings` object for runtime.
"""

import os
import pathlib
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, field_validator

DEFAULT_SYMBOLS = ["BTC", "ETH", "SOL", "USDT", "BNB", "XRP", "ADA", "DOGE", "AVAX", "DOT"]
DEFAULT_FALLBACK_PRICES = {"BTC": 40000.0, "ETH": 2000.0, "SOL": 100.0}

ENV_PREFIX = "CRYPTOPNL"
_ENV_FIELDS = {
    "HOST": "host",
    "PORT": "port",
    "PROMETHEUS_PORT": "prometheus_port",
    "LOG_LEVEL": "log_level",
    "EXCHANGE": "exchange",
    "EXPORT_DIR": "export_dir",
    "FETCH_PRICES_ON_STARTUP": "fetch_prices_on_startup",
}


class Settings(BaseModel):
    """Runtime settings assembled from YAML + environment variables."""
    host: str = "0.0.0.0"
    port: int = 3000
    prometheus_port: int = 8000
    log_level: str = "INFO"
    exchange: str = "binance"
    quote_currency: str = "USDT"
    symbols: List[str] = list(DEFAULT_SYMBOLS)
    fallback_prices: Dict[str, float] = dict(DEFAULT_FALLBACK_PRICES)
    fetch_prices_on_startup: bool = True
    epsilon: float = 1e-9
    export_dir: Optional[str] = None

    @field_validator("symbols")
    @classmethod
    def upper_symbols(cls, v):
        return [str(s).strip().upper() for s in v if str(s).strip()]

    @field_validator("fallback_prices")
    @classmethod
    def positive_prices(cls, v):
        for sym, px in v.items():
            if px <= 0:
                raise ValueError(f"Fallback price for {sym} must be positive")
        return {str(k).upper(): float(px) for k, px in v.items()}

    @field_validator("epsilon")
    @classmethod
    def small_positive(cls, v):
        if not 0 < v < 1e-3:
            raise ValueError("epsilon must be in (0, 1e-3)")
        return v


def _env_overrides() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    port = os.getenv("PORT")
    if port:
        out["port"] = port
    for suffix, field in _ENV_FIELDS.items():
        val = os.getenv(f"{ENV_PREFIX}_{suffix}")
        if val:
            out[field] = val
    return out


def load_settings(path: str = "config/config.yaml") -> Settings:
    """Load YAML config, apply env-var overrides, and return Settings."""
    config: Dict[str, Any] = {}
    p = pathlib.Path(path)
    if p.exists():
        with open(p, "r") as f:
            config = yaml.safe_load(f) or {}
    config.update(_env_overrides())
    return Settings(**config)
