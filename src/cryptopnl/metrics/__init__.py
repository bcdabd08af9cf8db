"""Prometheus metrics for cryptopnl."""
