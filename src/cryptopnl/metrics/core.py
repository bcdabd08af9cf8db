"""Metrics endpoint for the cryptopnl service.

The Prometheus exporter runs on its own port beside the HTTP API; an occupied
port only costs the metrics endpoint, never the API.
"""

import logging
from typing import Optional

from prometheus_client import start_http_server

logger = logging.getLogger(__name__)


def start_server_safe(port: int) -> Optional[int]:
    """Expose accounting metrics on `port`; return the port, or None if it is taken."""
    try:
        start_http_server(port)
    except OSError as e:
        logger.warning(f"Metrics endpoint disabled, cannot bind :{port}: {e}")
        return None
    logger.info(f"Accounting metrics exposed on :{port}/metrics")
    return port
