from __future__ import annotations
import socket
import logging

from prometheus_client import Histogram, Counter, start_http_server

logger = logging.getLogger(__name__)

MEDIATIONS = Counter(
    "transform_mediations_total",
    "Mediation passes by final outcome",
    ["outcome"],
)
RELAY_CALL_MS = Histogram(
    "relay_call_ms",
    "Latency of upstream chat-completion calls",
    buckets=(50,100,200,400,800,1200,2000,3000,5000,8000,15000,30000),
)
RELAY_ERRORS = Counter(
    "relay_errors_total",
    "Upstream call failures",
    ["kind"]
)

def _is_port_in_use(port: int, host: str = '0.0.0.0') -> bool:
    """Check if a port is already in use on the specified host."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        try:
            s.bind((host, port))
            return False
        except OSError:
            return True

def start_metrics_server(host: str, port: int) -> bool:
    """
    Start the Prometheus metrics HTTP server.

    prometheus_client binds to 0.0.0.0; the host is only used for the log line.
    Returns False when the port is taken and a server is assumed to be running.
    """
    if _is_port_in_use(port, '0.0.0.0'):
        logger.warning(f"Metrics server port {port} is already in use on 0.0.0.0. Assuming metrics server is already running.")
        return False
    try:
        start_http_server(port)
        logger.info(f"Started metrics server on 0.0.0.0:{port} (accessible at http://{host}:{port}/metrics)")
        return True
    except OSError as e:
        if e.errno == 98:  # Address already in use
            logger.warning(f"Metrics server port {port} is already in use. Assuming metrics server is already running.")
            return False
        logger.error(f"Failed to start metrics server on port {port}: {e}")
        raise
