"""
Prometheus exposition listener.
Serves the shared registry in text format from a background thread.
"""
import logging
from threading import Thread
from typing import Optional
from wsgiref.simple_server import WSGIServer

from prometheus_client import start_http_server

from backup_metrics_server.errors import ListenerBindError
from backup_metrics_server.prometheus.PrometheusMetrics import PrometheusMetrics

logger = logging.getLogger(__name__)


class ExpositionServer:
    def __init__(self, prometheus_metrics: PrometheusMetrics, port: int = 2112, addr: str = "0.0.0.0"):
        self._prometheus_metrics = prometheus_metrics
        self.port = port
        self.addr = addr
        self._server: Optional[WSGIServer] = None
        self._thread: Optional[Thread] = None

    @property
    def bound_port(self) -> int:
        if self._server is None:
            raise RuntimeError("Exposition listener is not running")
        return self._server.server_port

    def start(self) -> None:
        logger.info("Starting prometheus metrics listener on port %d", self.port)
        try:
            self._server, self._thread = start_http_server(self.port, addr=self.addr,
                                                           registry=self._prometheus_metrics.get_registry())
        except OSError as e:
            logger.error("Error listening on port %d", self.port)
            raise ListenerBindError(self.port) from e

    def stop(self) -> None:
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        self._thread.join(timeout=5)
        self._server = None
        self._thread = None
        logger.info("Prometheus metrics listener stopped")
