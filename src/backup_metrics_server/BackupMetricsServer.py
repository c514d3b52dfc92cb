import logging
import socket
from typing import Optional

import uvicorn

from backup_metrics_server.ExpositionServer import ExpositionServer
from backup_metrics_server.ReportingServer import create_app
from backup_metrics_server.errors import ListenerBindError
from backup_metrics_server.prometheus.PrometheusMetrics import PrometheusMetrics
from utils.ConfigLoader import ServiceSettings

logger = logging.getLogger(__name__)


class BackupMetricsServer:
    """Startet beide Listener und hält die gemeinsame Registry.

    Der Exposition-Listener läuft in einem Hintergrund-Thread, der
    Reporting-Listener (uvicorn) im aufrufenden Thread bis SIGINT/SIGTERM.
    """

    def __init__(self, settings: ServiceSettings, prometheus_metrics: PrometheusMetrics):
        self.settings = settings
        self.prometheus_metrics = prometheus_metrics
        self.exposition = ExpositionServer(prometheus_metrics,
                                           port=settings.prometheus_port,
                                           addr=settings.bind_addr)
        self.app = create_app(prometheus_metrics)
        self._server: Optional[uvicorn.Server] = None
        self._socket: Optional[socket.socket] = None

    @property
    def started(self) -> bool:
        return self._server is not None and self._server.started

    @property
    def reporting_port(self) -> int:
        if self._socket is None:
            raise RuntimeError("Reporting listener is not bound")
        return self._socket.getsockname()[1]

    def _bind_reporting_socket(self) -> socket.socket:
        port = self.settings.reporting_port
        logger.info("Starting metrics update listener on port %d", port)
        family = socket.AF_INET6 if ":" in self.settings.bind_addr else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.settings.bind_addr, port))
        except OSError as e:
            sock.close()
            logger.error("Error listening on port %d", port)
            raise ListenerBindError(port) from e
        return sock

    def listen(self) -> None:
        sock = self._bind_reporting_socket()
        try:
            self.exposition.start()
        except ListenerBindError:
            sock.close()
            raise

        # log_config=None: uvicorn übernimmt die Logging-Konfiguration des Prozesses
        config = uvicorn.Config(self.app, log_config=None, log_level=None)
        self._server = uvicorn.Server(config)
        self._socket = sock
        try:
            self._server.run(sockets=[sock])
        finally:
            self.exposition.stop()
            sock.close()
            self._socket = None
            logger.info("Backup metrics server shutdown complete")

    def stop(self) -> None:
        if self._server is not None:
            self._server.should_exit = True
