import logging
import os
import sys

from backup_metrics_server.BackupMetricsServer import BackupMetricsServer
from backup_metrics_server.errors import ListenerBindError
from backup_metrics_server.prometheus.PrometheusMetrics import PrometheusMetrics
from utils.ConfigLoader import ConfigLoader
from utils.LoggingUtils import configure_logging

logger = logging.getLogger(__name__)


def entrypoint() -> int:
    settings = ConfigLoader().load_settings(env=os.environ.get("ENV_NAME"))
    listener = configure_logging(settings.log_level)
    logger.info("Starting etcd backup metrics server with %s", settings)

    try:
        prometheus_metrics = PrometheusMetrics(include_default_collectors=settings.default_collectors)
        BackupMetricsServer(settings, prometheus_metrics).listen()
    except ListenerBindError:
        logger.exception("Backup metrics server could not start")
        return 1
    finally:
        listener.stop()
    return 0


def main():
    sys.exit(entrypoint())


if __name__ == "__main__":
    main()
