import logging

from backup_metrics_server.prometheus.PrometheusMetrics import PrometheusMetrics
from backup_metrics_shared.models_v1 import BackupMetricsV1

logger = logging.getLogger(__name__)


class BackupRecorder:
    """Schreibt die Messwerte eines Backup-Reports in die Prometheus-Metriken.

    Der Attempt-Counter wird bei jedem Report erhöht. Bei einem erfolgreichen
    Backup werden die vier Gauges überschrieben und der Success-Counter
    erhöht, sonst nur der Failure-Counter. Die Gauges behalten bei einem
    Fehlschlag ihren letzten Wert.
    """

    def __init__(self, prometheus_metrics: PrometheusMetrics):
        self._metrics = prometheus_metrics.metrics()

    def record(self, tenant_cluster_name: str, backup_metrics: BackupMetricsV1) -> None:
        m = self._metrics
        m.ATTEMPTS_COUNT.labels(tenant_cluster_name).inc()

        if backup_metrics.successful:
            m.CREATION_TIME.labels(tenant_cluster_name).set(backup_metrics.creation_time_ms)
            m.ENCRYPTION_TIME.labels(tenant_cluster_name).set(backup_metrics.encryption_time_ms)
            m.UPLOAD_TIME.labels(tenant_cluster_name).set(backup_metrics.upload_time_ms)
            m.BACKUP_SIZE.labels(tenant_cluster_name).set(backup_metrics.backup_size_bytes)
            m.SUCCESS_COUNT.labels(tenant_cluster_name).inc()
        else:
            m.FAILURE_COUNT.labels(tenant_cluster_name).inc()

        logger.debug("Recorded backup report for cluster %s (successful=%s)",
                     tenant_cluster_name, backup_metrics.successful)
