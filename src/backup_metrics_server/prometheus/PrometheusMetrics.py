from prometheus_client import CollectorRegistry, disable_created_metrics, gc_collector, platform_collector, process_collector
from prometheus_client.exposition import generate_latest

from backup_metrics_server.prometheus.Metrics import Metrics, init_metrics


class PrometheusMetrics:
    """Besitzt die CollectorRegistry des Prozesses und die Backup-Metriken darin.

    Eine Instanz wird beim Start erzeugt und an Recorder und beide Listener
    weitergereicht.
    """

    def __init__(self, include_default_collectors: bool = True):
        # Keine *_created Serien neben den Countern
        disable_created_metrics()
        self.prometheus_registry = CollectorRegistry()
        if include_default_collectors:
            # Default collectors registrieren
            gc_collector.GCCollector(registry=self.prometheus_registry)
            platform_collector.PlatformCollector(registry=self.prometheus_registry)
            process_collector.ProcessCollector(registry=self.prometheus_registry)

        self.prometheus_metrics = init_metrics(registry=self.prometheus_registry)

    def get_registry(self) -> CollectorRegistry:
        return self.prometheus_registry

    def generate_latest(self) -> bytes:
        return generate_latest(self.prometheus_registry)

    def metrics(self) -> Metrics:
        return self.prometheus_metrics
