import sys
from pathlib import Path

import pytest

# Ensure the project's src directory is on sys.path so tests can import package modules
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from backup_metrics_server.prometheus.PrometheusMetrics import PrometheusMetrics  # noqa: E402


@pytest.fixture
def prometheus_metrics() -> PrometheusMetrics:
    """Frische Registry pro Test, ohne process/gc/platform Collectors."""
    return PrometheusMetrics(include_default_collectors=False)


@pytest.fixture
def sample_value(prometheus_metrics: PrometheusMetrics):
    """Liest einen Sample-Wert für einen Cluster aus der Registry (None wenn nie gesetzt)."""

    def _read(name: str, cluster: str = "mycluster"):
        return prometheus_metrics.get_registry().get_sample_value(name, {"tenant_cluster_id": cluster})

    return _read
