import socket

import httpx
import pytest

from backup_metrics_server.ExpositionServer import ExpositionServer
from backup_metrics_server.errors import ListenerBindError
from backup_metrics_server.recorder import BackupRecorder
from backup_metrics_shared.models_v1 import BackupMetricsV1


@pytest.fixture
def exposition(prometheus_metrics):
    server = ExpositionServer(prometheus_metrics, port=0, addr="127.0.0.1")
    server.start()
    yield server
    server.stop()


def test_metrics_endpoint_serves_text_format(exposition, prometheus_metrics):
    BackupRecorder(prometheus_metrics).record("mycluster", BackupMetricsV1(successful=True, backup_size_bytes=1024))

    resp = httpx.get(f"http://127.0.0.1:{exposition.bound_port}/metrics", timeout=5)

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/plain")
    assert "# TYPE etcd_backup_size_bytes gauge" in resp.text
    assert 'etcd_backup_size_bytes{tenant_cluster_id="mycluster"} 1024.0' in resp.text
    assert 'etcd_backup_success_count_total{tenant_cluster_id="mycluster"} 1.0' in resp.text


def test_all_metric_families_are_registered(exposition):
    resp = httpx.get(f"http://127.0.0.1:{exposition.bound_port}/metrics", timeout=5)

    for name in ("etcd_backup_creation_time_ms", "etcd_backup_encryption_time_ms",
                 "etcd_backup_upload_time_ms", "etcd_backup_size_bytes",
                 "etcd_backup_attempts_count", "etcd_backup_success_count",
                 "etcd_backup_failure_count"):
        assert f"# HELP {name}" in resp.text


def test_bind_failure_raises_listener_bind_error(prometheus_metrics):
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
        blocker.bind(("127.0.0.1", 0))
        blocker.listen(1)
        port = blocker.getsockname()[1]

        server = ExpositionServer(prometheus_metrics, port=port, addr="127.0.0.1")
        with pytest.raises(ListenerBindError) as exc_info:
            server.start()

    assert exc_info.value.port == port


def test_stop_without_start_is_noop(prometheus_metrics):
    ExpositionServer(prometheus_metrics, port=0).stop()
