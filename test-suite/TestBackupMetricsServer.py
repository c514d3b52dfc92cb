import logging
import socket
import threading
import time
from unittest.mock import MagicMock

import httpx
import pytest

import backup_metrics_server.entrypoint as entrypoint_module
from backup_metrics_server.BackupMetricsServer import BackupMetricsServer
from backup_metrics_server.errors import ListenerBindError
from utils.ConfigLoader import ServiceSettings


def _listening_socket() -> socket.socket:
    blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    blocker.bind(("127.0.0.1", 0))
    blocker.listen(1)
    return blocker


def _wait_for(predicate, timeout: float = 10.0):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise TimeoutError("condition not reached in time")
        time.sleep(0.05)


def test_both_listeners_share_the_registry(prometheus_metrics):
    settings = ServiceSettings(bind_addr="127.0.0.1", reporting_port=0, prometheus_port=0)
    server = BackupMetricsServer(settings, prometheus_metrics)

    thread = threading.Thread(target=server.listen, daemon=True)
    thread.start()
    try:
        _wait_for(lambda: server.started)
        base = f"http://127.0.0.1:{server.reporting_port}"

        assert httpx.get(base + "/healthz", timeout=5).text == "OK"
        resp = httpx.post(base + "/", content='{"Successful":false,"Cluster":"mycluster"}', timeout=5)
        assert resp.status_code == 200

        scrape = httpx.get(f"http://127.0.0.1:{server.exposition.bound_port}/metrics", timeout=5)
        assert 'etcd_backup_failure_count_total{tenant_cluster_id="mycluster"} 1.0' in scrape.text
    finally:
        server.stop()
        thread.join(timeout=10)

    assert not thread.is_alive()


def test_reporting_port_in_use_is_fatal(prometheus_metrics):
    with _listening_socket() as blocker:
        port = blocker.getsockname()[1]
        settings = ServiceSettings(bind_addr="127.0.0.1", reporting_port=port, prometheus_port=0)
        server = BackupMetricsServer(settings, prometheus_metrics)

        with pytest.raises(ListenerBindError) as exc_info:
            server.listen()

    assert exc_info.value.port == port
    # Exposition-Listener wurde gar nicht erst gestartet
    with pytest.raises(RuntimeError):
        _ = server.exposition.bound_port


def test_prometheus_port_in_use_is_fatal(prometheus_metrics):
    with _listening_socket() as blocker:
        port = blocker.getsockname()[1]
        settings = ServiceSettings(bind_addr="127.0.0.1", reporting_port=0, prometheus_port=port)
        server = BackupMetricsServer(settings, prometheus_metrics)

        with pytest.raises(ListenerBindError) as exc_info:
            server.listen()

    assert exc_info.value.port == port
    assert not server.started


def test_entrypoint_exits_with_1_when_reporting_port_is_taken(monkeypatch, tmp_path, caplog):
    # configure_logging ersetzt die Root-Handler; caplog muss erhalten bleiben
    log_listener = MagicMock()
    monkeypatch.setattr(entrypoint_module, "configure_logging", lambda level: log_listener)
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("ENV_NAME", raising=False)

    with _listening_socket() as blocker:
        port = blocker.getsockname()[1]
        monkeypatch.setenv("BACKUP_METRICS_BIND_ADDR", "127.0.0.1")
        monkeypatch.setenv("BACKUP_METRICS_REPORTING_PORT", str(port))
        monkeypatch.setenv("BACKUP_METRICS_PROMETHEUS_PORT", "0")
        monkeypatch.setenv("BACKUP_METRICS_DEFAULT_COLLECTORS", "false")

        with caplog.at_level(logging.INFO):
            assert entrypoint_module.entrypoint() == 1

    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert any(r.getMessage() == f"Error listening on port {port}" for r in errors)
    log_listener.stop.assert_called_once()
