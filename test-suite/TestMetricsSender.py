import json

import httpx
import pytest
from fastapi.testclient import TestClient

from backup_metrics_client.metrics_sender import MetricsHttpSender, ReportSerializationError, DEFAULT_COLLECTOR_URL
from backup_metrics_server.ReportingServer import create_app
from backup_metrics_shared.models_v1 import BackupMetricsV1

COLLECTOR_URL = "http://collector.test:8080/"


def _metrics(successful: bool = True) -> BackupMetricsV1:
    return BackupMetricsV1(successful=successful, backup_size_bytes=1024, creation_time_ms=50,
                           encryption_time_ms=30, upload_time_ms=200)


def _sender(handler) -> MetricsHttpSender:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return MetricsHttpSender(collector_url=COLLECTOR_URL, client=client)


def test_send_posts_flat_json_report():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text="OK")

    resp = _sender(handler).send(_metrics(), "mycluster")

    assert resp.status_code == 200
    assert len(seen) == 1
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == COLLECTOR_URL
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == {
        "Cluster": "mycluster",
        "Successful": True,
        "BackupSizeMeasurement": 1024,
        "CreationTimeMeasurement": 50,
        "EncryptionTimeMeasurement": 30,
        "UploadTimeMeasurement": 200,
    }


def test_server_error_raises_http_status_error():
    sender = _sender(lambda request: httpx.Response(500, text="internal error"))

    with pytest.raises(httpx.HTTPStatusError):
        sender.send(_metrics(), "mycluster")


def test_transport_error_propagates_unwrapped():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection failed")

    with pytest.raises(httpx.ConnectError):
        _sender(handler).send(_metrics(), "mycluster")


def test_serialization_error_is_raised_before_posting():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    sender = _sender(handler)
    with pytest.raises(ReportSerializationError):
        sender.send(_metrics(), 12345)
    with pytest.raises(ReportSerializationError):
        sender.send(None, "mycluster")

    assert calls == []


def test_external_client_is_not_closed():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    with MetricsHttpSender(collector_url=COLLECTOR_URL, client=client) as sender:
        sender.send(_metrics(False), "mycluster")

    assert not client.is_closed


def test_default_collector_url():
    sender = MetricsHttpSender()
    try:
        assert sender.collector_url == DEFAULT_COLLECTOR_URL == "http://etcd-backup-metrics-collector:8080/"
    finally:
        sender.close()


def test_invalid_collector_url_is_rejected():
    with pytest.raises(ValueError):
        MetricsHttpSender(collector_url=None)
    with pytest.raises(TypeError):
        MetricsHttpSender(collector_url=8080)


def test_sent_report_is_recorded_by_reporting_server(prometheus_metrics, sample_value):
    """Sender und Reporting-Listener sprechen dasselbe Wire-Format."""
    reporting = TestClient(create_app(prometheus_metrics))

    def handler(request: httpx.Request) -> httpx.Response:
        forwarded = reporting.post("/", content=request.content)
        return httpx.Response(forwarded.status_code, text=forwarded.text)

    resp = _sender(handler).send(_metrics(), "mycluster")

    assert resp.text == "OK"
    assert sample_value("etcd_backup_size_bytes") == 1024
    assert sample_value("etcd_backup_success_count_total") == 1
