import pytest
from fastapi.testclient import TestClient

from backup_metrics_server.ReportingServer import create_app

EXAMPLE_SUCCESS = ('{"Successful":true,"BackupSizeMeasurement":1024,"CreationTimeMeasurement":50,'
                   '"EncryptionTimeMeasurement":30,"UploadTimeMeasurement":200,"Cluster":"mycluster"}')
EXAMPLE_FAILURE = '{"Successful":false,"Cluster":"mycluster"}'


@pytest.fixture
def client(prometheus_metrics) -> TestClient:
    return TestClient(create_app(prometheus_metrics))


def test_healthz_returns_ok(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.text == "OK"


def test_healthz_ignores_body(client, sample_value):
    resp = client.request("GET", "/healthz", content=b"{broken")
    assert resp.status_code == 200
    assert resp.text == "OK"
    assert sample_value("etcd_backup_attempts_count_total") is None


def test_successful_report_is_recorded_and_exposed(client, prometheus_metrics):
    resp = client.post("/", content=EXAMPLE_SUCCESS)

    assert resp.status_code == 200
    assert resp.text == "OK"
    assert resp.headers["content-type"].startswith("text/plain")

    exposition = prometheus_metrics.generate_latest().decode("utf-8")
    assert 'etcd_backup_size_bytes{tenant_cluster_id="mycluster"} 1024.0' in exposition
    assert 'etcd_backup_upload_time_ms{tenant_cluster_id="mycluster"} 200.0' in exposition
    assert 'etcd_backup_attempts_count_total{tenant_cluster_id="mycluster"} 1.0' in exposition


def test_failed_report_increments_failure_only(client, sample_value):
    client.post("/", content=EXAMPLE_SUCCESS)
    resp = client.post("/", content=EXAMPLE_FAILURE)

    assert resp.status_code == 200
    assert resp.text == "OK"
    assert sample_value("etcd_backup_failure_count_total") == 1
    assert sample_value("etcd_backup_attempts_count_total") == 2
    assert sample_value("etcd_backup_success_count_total") == 1
    assert sample_value("etcd_backup_size_bytes") == 1024


@pytest.mark.parametrize("body", [
    b"",
    b"{\"Successful\": tru",
    b"[]",
    b"{\"Successful\": \"true\"}",
    b"{\"Cluster\": 17}",
    b"{\"CreationTimeMeasurement\": 2.5}",
])
def test_malformed_body_is_rejected_without_side_effects(client, prometheus_metrics, body):
    before = prometheus_metrics.generate_latest()
    resp = client.post("/", content=body)

    assert resp.status_code == 400
    assert resp.text == "Bad request"
    assert prometheus_metrics.generate_latest() == before


def test_any_path_and_method_is_treated_as_report(client, sample_value):
    assert client.put("/some/where", content=EXAMPLE_FAILURE).status_code == 200
    assert client.post("/healthz", content=EXAMPLE_FAILURE).status_code == 200

    assert sample_value("etcd_backup_failure_count_total") == 2


def test_post_to_healthz_is_decoded(client):
    resp = client.post("/healthz", content=b"garbage")
    assert resp.status_code == 400
    assert resp.text == "Bad request"


def test_unknown_fields_and_alias_are_accepted(client, sample_value):
    body = '{"Successful": true, "BackupSizeBytes": 2048, "Cluster": "other", "Region": "eu"}'
    resp = client.post("/", content=body)

    assert resp.status_code == 200
    assert sample_value("etcd_backup_size_bytes", "other") == 2048


def test_head_requests_go_through_the_decoder(client, sample_value):
    assert client.head("/").status_code == 400
    assert client.head("/healthz").status_code == 400

    resp = client.request("HEAD", "/", content=EXAMPLE_FAILURE)
    assert resp.status_code == 200
    assert sample_value("etcd_backup_failure_count_total") == 1


def test_exposition_has_no_created_series(client, prometheus_metrics):
    client.post("/", content=EXAMPLE_SUCCESS)
    client.post("/", content=EXAMPLE_FAILURE)

    exposition = prometheus_metrics.generate_latest().decode("utf-8")
    assert 'etcd_backup_failure_count_total{tenant_cluster_id="mycluster"} 1.0' in exposition
    assert "_created" not in exposition
