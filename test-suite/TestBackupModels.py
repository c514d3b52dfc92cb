import pytest
from pydantic import ValidationError

from backup_metrics_shared.models_v1 import BackupMetricsV1, BackupReportPayloadV1, INT64_MAX


def test_report_decodes_wire_field_names():
    body = ('{"Successful":true,"BackupSizeMeasurement":1024,"CreationTimeMeasurement":50,'
            '"EncryptionTimeMeasurement":30,"UploadTimeMeasurement":200,"Cluster":"mycluster"}')
    report = BackupReportPayloadV1.model_validate_json(body)

    assert report.cluster == "mycluster"
    assert report.successful is True
    assert report.backup_size_bytes == 1024
    assert report.creation_time_ms == 50
    assert report.encryption_time_ms == 30
    assert report.upload_time_ms == 200


def test_backup_size_bytes_is_accepted_as_alias():
    report = BackupReportPayloadV1.model_validate_json('{"BackupSizeBytes": 77}')
    assert report.backup_size_bytes == 77


def test_missing_and_null_fields_get_zero_values():
    report = BackupReportPayloadV1.model_validate_json('{"Successful": null, "UploadTimeMeasurement": null}')

    assert report.cluster == ""
    assert report.successful is False
    assert report.upload_time_ms == 0


def test_unknown_fields_are_ignored():
    report = BackupReportPayloadV1.model_validate_json('{"Cluster": "c", "Unrelated": [1, 2]}')
    assert report.cluster == "c"


@pytest.mark.parametrize("body", [
    "",
    "not json",
    "[1, 2]",
    "42",
    '{"Successful": "yes"}',
    '{"Successful": 1}',
    '{"UploadTimeMeasurement": 1.5}',
    '{"UploadTimeMeasurement": "200"}',
    '{"Cluster": 5}',
    '{"BackupSizeMeasurement": %d}' % (INT64_MAX + 1),
])
def test_invalid_bodies_raise_validation_error(body):
    with pytest.raises(ValidationError):
        BackupReportPayloadV1.model_validate_json(body)


def test_measurements_are_frozen():
    metrics = BackupMetricsV1(successful=True)
    with pytest.raises(ValidationError):
        metrics.successful = False


def test_measurements_split_off_the_cluster():
    report = BackupReportPayloadV1(cluster="c", successful=True, upload_time_ms=9)
    measurements = report.measurements()

    assert type(measurements) is BackupMetricsV1
    assert measurements.upload_time_ms == 9
    assert measurements.successful is True


def test_from_measurements_serializes_flat_wire_object():
    metrics = BackupMetricsV1(successful=True, backup_size_bytes=5, creation_time_ms=1,
                              encryption_time_ms=2, upload_time_ms=3)
    dumped = BackupReportPayloadV1.from_measurements(metrics, "mycluster").model_dump(by_alias=True)

    assert dumped == {
        "Successful": True,
        "BackupSizeMeasurement": 5,
        "CreationTimeMeasurement": 1,
        "EncryptionTimeMeasurement": 2,
        "UploadTimeMeasurement": 3,
        "Cluster": "mycluster",
    }


@pytest.mark.parametrize("body", [
    "null",
    '{"Cluster": "x"} trailing',
    '{"Cluster": "x"}{"Cluster": "y"}',
])
def test_null_body_and_trailing_data_are_rejected(body):
    with pytest.raises(ValidationError):
        BackupReportPayloadV1.model_validate_json(body)
