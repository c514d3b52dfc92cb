import threading

import pytest

from backup_metrics_server.recorder import BackupRecorder
from backup_metrics_shared.models_v1 import BackupMetricsV1


@pytest.fixture
def recorder(prometheus_metrics) -> BackupRecorder:
    return BackupRecorder(prometheus_metrics)


def _successful(size=1024, creation=50, encryption=30, upload=200) -> BackupMetricsV1:
    return BackupMetricsV1(successful=True, backup_size_bytes=size, creation_time_ms=creation,
                           encryption_time_ms=encryption, upload_time_ms=upload)


def test_successful_report_sets_gauges_and_counts(recorder, sample_value):
    recorder.record("mycluster", _successful())

    assert sample_value("etcd_backup_size_bytes") == 1024
    assert sample_value("etcd_backup_creation_time_ms") == 50
    assert sample_value("etcd_backup_encryption_time_ms") == 30
    assert sample_value("etcd_backup_upload_time_ms") == 200
    assert sample_value("etcd_backup_attempts_count_total") == 1
    assert sample_value("etcd_backup_success_count_total") == 1
    # Failure-Counter wurde für diesen Cluster nie angefasst
    assert sample_value("etcd_backup_failure_count_total") is None


def test_failed_report_only_counts_and_keeps_gauges(recorder, sample_value):
    recorder.record("mycluster", _successful())
    recorder.record("mycluster", BackupMetricsV1(successful=False, backup_size_bytes=1, upload_time_ms=1))

    assert sample_value("etcd_backup_attempts_count_total") == 2
    assert sample_value("etcd_backup_success_count_total") == 1
    assert sample_value("etcd_backup_failure_count_total") == 1
    assert sample_value("etcd_backup_size_bytes") == 1024
    assert sample_value("etcd_backup_upload_time_ms") == 200


def test_failed_report_without_prior_success_leaves_gauges_unset(recorder, sample_value):
    recorder.record("fresh", BackupMetricsV1(successful=False))

    assert sample_value("etcd_backup_failure_count_total", "fresh") == 1
    assert sample_value("etcd_backup_attempts_count_total", "fresh") == 1
    assert sample_value("etcd_backup_size_bytes", "fresh") is None


def test_last_successful_report_wins(recorder, sample_value):
    recorder.record("mycluster", _successful(size=100, creation=1))
    recorder.record("mycluster", _successful(size=300, creation=7))

    assert sample_value("etcd_backup_size_bytes") == 300
    assert sample_value("etcd_backup_creation_time_ms") == 7
    assert sample_value("etcd_backup_success_count_total") == 2


def test_clusters_are_tracked_separately(recorder, sample_value):
    recorder.record("a", _successful(size=10))
    recorder.record("b", BackupMetricsV1(successful=False))

    assert sample_value("etcd_backup_size_bytes", "a") == 10
    assert sample_value("etcd_backup_size_bytes", "b") is None
    assert sample_value("etcd_backup_failure_count_total", "a") is None
    assert sample_value("etcd_backup_failure_count_total", "b") == 1


def test_concurrent_recordings_do_not_lose_increments(recorder, sample_value):
    threads_count = 8
    per_thread = 250
    barrier = threading.Barrier(threads_count)

    def worker(i: int):
        barrier.wait()
        for n in range(per_thread):
            recorder.record("mycluster", BackupMetricsV1(successful=(n + i) % 2 == 0))

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(threads_count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    total = threads_count * per_thread
    assert sample_value("etcd_backup_attempts_count_total") == total
    assert sample_value("etcd_backup_success_count_total") + sample_value("etcd_backup_failure_count_total") == total
