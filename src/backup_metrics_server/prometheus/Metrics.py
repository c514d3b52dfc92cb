from prometheus_client import Counter, Gauge

NAMESPACE = "etcd_backup"
LABEL_TENANT_CLUSTER_ID = "tenant_cluster_id"
LABELS = [LABEL_TENANT_CLUSTER_ID]


class Metrics:
    def __init__(self, registry):
        self.CREATION_TIME = Gauge(name="creation_time_ms", namespace=NAMESPACE,
                                   documentation="Gauge about the time in ms spent by the ETCD backup creation process.",
                                   labelnames=LABELS, registry=registry)
        self.ENCRYPTION_TIME = Gauge(name="encryption_time_ms", namespace=NAMESPACE,
                                     documentation="Gauge about the time in ms spent by the ETCD backup encryption process.",
                                     labelnames=LABELS, registry=registry)
        self.UPLOAD_TIME = Gauge(name="upload_time_ms", namespace=NAMESPACE,
                                 documentation="Gauge about the time in ms spent by the ETCD backup upload process.",
                                 labelnames=LABELS, registry=registry)
        self.BACKUP_SIZE = Gauge(name="size_bytes", namespace=NAMESPACE,
                                 documentation="Gauge about the size of the backup file, as seen by S3.",
                                 labelnames=LABELS, registry=registry)
        self.ATTEMPTS_COUNT = Counter(name="attempts_count", namespace=NAMESPACE,
                                      documentation="Count of attempted backups",
                                      labelnames=LABELS, registry=registry)
        self.SUCCESS_COUNT = Counter(name="success_count", namespace=NAMESPACE,
                                     documentation="Count of successful backups",
                                     labelnames=LABELS, registry=registry)
        self.FAILURE_COUNT = Counter(name="failure_count", namespace=NAMESPACE,
                                     documentation="Count of failed backups",
                                     labelnames=LABELS, registry=registry)


def init_metrics(registry):
    return Metrics(registry)
