"""Sender-Interface und HTTP-Implementierung für den Metrics-Collector.

Dieses Modul definiert:
- `MetricsSender` (abstraktes Interface) mit der Methode `send`.
- `MetricsHttpSender`, der einen Backup-Report als JSON an den Collector postet.
- `send(...)` als Kurzform für einen einzelnen Report.

Fehler werden nicht geloggt und nicht wiederholt, sondern an den Aufrufer
weitergereicht: `ReportSerializationError` wenn der Report nicht serialisiert
werden kann, sonst die Exceptions von httpx (`TransportError`, `HTTPStatusError`).
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx
from pydantic import ValidationError

from backup_metrics_shared.models_v1 import BackupMetricsV1, BackupReportPayloadV1

logger = logging.getLogger(__name__)

DEFAULT_COLLECTOR_URL = "http://etcd-backup-metrics-collector:8080/"


class ReportSerializationError(ValueError):
    """Der Report konnte nicht in JSON umgewandelt werden."""


class MetricsSender(ABC):
    """Abstraktes Interface für das Weiterleiten von Backup-Reports."""

    @abstractmethod
    def send(self, backup_metrics: BackupMetricsV1, tenant_cluster_name: str) -> httpx.Response:
        """Report an den Collector senden.

        Args:
            backup_metrics: Messwerte des Backup-Laufs.
            tenant_cluster_name: Name des Tenant-Clusters, wird als `Cluster` mitgeschickt.

        Returns:
            Die Antwort des Collectors (immer 2xx, sonst wird eine Exception geworfen).
        """
        raise NotImplementedError

    def close(self) -> None:  # pragma: no cover - trivial default
        return None

    def __enter__(self) -> "MetricsSender":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class MetricsHttpSender(MetricsSender):
    """Postet Reports per HTTP an den Collector.

    Ein übergebener `httpx.Client` (z. B. mit MockTransport in Tests) wird
    verwendet aber nicht geschlossen.
    """

    def __init__(
        self,
        collector_url: str = DEFAULT_COLLECTOR_URL,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        if collector_url is None:
            raise ValueError("collector_url darf nicht None sein")
        if not isinstance(collector_url, str):
            raise TypeError("collector_url muss vom Typ str sein")

        self.collector_url = collector_url
        self.timeout = float(timeout)

        self._external_client = client is not None
        self._client = client if client is not None else httpx.Client(timeout=self.timeout)

    @staticmethod
    def serialize(backup_metrics: BackupMetricsV1, tenant_cluster_name: str) -> bytes:
        """Flaches JSON-Objekt aus Messwerten und `Cluster` bauen."""
        try:
            payload = BackupReportPayloadV1.from_measurements(backup_metrics, tenant_cluster_name)
            return payload.model_dump_json(by_alias=True).encode("utf-8")
        except (ValidationError, AttributeError, TypeError) as e:
            raise ReportSerializationError(f"Failed to serialize backup report: {e}") from e

    def send(self, backup_metrics: BackupMetricsV1, tenant_cluster_name: str) -> httpx.Response:
        content = self.serialize(backup_metrics, tenant_cluster_name)
        logger.debug("Posting backup report for cluster %s to %s", tenant_cluster_name, self.collector_url)
        resp = self._client.post(self.collector_url, content=content,
                                 headers={"Content-Type": "application/json"})
        resp.raise_for_status()
        return resp

    def close(self) -> None:
        """Schliesse den internen HTTP-Client, falls er intern erstellt wurde."""
        if not self._external_client:
            self._client.close()


def send(backup_metrics: BackupMetricsV1, tenant_cluster_name: str,
         collector_url: str = DEFAULT_COLLECTOR_URL, timeout: float = 10.0) -> httpx.Response:
    """Einen einzelnen Report mit einem kurzlebigen Sender verschicken."""
    with MetricsHttpSender(collector_url=collector_url, timeout=timeout) as sender:
        return sender.send(backup_metrics, tenant_cluster_name)
