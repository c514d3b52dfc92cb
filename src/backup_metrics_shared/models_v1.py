from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

# Wertebereich eines int64, so wie ihn die Backup-Pipeline liefert
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class BackupMetricsV1(BaseModel):
    """Messwerte eines einzelnen etcd-Backup-Laufs in der Version V1.

    Die JSON-Feldnamen entsprechen dem Format der Backup-Pipeline
    (`Successful`, `BackupSizeMeasurement`, ...). Fehlende Felder bekommen
    den Nullwert, unbekannte Felder werden ignoriert. Falsche Typen
    (z. B. ein String für `Successful`) führen zu einem ValidationError.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    successful: bool = Field(default=False, alias="Successful", strict=True)
    backup_size_bytes: int = Field(default=0,
                                   validation_alias=AliasChoices("BackupSizeMeasurement", "BackupSizeBytes"),
                                   serialization_alias="BackupSizeMeasurement",
                                   strict=True, ge=INT64_MIN, le=INT64_MAX)
    creation_time_ms: int = Field(default=0, alias="CreationTimeMeasurement",
                                  strict=True, ge=INT64_MIN, le=INT64_MAX)
    encryption_time_ms: int = Field(default=0, alias="EncryptionTimeMeasurement",
                                    strict=True, ge=INT64_MIN, le=INT64_MAX)
    upload_time_ms: int = Field(default=0, alias="UploadTimeMeasurement",
                                strict=True, ge=INT64_MIN, le=INT64_MAX)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # JSON null behält den Nullwert des Feldes
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class BackupReportPayloadV1(BackupMetricsV1):
    """Report-Payload für den Reporting-Endpoint: Messwerte plus Cluster-Name.

    Wird in einem Durchgang aus dem Request-Body dekodiert.
    """
    cluster: str = Field(default="", alias="Cluster", strict=True)

    @classmethod
    def from_measurements(cls, metrics: BackupMetricsV1, cluster: str) -> "BackupReportPayloadV1":
        return cls(**metrics.model_dump(exclude={"cluster"}), cluster=cluster)

    def measurements(self) -> BackupMetricsV1:
        return BackupMetricsV1(**self.model_dump(exclude={"cluster"}))
