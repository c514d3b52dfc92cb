import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Dict, Union, Iterable, List, Mapping

import yaml

SETTINGS_SECTION = "backup_metrics"
ENV_PREFIX = "BACKUP_METRICS_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_PORT_SETTINGS = ("reporting_port", "prometheus_port")


@dataclass(frozen=True)
class ServiceSettings:
    bind_addr: str = "0.0.0.0"
    reporting_port: int = 8080
    prometheus_port: int = 2112
    collector_url: str = "http://etcd-backup-metrics-collector:8080/"
    sender_timeout: float = 10.0
    log_level: str = "INFO"
    default_collectors: bool = True


def _coerce(name: str, value, target_type: type):
    if target_type is bool:
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        raise ValueError(f"Invalid boolean value for {name}: {value!r}")

    if target_type is int and isinstance(value, (bool, float)):
        raise ValueError(f"Invalid integer value for {name}: {value!r}")
    try:
        return target_type(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid value for {name}: {value!r}") from e


def _validate(values: Dict) -> Dict:
    for name in _PORT_SETTINGS:
        if name in values and not 0 <= values[name] <= 65535:
            raise ValueError(f"{name} must be between 0 and 65535, got {values[name]}")

    if "sender_timeout" in values and values["sender_timeout"] <= 0:
        raise ValueError(f"sender_timeout must be positive, got {values['sender_timeout']}")

    if "log_level" in values:
        level = values["log_level"].strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log_level: {values['log_level']!r}")
        values["log_level"] = level

    return values


class ConfigLoader:

    def __init__(self, base_dir: Optional[Path] = None, default_config: str = "configs/default.yaml"):
        self.base_dir = Path(base_dir) if base_dir is not None else Path.cwd()
        self.default_config = default_config

    def _deep_update(self, base: Dict, override: Dict) -> Dict:
        for k, v in (override or {}).items():
            if isinstance(v, dict) and isinstance(base.get(k), dict):
                base[k] = self._deep_update(base[k], v)
            else:
                base[k] = v
        return base

    def _load_yaml_file(self, path: Union[str, Path]) -> Dict:
        p = Path(path)
        if not p.is_absolute():
            p = self.base_dir / p
        if not p.exists():
            # Optionale Konfigurationsdateien dürfen fehlen
            return {}
        with p.open("r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Config file {p} must contain a mapping")
        return loaded

    def load(
            self,
            cfg_paths: Optional[Union[str, Path, Iterable[Union[str, Path]]]] = None,
            env: Optional[str] = None,
    ) -> Dict:
        """
        Lädt und merged Konfigurationsdateien.
        - cfg_paths: einzelne Datei oder Liste von Dateien in Reihenfolge (spätere überschreiben frühere).
          Ohne Angabe wird default_config verwendet.
        - env: optionaler Umgebungsname; configs/<env>.yaml wird zuletzt gemerged, falls vorhanden.
        """
        if cfg_paths is None:
            paths: List[Union[str, Path]] = [self.default_config] if self.default_config else []
        elif isinstance(cfg_paths, (str, Path)):
            paths = [cfg_paths]
        else:
            paths = list(cfg_paths)

        if env:
            paths.append(Path("configs") / f"{env}.yaml")

        config: Dict = {}
        for p in paths:
            config = self._deep_update(config, self._load_yaml_file(p))
        return config

    def load_settings(self, env: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> ServiceSettings:
        """
        Baut die ServiceSettings aus Defaults, dem YAML-Abschnitt `backup_metrics`
        und Umgebungsvariablen (BACKUP_METRICS_<NAME>), in dieser Reihenfolge.
        Ungültige Werte führen zu einem ValueError.
        """
        environ = os.environ if environ is None else environ
        section = self.load(env=env).get(SETTINGS_SECTION) or {}

        known = {f.name: f.type for f in fields(ServiceSettings)}
        unknown = set(section) - set(known)
        if unknown:
            raise ValueError(f"Unknown settings in '{SETTINGS_SECTION}': {', '.join(sorted(unknown))}")

        values: Dict = {}
        for name, target_type in known.items():
            raw = section.get(name)
            env_value = environ.get(ENV_PREFIX + name.upper())
            if env_value:
                raw = env_value
            if raw is not None:
                values[name] = _coerce(name, raw, target_type)

        return ServiceSettings(**_validate(values))
