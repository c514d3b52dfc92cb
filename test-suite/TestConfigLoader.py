from pathlib import Path

import pytest

from utils.ConfigLoader import ConfigLoader, ServiceSettings


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_defaults_without_config_files(tmp_path: Path):
    settings = ConfigLoader(base_dir=tmp_path).load_settings(environ={})

    assert settings == ServiceSettings()
    assert settings.reporting_port == 8080
    assert settings.prometheus_port == 2112
    assert settings.collector_url == "http://etcd-backup-metrics-collector:8080/"


def test_env_file_overrides_default_file(tmp_path: Path):
    _write(tmp_path / "configs" / "default.yaml",
           "backup_metrics:\n  reporting_port: 9000\n  log_level: info\n")
    _write(tmp_path / "configs" / "staging.yaml",
           "backup_metrics:\n  reporting_port: 9100\n  default_collectors: false\n")

    settings = ConfigLoader(base_dir=tmp_path).load_settings(env="staging", environ={})

    assert settings.reporting_port == 9100
    assert settings.default_collectors is False
    assert settings.log_level == "INFO"


def test_environment_variables_win(tmp_path: Path):
    _write(tmp_path / "configs" / "default.yaml", "backup_metrics:\n  prometheus_port: 3000\n")
    environ = {
        "BACKUP_METRICS_PROMETHEUS_PORT": "3100",
        "BACKUP_METRICS_COLLECTOR_URL": "http://collector.local/",
        "BACKUP_METRICS_SENDER_TIMEOUT": "2.5",
        "BACKUP_METRICS_DEFAULT_COLLECTORS": "no",
        "BACKUP_METRICS_LOG_LEVEL": "",
    }

    settings = ConfigLoader(base_dir=tmp_path).load_settings(environ=environ)

    assert settings.prometheus_port == 3100
    assert settings.collector_url == "http://collector.local/"
    assert settings.sender_timeout == 2.5
    assert settings.default_collectors is False
    assert settings.log_level == "INFO"


@pytest.mark.parametrize("environ", [
    {"BACKUP_METRICS_REPORTING_PORT": "eighty"},
    {"BACKUP_METRICS_REPORTING_PORT": "70000"},
    {"BACKUP_METRICS_SENDER_TIMEOUT": "0"},
    {"BACKUP_METRICS_DEFAULT_COLLECTORS": "maybe"},
    {"BACKUP_METRICS_LOG_LEVEL": "chatty"},
])
def test_invalid_values_raise_value_error(tmp_path: Path, environ):
    with pytest.raises(ValueError):
        ConfigLoader(base_dir=tmp_path).load_settings(environ=environ)


def test_unknown_setting_is_rejected(tmp_path: Path):
    _write(tmp_path / "configs" / "default.yaml", "backup_metrics:\n  reporting_prot: 1\n")

    with pytest.raises(ValueError, match="reporting_prot"):
        ConfigLoader(base_dir=tmp_path).load_settings(environ={})


def test_load_merges_nested_sections(tmp_path: Path):
    _write(tmp_path / "a.yaml", "backup_metrics:\n  bind_addr: 127.0.0.1\nother:\n  x: 1\n")
    _write(tmp_path / "b.yaml", "backup_metrics:\n  reporting_port: 1\n")

    config = ConfigLoader(base_dir=tmp_path).load(["a.yaml", "b.yaml"])

    assert config == {"backup_metrics": {"bind_addr": "127.0.0.1", "reporting_port": 1}, "other": {"x": 1}}


def test_repository_default_config_matches_builtin_defaults():
    root = Path(__file__).resolve().parents[1]
    assert ConfigLoader(base_dir=root).load_settings(environ={}) == ServiceSettings()
