"""Relay für etcd-Backup-Reports: Reporting-Listener und Prometheus-Exposition."""
