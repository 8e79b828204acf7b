"""Unit tests for the sensor fan-out and the Prometheus backend."""

from prometheus_client import CollectorRegistry
from argonaut.sensors import PrometheusMonitor, SensorDelegate
from argonaut.sensors.base import OperatorSensor


class BrokenSensor(OperatorSensor):
    def on_checksum_committed(self, instance_name, namespace, status_key):
        raise RuntimeError("boom")


class TestPrometheusMonitor:
    def test_reconcile_metrics(self):
        registry = CollectorRegistry()
        monitor = PrometheusMonitor(registry=registry)

        state = monitor.on_reconcile_start("argocd", "argocd", 1, "timer")
        monitor.on_reconcile_complete("argocd", "argocd", state, False, ValueError("x"))

        labels = {"instance_name": "argocd", "namespace": "argocd", "trigger_source": "timer", "result": "failure"}
        assert registry.get_sample_value("argonaut_reconcile_total", labels) == 1.0
        assert (
            registry.get_sample_value(
                "argonaut_reconcile_errors_total",
                {"instance_name": "argocd", "namespace": "argocd", "error_type": "ValueError"},
            )
            == 1.0
        )

    def test_rollout_and_drift_metrics(self):
        registry = CollectorRegistry()
        monitor = PrometheusMonitor(registry=registry)

        monitor.on_rollout_triggered("argocd", "argocd", "repo-tls", "Deployment", "argocd-server")
        monitor.on_checksum_committed("argocd", "argocd", "repo-tls")
        monitor.on_resource_drift_detected("argocd", "argocd-cm", "argocd", "ConfigMap", ["data", "labels"])

        assert (
            registry.get_sample_value(
                "argonaut_rollout_triggered_total",
                {
                    "instance_name": "argocd",
                    "namespace": "argocd",
                    "status_key": "repo-tls",
                    "resource_type": "Deployment",
                    "resource_name": "argocd-server",
                },
            )
            == 1.0
        )
        assert (
            registry.get_sample_value(
                "argonaut_checksum_committed_total",
                {"instance_name": "argocd", "namespace": "argocd", "status_key": "repo-tls"},
            )
            == 1.0
        )
        assert (
            registry.get_sample_value(
                "argonaut_resource_drift_detected_total",
                {
                    "instance_name": "argocd",
                    "resource_name": "argocd-cm",
                    "namespace": "argocd",
                    "resource_type": "ConfigMap",
                    "drift_field": "labels",
                },
            )
            == 1.0
        )


class TestSensorDelegate:
    def test_states_are_routed_back_per_sensor(self):
        registry = CollectorRegistry()
        monitor = PrometheusMonitor(registry=registry)
        delegate = SensorDelegate()
        delegate.add(monitor)

        state = delegate.on_resource_sync_start("argocd", "argocd-server", "argocd", "Deployment")
        assert monitor in state
        delegate.on_resource_sync_complete(
            "argocd", "argocd-server", "argocd", "Deployment", state, "create", True
        )

        assert (
            registry.get_sample_value(
                "argonaut_resource_sync_total",
                {
                    "instance_name": "argocd",
                    "resource_name": "argocd-server",
                    "namespace": "argocd",
                    "resource_type": "Deployment",
                    "operation": "create",
                    "result": "success",
                },
            )
            == 1.0
        )

    def test_failing_sensor_does_not_break_others(self):
        registry = CollectorRegistry()
        monitor = PrometheusMonitor(registry=registry)
        delegate = SensorDelegate()
        delegate.add(BrokenSensor())
        delegate.add(monitor)

        delegate.on_checksum_committed("argocd", "argocd", "redis-tls")

        assert (
            registry.get_sample_value(
                "argonaut_checksum_committed_total",
                {"instance_name": "argocd", "namespace": "argocd", "status_key": "redis-tls"},
            )
            == 1.0
        )

    def test_no_sensors(self):
        delegate = SensorDelegate()
        assert delegate.on_reconcile_start("argocd", "argocd", 1, "create") is None
        delegate.on_reconcile_complete("argocd", "argocd", None, True)
