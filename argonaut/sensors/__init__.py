"""Operator sensor framework.

Hook-based instrumentation of operator lifecycle events:

- OperatorSensor: Base class defining lifecycle hooks
- SensorDelegate: Fan-out to multiple sensor backends
- PrometheusMonitor: Prometheus metrics exporter

Usage:
    from argonaut.sensors import SensorDelegate, PrometheusMonitor

    delegate = SensorDelegate()
    delegate.add(PrometheusMonitor())
"""

from argonaut.sensors.base import OperatorSensor
from argonaut.sensors.delegate import SensorDelegate
from argonaut.sensors.prometheus import PrometheusMonitor
from argonaut.sensors.server import init_metrics_server

__all__ = [
    'OperatorSensor',
    'SensorDelegate',
    'PrometheusMonitor',
    'init_metrics_server',
]
