"""Prometheus monitoring backend for the operator.

PrometheusMonitor collects operator lifecycle events and exposes them as
Prometheus metrics:

1. Reconciliation pass health - duration, throughput, errors
2. Kubernetes resource sync - operation counts, latency, drift detection
3. Rollout propagation - triggered rollouts and committed checksums

All metrics carry instance and namespace labels.
"""

from typing import Dict, List, Optional, Any
import time
import logging

from prometheus_client import Counter, Histogram

from argonaut.sensors.base import OperatorSensor

logger = logging.getLogger(__name__)


class PrometheusMonitor(OperatorSensor):
    """Prometheus metrics monitor.

    Metrics are organized by prefix:
    - argonaut_reconcile_* - Reconciliation pass metrics
    - argonaut_resource_* - Kubernetes resource sync metrics
    - argonaut_rollout_* / argonaut_checksum_* - TLS rollout propagation
    """

    def __init__(self, registry=None):
        super().__init__()
        kwargs = {} if registry is None else {"registry": registry}

        # =============================================================================
        # Reconciliation Loop Metrics
        # =============================================================================

        self.reconcile_duration = Histogram(
            'argonaut_reconcile_duration_seconds',
            'Time spent in a reconciliation pass',
            labelnames=['instance_name', 'namespace', 'trigger_source', 'result'],
            buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0],
            **kwargs,
        )

        self.reconcile_total = Counter(
            'argonaut_reconcile_total',
            'Total number of reconciliation passes',
            labelnames=['instance_name', 'namespace', 'trigger_source', 'result'],
            **kwargs,
        )

        self.reconcile_errors = Counter(
            'argonaut_reconcile_errors_total',
            'Total number of reconciliation errors',
            labelnames=['instance_name', 'namespace', 'error_type'],
            **kwargs,
        )

        # =============================================================================
        # Kubernetes Resource Sync Metrics
        # =============================================================================

        self.resource_sync_duration = Histogram(
            'argonaut_resource_sync_duration_seconds',
            'Time spent writing managed Kubernetes resources',
            labelnames=['instance_name', 'resource_name', 'namespace', 'resource_type', 'operation', 'result'],
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
            **kwargs,
        )

        self.resource_sync_total = Counter(
            'argonaut_resource_sync_total',
            'Total number of resource write operations',
            labelnames=['instance_name', 'resource_name', 'namespace', 'resource_type', 'operation', 'result'],
            **kwargs,
        )

        self.resource_sync_errors = Counter(
            'argonaut_resource_sync_errors_total',
            'Total number of resource write errors',
            labelnames=['instance_name', 'resource_name', 'namespace', 'resource_type', 'error_type'],
            **kwargs,
        )

        self.resource_drift_detected = Counter(
            'argonaut_resource_drift_detected_total',
            'Total number of resource drift detections',
            labelnames=['instance_name', 'resource_name', 'namespace', 'resource_type', 'drift_field'],
            **kwargs,
        )

        # =============================================================================
        # Rollout Metrics
        # =============================================================================

        self.rollouts_triggered = Counter(
            'argonaut_rollout_triggered_total',
            'Total number of dependent workloads rolled for a content change',
            labelnames=['instance_name', 'namespace', 'status_key', 'resource_type', 'resource_name'],
            **kwargs,
        )

        self.checksums_committed = Counter(
            'argonaut_checksum_committed_total',
            'Total number of content checksums committed to status',
            labelnames=['instance_name', 'namespace', 'status_key'],
            **kwargs,
        )

        # =============================================================================
        # Status Update Metrics
        # =============================================================================

        self.status_updates = Counter(
            'argonaut_status_updates_total',
            'Total number of status updates',
            labelnames=['instance_name', 'namespace', 'update_field'],
            **kwargs,
        )

        logger.info("PrometheusMonitor initialized with all metrics")

    # =============================================================================
    # Reconciliation Lifecycle Hooks
    # =============================================================================

    def on_reconcile_start(
        self,
        instance_name: str,
        namespace: str,
        generation: int,
        trigger_source: str,
    ) -> Optional[Dict[str, Any]]:
        return {
            'start_time': time.time(),
            'trigger_source': trigger_source,
        }

    def on_reconcile_complete(
        self,
        instance_name: str,
        namespace: str,
        state: Optional[Dict[str, Any]],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        if state:
            duration = time.time() - state['start_time']
            result = 'success' if success else 'failure'
            trigger_source = state['trigger_source']

            self.reconcile_duration.labels(
                instance_name=instance_name,
                namespace=namespace,
                trigger_source=trigger_source,
                result=result,
            ).observe(duration)

            self.reconcile_total.labels(
                instance_name=instance_name,
                namespace=namespace,
                trigger_source=trigger_source,
                result=result,
            ).inc()

        if error:
            self.reconcile_errors.labels(
                instance_name=instance_name,
                namespace=namespace,
                error_type=error.__class__.__name__,
            ).inc()

    # =============================================================================
    # Resource Operation Hooks
    # =============================================================================

    def on_resource_sync_start(
        self,
        instance_name: str,
        resource_name: str,
        namespace: str,
        resource_type: str,
    ) -> Optional[Dict[str, Any]]:
        return {'start_time': time.time()}

    def on_resource_sync_complete(
        self,
        instance_name: str,
        resource_name: str,
        namespace: str,
        resource_type: str,
        state: Optional[Dict[str, Any]],
        operation: str,
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        result = 'success' if success else 'failure'
        if state:
            self.resource_sync_duration.labels(
                instance_name=instance_name,
                resource_name=resource_name,
                namespace=namespace,
                resource_type=resource_type,
                operation=operation,
                result=result,
            ).observe(time.time() - state['start_time'])

        self.resource_sync_total.labels(
            instance_name=instance_name,
            resource_name=resource_name,
            namespace=namespace,
            resource_type=resource_type,
            operation=operation,
            result=result,
        ).inc()

        if error:
            self.resource_sync_errors.labels(
                instance_name=instance_name,
                resource_name=resource_name,
                namespace=namespace,
                resource_type=resource_type,
                error_type=error.__class__.__name__,
            ).inc()

    def on_resource_drift_detected(
        self,
        instance_name: str,
        resource_name: str,
        namespace: str,
        resource_type: str,
        drift_fields: List[str],
    ) -> None:
        for field in drift_fields:
            self.resource_drift_detected.labels(
                instance_name=instance_name,
                resource_name=resource_name,
                namespace=namespace,
                resource_type=resource_type,
                drift_field=field,
            ).inc()

    # =============================================================================
    # Rollout Hooks
    # =============================================================================

    def on_rollout_triggered(
        self,
        instance_name: str,
        namespace: str,
        status_key: str,
        resource_type: str,
        resource_name: str,
    ) -> None:
        self.rollouts_triggered.labels(
            instance_name=instance_name,
            namespace=namespace,
            status_key=status_key,
            resource_type=resource_type,
            resource_name=resource_name,
        ).inc()

    def on_checksum_committed(
        self,
        instance_name: str,
        namespace: str,
        status_key: str,
    ) -> None:
        self.checksums_committed.labels(
            instance_name=instance_name,
            namespace=namespace,
            status_key=status_key,
        ).inc()

    # =============================================================================
    # Status Hooks
    # =============================================================================

    def on_status_update(
        self,
        instance_name: str,
        namespace: str,
        update_fields: List[str],
    ) -> None:
        for field in update_fields:
            self.status_updates.labels(
                instance_name=instance_name,
                namespace=namespace,
                update_field=field,
            ).inc()
