"""Sensor delegation for fan-out pattern.

SensorDelegate routes sensor events to multiple monitoring backends
simultaneously. Each backend receives the same events and keeps its own
state for start/complete hook pairs.
"""

from typing import Set, Dict, List, Optional, Any
import logging

from argonaut.sensors.base import OperatorSensor

logger = logging.getLogger(__name__)


class SensorDelegate(OperatorSensor):
    """Delegate sensor that fans out events to multiple backends.

    Example:
        delegate = SensorDelegate()
        delegate.add(PrometheusMonitor())

        state = delegate.on_reconcile_start("argocd", "default", 5, "timer")
        delegate.on_reconcile_complete("argocd", "default", state, True)
    """

    def __init__(self) -> None:
        self._sensors: Set[OperatorSensor] = set()

    def add(self, sensor: OperatorSensor) -> None:
        logger.info(f"Adding sensor: {sensor.__class__.__name__}")
        self._sensors.add(sensor)

    def _start(self, hook: str, *args) -> Optional[Dict[OperatorSensor, Any]]:
        if not self._sensors:
            return None
        states = {}
        for sensor in self._sensors:
            try:
                state = getattr(sensor, hook)(*args)
                if state is not None:
                    states[sensor] = state
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.{hook}: {e}",
                    exc_info=True,
                )
        return states if states else None

    def _emit(self, hook: str, *args, **kwargs) -> None:
        for sensor in self._sensors:
            try:
                getattr(sensor, hook)(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.{hook}: {e}",
                    exc_info=True,
                )

    def _complete(self, hook: str, state, *args, **kwargs) -> None:
        # Each sensor gets back the state it returned from the start hook.
        for sensor in self._sensors:
            try:
                sensor_state = state.get(sensor) if state else None
                getattr(sensor, hook)(*args, sensor_state, **kwargs)
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.{hook}: {e}",
                    exc_info=True,
                )

    # =============================================================================
    # Reconciliation Lifecycle Hooks
    # =============================================================================

    def on_reconcile_start(
        self,
        instance_name: str,
        namespace: str,
        generation: int,
        trigger_source: str,
    ) -> Optional[Dict[OperatorSensor, Any]]:
        return self._start(
            "on_reconcile_start", instance_name, namespace, generation, trigger_source
        )

    def on_reconcile_complete(
        self,
        instance_name: str,
        namespace: str,
        state: Optional[Dict[OperatorSensor, Any]],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        self._complete(
            "on_reconcile_complete",
            state,
            instance_name,
            namespace,
            success=success,
            error=error,
        )

    # =============================================================================
    # Resource Operation Hooks
    # =============================================================================

    def on_resource_sync_start(
        self,
        instance_name: str,
        resource_name: str,
        namespace: str,
        resource_type: str,
    ) -> Optional[Dict[OperatorSensor, Any]]:
        return self._start(
            "on_resource_sync_start",
            instance_name,
            resource_name,
            namespace,
            resource_type,
        )

    def on_resource_sync_complete(
        self,
        instance_name: str,
        resource_name: str,
        namespace: str,
        resource_type: str,
        state: Optional[Dict[OperatorSensor, Any]],
        operation: str,
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        self._complete(
            "on_resource_sync_complete",
            state,
            instance_name,
            resource_name,
            namespace,
            resource_type,
            operation=operation,
            success=success,
            error=error,
        )

    def on_resource_drift_detected(
        self,
        instance_name: str,
        resource_name: str,
        namespace: str,
        resource_type: str,
        drift_fields: List[str],
    ) -> None:
        self._emit(
            "on_resource_drift_detected",
            instance_name,
            resource_name,
            namespace,
            resource_type,
            drift_fields,
        )

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
        self._emit(
            "on_rollout_triggered",
            instance_name,
            namespace,
            status_key,
            resource_type,
            resource_name,
        )

    def on_checksum_committed(
        self,
        instance_name: str,
        namespace: str,
        status_key: str,
    ) -> None:
        self._emit("on_checksum_committed", instance_name, namespace, status_key)

    # =============================================================================
    # Status Hooks
    # =============================================================================

    def on_status_update(
        self,
        instance_name: str,
        namespace: str,
        update_fields: List[str],
    ) -> None:
        self._emit("on_status_update", instance_name, namespace, update_fields)
