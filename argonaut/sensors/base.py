"""Base sensor classes for operator monitoring.

This module defines the base OperatorSensor class that provides lifecycle hooks
for monitoring operator events. All hooks are no-ops by default, allowing
subclasses to override only the events they care about.

The hook pattern:
- Hooks come in pairs: on_X_start() and on_X_complete()
- Start hooks return an optional state dict for tracking multi-phase operations
- Complete hooks receive the state dict from their corresponding start hook
- All hooks are optional - sensors only implement what they need
"""

from typing import Dict, List, Optional, Any
import logging

logger = logging.getLogger(__name__)


class OperatorSensor:
    """Base sensor class for operator monitoring.

    Hooks cover four areas:
    1. Reconciliation lifecycle (one pass over an ArgoCD instance)
    2. Resource operations (create/update/delete of managed objects)
    3. Rollout propagation (TLS content changes)
    4. Status writes

    All methods are no-ops by default.
    """

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
        """Called when a reconciliation pass begins.

        Args:
            instance_name: ArgoCD resource name
            namespace: Kubernetes namespace
            generation: Resource generation number
            trigger_source: What triggered the pass (create, update, resume, timer)

        Returns:
            Optional state dict passed to on_reconcile_complete
        """
        pass

    def on_reconcile_complete(
        self,
        instance_name: str,
        namespace: str,
        state: Optional[Dict[str, Any]],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        """Called when a reconciliation pass completes."""
        pass

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
        """Called before a managed object is written."""
        pass

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
        """Called after a managed object write.

        Args:
            operation: One of create, update, delete
        """
        pass

    def on_resource_drift_detected(
        self,
        instance_name: str,
        resource_name: str,
        namespace: str,
        resource_type: str,
        drift_fields: List[str],
    ) -> None:
        """Called when a live object differs from its desired state.

        Args:
            drift_fields: Names of the differing field groups
        """
        pass

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
        """Called after a dependent workload was restamped or recreated."""
        pass

    def on_checksum_committed(
        self,
        instance_name: str,
        namespace: str,
        status_key: str,
    ) -> None:
        """Called when a new content checksum is recorded for commit."""
        pass

    # =============================================================================
    # Status Hooks
    # =============================================================================

    def on_status_update(
        self,
        instance_name: str,
        namespace: str,
        update_fields: List[str],
    ) -> None:
        """Called when status fields are written."""
        pass
