import logging
from typing import Dict, Optional, Set, Tuple
from argonaut.reconcile.lifecycle import Action, LifecycleController
from argonaut.reconcile.plan import ComputeStep, PassContext
from argonaut.reconcile.prober import ExistenceProber
from argonaut.reconcile.rollout import ChecksumRolloutPropagator
from argonaut.reconcile.status import reconcile_status
from argonaut.resources.accessor import ControlPlane
from argonaut.resources.argocd import ArgoCD
from argonaut.sensors.base import OperatorSensor
from argonaut.types.models.argocd_status import StatusUpdate


class Reconciler:
    """One reconciliation pass over one ArgoCD instance.

    The pass converges managed objects in plan order, then propagates TLS
    content changes, then converges again any workload a rollout deleted for
    recreation, then reports health. Everything it wants written to the
    instance status is accumulated in the ``StatusUpdate`` it was given, so a
    caller can still apply what was gathered when a later stage fails.
    """

    def __init__(
        self,
        control_plane: ControlPlane,
        argocd: ArgoCD,
        sensor: OperatorSensor = None,
        logger: logging.Logger = None,
    ):
        self.argocd = argocd
        self.sensor = sensor or OperatorSensor()
        self.logger = logger or logging.getLogger(__name__)
        self.prober = ExistenceProber(control_plane)
        self.lifecycle = LifecycleController(
            control_plane,
            argocd.name,
            argocd.namespace,
            owner=argocd.body,
            sensor=self.sensor,
            logger=self.logger,
        )
        self.propagator = ChecksumRolloutPropagator(
            control_plane,
            argocd.name,
            argocd.namespace,
            sensor=self.sensor,
            logger=self.logger,
        )

    async def reconcile_resources(
        self, only: Optional[Set[Tuple[str, str]]] = None
    ) -> Dict[str, Action]:
        """Converge every resource step, or only those managing ``(kind, name)`` in ``only``."""
        plan = self.argocd.plan(self.prober)
        context = PassContext()
        actions: Dict[str, Action] = {}
        for step in plan:
            if isinstance(step, ComputeStep):
                context[step.name] = await step.compute(context)
            elif only is None or (step.kind, step.resource_name) in only:
                actions[step.name] = await self.lifecycle.reconcile(step, plan, context)
        return actions

    async def reconcile_rollouts(self, status: StatusUpdate) -> StatusUpdate:
        current = status.current_checksums
        for tracked in self.argocd.tracked_secrets():
            if not tracked.enabled:
                status.clear_checksum(tracked.status_key)
                continue
            checksum = await self.propagator.reconcile_content_change(
                tracked, current.get(tracked.status_key)
            )
            if checksum is not None:
                # Recorded only once every dependent was rolled.
                status.set_checksum(tracked.status_key, checksum)
                self.sensor.on_checksum_committed(
                    self.argocd.name, self.argocd.namespace, tracked.status_key
                )
        return status

    async def reconcile_status(self, status: StatusUpdate) -> StatusUpdate:
        return await reconcile_status(
            self.prober, self.argocd.namespace, self.argocd.status_workloads(), status
        )

    async def run(self, status: StatusUpdate) -> StatusUpdate:
        actions = await self.reconcile_resources()
        changed = [name for name, action in actions.items() if action is not Action.NOOP]
        if changed:
            self.logger.info(f"Converged {', '.join(changed)}")
        await self.reconcile_rollouts(status)
        if self.propagator.recreated:
            # Owned objects are not watched, so recreate within this pass.
            recreated = set(self.propagator.recreated)
            self.propagator.recreated.clear()
            await self.reconcile_resources(only=recreated)
        await self.reconcile_status(status)
        return status
