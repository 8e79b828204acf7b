import kopf
import logging
from enum import Enum
from typing import Any, Dict, Optional
from kubernetes_asyncio.client import V1OwnerReference
from argonaut.reconcile.fields import update_if_changed
from argonaut.reconcile.metadata import preserve_metadata
from argonaut.reconcile.plan import PassContext, Plan, ResourceStep
from argonaut.reconcile.prober import ExistenceProber
from argonaut.resources.accessor import ControlPlane
from argonaut.sensors.base import OperatorSensor


class Action(Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    NOOP = "noop"


def owner_reference(owner: Dict) -> V1OwnerReference:
    """Controller owner reference pointing at the instance body."""
    ref = kopf.build_owner_reference(owner)
    return V1OwnerReference(
        api_version=ref["apiVersion"],
        kind=ref["kind"],
        name=ref["name"],
        uid=ref["uid"],
        controller=ref.get("controller", True),
        block_owner_deletion=ref.get("blockOwnerDeletion", True),
    )


class LifecycleController:
    """Decides create, update, delete or no-op for one managed object.

    ======== ======== ==========================================
    live     enabled  action
    ======== ======== ==========================================
    absent   yes      set owner, create
    absent   no       nothing
    present  yes      preserve metadata, diff, update if changed
    present  no       delete
    ======== ======== ==========================================
    """

    def __init__(
        self,
        control_plane: ControlPlane,
        instance_name: str,
        namespace: str,
        owner: Optional[Dict] = None,
        sensor: OperatorSensor = None,
        logger: logging.Logger = None,
    ):
        self.control_plane = control_plane
        self.prober = ExistenceProber(control_plane)
        self.instance_name = instance_name
        self.namespace = namespace
        self.owner = owner
        self.sensor = sensor or OperatorSensor()
        self.logger = logger or logging.getLogger(__name__)

    async def reconcile(
        self, step: ResourceStep, plan: Plan, context: PassContext
    ) -> Action:
        if step.enabled:
            for other in step.exclusive_with:
                await self._delete_exclusive(plan[other])

        existing = await self.prober.probe(step.kind, self.namespace, step.resource_name)

        if existing is None:
            if not step.enabled:
                return Action.NOOP
            desired = step.build(context)
            self._set_owner(desired, step)
            created = await self._write(Action.CREATE, step, desired)
            return Action.CREATE if created else Action.NOOP

        if not step.enabled:
            await self._write(Action.DELETE, step)
            return Action.DELETE

        desired = preserve_metadata(step.build(context), existing)
        result = update_if_changed(step.field_groups, existing, desired)
        if not result.changed:
            return Action.NOOP

        self.logger.info(
            f"{step.kind} {step.resource_name} differs from desired state: {result.explanation}"
        )
        self.sensor.on_resource_drift_detected(
            self.instance_name,
            step.resource_name,
            self.namespace,
            step.kind,
            list(result.groups),
        )
        await self._write(Action.UPDATE, step, existing)
        return Action.UPDATE

    async def _delete_exclusive(self, other: ResourceStep) -> None:
        existing = await self.prober.probe(other.kind, self.namespace, other.resource_name)
        if existing is not None:
            self.logger.info(
                f"Removing {other.kind} {other.resource_name}, replaced by an alternative form"
            )
            await self._write(Action.DELETE, other)

    def _set_owner(self, desired: Any, step: ResourceStep) -> None:
        if self.owner is None:
            return
        try:
            ref = owner_reference(self.owner)
            metadata = desired.metadata
            refs = [r for r in (metadata.owner_references or []) if r.uid != ref.uid]
            metadata.owner_references = refs + [ref]
        except Exception as e:
            # The object is still created, only garbage collection is lost.
            self.logger.warning(
                f"Failed to set owner reference on {step.kind} {step.resource_name}: {e}"
            )

    async def _write(self, action: Action, step: ResourceStep, body: Any = None) -> bool:
        sensor_state = self.sensor.on_resource_sync_start(
            self.instance_name, step.resource_name, self.namespace, step.kind
        )
        success = True
        error = None
        try:
            if action is Action.CREATE:
                done = await self.control_plane.create(step.kind, self.namespace, body)
                if done:
                    self.logger.info(f"Created {step.kind} {step.resource_name}")
                else:
                    self.logger.debug(f"{step.kind} {step.resource_name} already exists")
            elif action is Action.UPDATE:
                await self.control_plane.update(step.kind, self.namespace, body)
                self.logger.info(f"Updated {step.kind} {step.resource_name}")
                done = True
            else:
                done = await self.control_plane.delete(
                    step.kind, self.namespace, step.resource_name
                )
                self.logger.info(f"Deleted {step.kind} {step.resource_name}")
            return done
        except Exception as e:
            success = False
            error = e
            raise
        finally:
            self.sensor.on_resource_sync_complete(
                self.instance_name,
                step.resource_name,
                self.namespace,
                step.kind,
                sensor_state,
                action.value,
                success,
                error,
            )
