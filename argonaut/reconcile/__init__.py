from argonaut.reconcile.fields import FieldGroup, DiffResult, update_if_changed
from argonaut.reconcile.metadata import preserve_metadata
from argonaut.reconcile.prober import ExistenceProber
from argonaut.reconcile.plan import Plan, PassContext, ResourceStep, ComputeStep, PlanError
from argonaut.reconcile.lifecycle import Action, LifecycleController
from argonaut.reconcile.rollout import (
    RolloutTrigger,
    TrackedSecret,
    ChecksumRolloutPropagator,
    tls_checksum,
)
from argonaut.reconcile.sharding import compute_replicas, resolve_controller_replicas

__all__ = [
    "FieldGroup",
    "DiffResult",
    "update_if_changed",
    "preserve_metadata",
    "ExistenceProber",
    "Plan",
    "PassContext",
    "ResourceStep",
    "ComputeStep",
    "PlanError",
    "Action",
    "LifecycleController",
    "RolloutTrigger",
    "TrackedSecret",
    "ChecksumRolloutPropagator",
    "tls_checksum",
    "compute_replicas",
    "resolve_controller_replicas",
]
