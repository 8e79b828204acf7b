from typing import Any, Dict, Optional, Tuple
from argonaut.reconcile.prober import ExistenceProber
from argonaut.types.models.argocd_status import (
    HEALTH_FAILED,
    HEALTH_PENDING,
    HEALTH_RUNNING,
    HEALTH_UNKNOWN,
    PHASE_AVAILABLE,
    PHASE_PENDING,
    StatusUpdate,
)


PROGRESS_DEADLINE_EXCEEDED = "ProgressDeadlineExceeded"


def workload_health(workload: Optional[Any]) -> str:
    """Running once every desired replica is ready, Pending before that.

    A Deployment that gave up progressing reports Failed.
    """
    if workload is None:
        return HEALTH_UNKNOWN
    for cond in (workload.status.conditions if workload.status else None) or []:
        if cond.type == "Progressing" and cond.reason == PROGRESS_DEADLINE_EXCEEDED:
            return HEALTH_FAILED
    desired = workload.spec.replicas if workload.spec.replicas is not None else 1
    ready = (workload.status.ready_replicas if workload.status else None) or 0
    if ready >= desired:
        return HEALTH_RUNNING
    return HEALTH_PENDING


def overall_phase(health: Dict[str, str], managed: Dict[str, bool]) -> str:
    """Available when every managed family is running."""
    for family, is_managed in managed.items():
        if is_managed and health.get(family) != HEALTH_RUNNING:
            return PHASE_PENDING
    return PHASE_AVAILABLE


async def reconcile_status(
    prober: ExistenceProber,
    namespace: str,
    workloads: Dict[str, Tuple[bool, Optional[Tuple[str, str]]]],
    status: StatusUpdate,
) -> StatusUpdate:
    """Record per-family health and the overall phase into ``status``.

    ``workloads`` maps a status field to ``(managed, (kind, name))``. An
    unmanaged family reports Unknown without touching the control plane.
    """
    health: Dict[str, str] = {}
    managed: Dict[str, bool] = {}
    for field, (is_managed, target) in workloads.items():
        managed[field] = is_managed
        if not is_managed or target is None:
            health[field] = HEALTH_UNKNOWN
        else:
            kind, name = target
            health[field] = workload_health(await prober.probe(kind, namespace, name))
        status.set(field, health[field])
    status.set("phase", overall_phase(health, managed))
    return status
