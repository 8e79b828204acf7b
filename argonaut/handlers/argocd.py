import kopf
from logging import Logger
from marshmallow import ValidationError
from argonaut.reconcile.reconciler import Reconciler
from argonaut.resources.accessor import ControlPlane
from argonaut.resources.argocd import ArgoCD
from argonaut.types.models import ArgoCDSpec, StatusUpdate
from argonaut.types.schemas import ArgoCDSpecSchema
from argonaut.types.settings import Settings
from argonaut.utils.errors import convert_reconcile_error
from argonaut.utils.helpers import upsert_condition

ARGOCD_KIND = ArgoCD.KIND


def get_sensor():
    """Get sensor from ArgoCD class."""
    return getattr(ArgoCD, "sensor", None)


def get_control_plane() -> ControlPlane:
    control_plane = getattr(ArgoCD, "control_plane", None)
    if control_plane is None:
        control_plane = ControlPlane()
        ArgoCD.control_plane = control_plane
    return control_plane


def on_error(error, meta, status, status_update: StatusUpdate):
    """Record a failed pass as conditions on the status update."""
    gen = meta.get("generation", 0)
    conds = (status or {}).get("conditions", [])
    conds = upsert_condition(
        conds,
        {
            "type": "Progressing",
            "status": "False",
            "reason": error.__class__.__name__,
            "message": str(error) or "Reconcile failed; see events/logs",
            "observedGeneration": gen,
        },
    )
    conds = upsert_condition(
        conds,
        {
            "type": "Ready",
            "status": "False",
            "reason": "Error",
            "message": "ArgoCD instance not ready",
            "observedGeneration": gen,
        },
    )
    status_update.set("conditions", conds)


def on_success(meta, status, status_update: StatusUpdate):
    gen = meta.get("generation", 0)
    conds = (status or {}).get("conditions", [])
    conds = upsert_condition(
        conds,
        {
            "type": "Progressing",
            "status": "False",
            "reason": "Reconciled",
            "message": "All managed resources converged",
            "observedGeneration": gen,
        },
    )
    conds = upsert_condition(
        conds,
        {
            "type": "Ready",
            "status": "True",
            "reason": "Reconciled",
            "message": "ArgoCD instance reconciled",
            "observedGeneration": gen,
        },
    )
    status_update.set("conditions", conds)
    status_update.set("observedGeneration", gen)


def apply_status(name, namespace, patch, status_update: StatusUpdate):
    if status_update.is_empty():
        return
    patch.status.update(status_update.as_patch())
    sensor = get_sensor()
    if sensor:
        sensor.on_status_update(name, namespace, status_update.fields())


async def reconcile(
    name,
    namespace,
    spec,
    meta,
    status,
    patch,
    body,
    logger: Logger,
    trigger_source: str = "manual",
    **kwargs,
):
    """Run one reconciliation pass over the ArgoCD instance."""
    sensor = get_sensor()
    conf: Settings = ArgoCD.conf
    generation = meta.get("generation", 0)
    sensor_state = None
    if sensor:
        sensor_state = sensor.on_reconcile_start(name, namespace, generation, trigger_source)

    success = True
    error = None
    status_update = StatusUpdate(status)
    try:
        try:
            spec_model: ArgoCDSpec = ArgoCDSpecSchema().load(spec or {})
        except ValidationError as e:
            raise kopf.PermanentError(f"Invalid {ARGOCD_KIND} spec: {e.messages}") from e

        argocd = ArgoCD.from_spec(name, namespace, spec_model, body=body, logger=logger)
        logger.debug(f"Reconciling {ARGOCD_KIND}/{name} in {namespace} namespace.")
        await Reconciler(get_control_plane(), argocd, sensor, logger).run(status_update)
        on_success(meta, status, status_update)
        logger.debug(f"Reconciled {ARGOCD_KIND}/{name} in {namespace} namespace.")
    except kopf.PermanentError as e:
        success = False
        error = e
        logger.error(f"{e}")
        on_error(e, meta, status, status_update)
        raise
    except Exception as e:
        success = False
        error = e
        logger.error(f"Reconciliation of {ARGOCD_KIND}/{name} failed: {e}")
        logger.exception(e)
        on_error(e, meta, status, status_update)
        raise convert_reconcile_error(
            e, conf.conflict_retry_delay_seconds, conf.transient_retry_delay_seconds
        ) from e
    finally:
        # Whatever the pass gathered is written, committed checksums included.
        apply_status(name, namespace, patch, status_update)
        if sensor:
            sensor.on_reconcile_complete(name, namespace, sensor_state, success, error)


@kopf.on.resume(kind=ARGOCD_KIND)
@kopf.on.create(kind=ARGOCD_KIND)
async def on_create(
    name, namespace, spec, meta, status, patch, body, reason, logger: Logger, **kwargs
):
    """Converges a new or resumed ArgoCD instance."""
    await reconcile(
        name,
        namespace,
        spec,
        meta,
        status,
        patch,
        body,
        logger,
        trigger_source=str(getattr(reason, "value", reason) or "create"),
    )


@kopf.on.update(kind=ARGOCD_KIND, field="spec")
async def on_spec_update(
    name, namespace, spec, meta, status, patch, body, logger: Logger, **kwargs
):
    """Converges an ArgoCD instance after its spec changed."""
    await reconcile(
        name, namespace, spec, meta, status, patch, body, logger, trigger_source="update"
    )


@kopf.timer(
    kind=ARGOCD_KIND,
    initial_delay=5.0,
    interval=Settings.resync_interval_seconds,
    backoff=10.0,
)
async def periodic_reconciliation(
    name, namespace, spec, meta, status, patch, body, logger: Logger, **kwargs
):
    """Periodic resync, picks up drift and TLS content changes."""
    await reconcile(
        name, namespace, spec, meta, status, patch, body, logger, trigger_source="timer"
    )


@kopf.on.delete(kind=ARGOCD_KIND, optional=True)
async def on_delete(name, namespace, logger: Logger, **kwargs):
    """Managed objects carry owner references and are garbage collected."""
    logger.info(f"{ARGOCD_KIND}/{name} in {namespace} deleted, owned resources are garbage collected.")
