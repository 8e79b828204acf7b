"""Content-addressed rollout propagation.

When the content of a tracked secret changes, every dependent workload is
rolled exactly once for that change: its pod template gets a fresh value for
a dedicated label (or the workload is recreated). The checksum of the secret
content is handed back for commit only after every trigger succeeded, so a
failed pass retriggers the whole set next time.
"""
import base64
import hashlib
import logging
from typing import Dict, Iterable, List, Optional, Tuple
from kubernetes_asyncio.client import V1ObjectMeta
from argonaut.reconcile.prober import ExistenceProber
from argonaut.resources.accessor import ControlPlane
from argonaut.sensors.base import OperatorSensor
from argonaut.utils.helpers import now_nano

TLS_SECRET_TYPE = "kubernetes.io/tls"
TLS_CERT_KEY = "tls.crt"
TLS_PRIVATE_KEY_KEY = "tls.key"


class RolloutTrigger:
    """A dependent workload rolled when tracked content changes.

    Args:
        kind: Deployment or StatefulSet
        name: Workload name
        label: Pod template label key owned by this concern
        recreate: Delete the workload instead of restamping it
    """

    def __init__(self, kind: str, name: str, label: str, recreate: bool = False):
        self.kind = kind
        self.name = name
        self.label = label
        self.recreate = recreate

    def __repr__(self) -> str:
        return f"RolloutTrigger<{self.kind}/{self.name} {self.label}>"


class TrackedSecret:
    """One tracked secret, the status key its checksum lives under and its dependents."""

    def __init__(
        self,
        status_key: str,
        secret_name: str,
        triggers: Iterable[RolloutTrigger],
        enabled: bool = True,
    ):
        self.status_key = status_key
        self.secret_name = secret_name
        self.triggers = list(triggers)
        self.enabled = enabled

    def __repr__(self) -> str:
        return f"TrackedSecret<{self.status_key} {self.secret_name}>"


def tls_checksum(data: Dict[str, str]) -> Optional[str]:
    """sha256 hex digest of certificate followed by key, ``None`` if either is missing.

    ``data`` holds base64 values as returned by the API.
    """
    if not data:
        return None
    cert = data.get(TLS_CERT_KEY)
    key = data.get(TLS_PRIVATE_KEY_KEY)
    if cert is None or key is None:
        return None
    sha = hashlib.sha256()
    sha.update(base64.b64decode(cert))
    sha.update(base64.b64decode(key))
    return sha.hexdigest()


class ChecksumRolloutPropagator:
    def __init__(
        self,
        control_plane: ControlPlane,
        instance_name: str,
        namespace: str,
        sensor: OperatorSensor = None,
        logger: logging.Logger = None,
    ):
        self.control_plane = control_plane
        self.prober = ExistenceProber(control_plane)
        self.instance_name = instance_name
        self.namespace = namespace
        self.sensor = sensor or OperatorSensor()
        self.logger = logger or logging.getLogger(__name__)
        #: (kind, name) of workloads deleted for recreation in this pass
        self.recreated: List[Tuple[str, str]] = []

    async def secret_checksum(self, secret_name: str) -> Optional[str]:
        secret = await self.prober.probe("Secret", self.namespace, secret_name)
        if secret is None:
            self.logger.debug(f"TLS secret {secret_name} not found, nothing to track")
            return None
        if secret.type != TLS_SECRET_TYPE:
            self.logger.debug(f"Secret {secret_name} is not of type {TLS_SECRET_TYPE}, ignoring")
            return None
        return tls_checksum(secret.data)

    async def reconcile_content_change(
        self, tracked: TrackedSecret, current_checksum: Optional[str]
    ) -> Optional[str]:
        """Roll dependents if the secret content moved away from ``current_checksum``.

        Returns the new checksum to commit, or None when there is nothing to
        commit. Trigger failures propagate and no checksum is returned.
        """
        checksum = await self.secret_checksum(tracked.secret_name)
        if checksum is None or checksum == current_checksum:
            return None

        self.logger.info(
            f"Content of {tracked.secret_name} changed, rolling {len(tracked.triggers)} dependent workload(s)"
        )
        for trigger in tracked.triggers:
            await self.apply(trigger, tracked.status_key)
        return checksum

    async def apply(self, trigger: RolloutTrigger, status_key: str) -> bool:
        """Restamp or recreate one dependent. Absent workloads are skipped."""
        workload = await self.prober.probe(trigger.kind, self.namespace, trigger.name)
        if workload is None:
            self.logger.info(
                f"Unable to locate {trigger.kind} {trigger.name} to roll for {status_key}, skipping"
            )
            return False

        if trigger.recreate:
            await self.control_plane.delete(trigger.kind, self.namespace, trigger.name)
            self.recreated.append((trigger.kind, trigger.name))
            self.logger.info(f"Deleted {trigger.kind} {trigger.name} to pick up new {status_key} content")
        else:
            template = workload.spec.template
            if template.metadata is None:
                template.metadata = V1ObjectMeta()
            metadata = template.metadata
            labels = dict(metadata.labels or {})
            labels[trigger.label] = now_nano()
            metadata.labels = labels
            await self.control_plane.update(trigger.kind, self.namespace, workload)
            self.logger.info(f"Triggered rollout of {trigger.kind} {trigger.name}")

        self.sensor.on_rollout_triggered(
            self.instance_name, self.namespace, status_key, trigger.kind, trigger.name
        )
        return True
