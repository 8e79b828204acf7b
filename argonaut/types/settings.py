import os
from typing import Any
from argonaut.common.models.labels import Labels

_TRUE, _FALSE = {"True", "true", "yes", "1"}, {"False", "false", "no", "0"}


def _getenv(name: str, *default: Any) -> Any:
    try:
        v = os.environ[name]
        if v in _TRUE:
            return True
        elif v in _FALSE:
            return False
        else:
            return v
    except KeyError:
        pass
    if default:
        return default[0]
    raise KeyError(name)


# ------------------------------------------------
# ---- Defaults and environment variables ----
# ------------------------------------------------

#: Seconds between periodic resync passes of every ArgoCD instance
RESYNC_INTERVAL_SECONDS = float(_getenv("RESYNC_INTERVAL_SECONDS", 60.0))

#: Seconds to wait before rerunning a pass that hit a resourceVersion conflict
CONFLICT_RETRY_DELAY_SECONDS = float(_getenv("CONFLICT_RETRY_DELAY_SECONDS", 1.0))

#: Seconds to wait before rerunning a pass that hit any other API failure
TRANSIENT_RETRY_DELAY_SECONDS = float(_getenv("TRANSIENT_RETRY_DELAY_SECONDS", 30.0))

#: Application controller replicas when sharding does not decide otherwise
CONTROLLER_DEFAULT_REPLICAS = int(_getenv("CONTROLLER_DEFAULT_REPLICAS", 1))

#: Label selector identifying managed-cluster secrets (shard inventory)
CLUSTER_SECRET_LABEL_SELECTOR = _getenv(
    "CLUSTER_SECRET_LABEL_SELECTOR", f"{Labels.ARGOCD_SECRET_TYPE_LABEL}=cluster"
)

#: Maximum number of concurrent kopf workers
WORKER_LIMIT = int(_getenv("WORKER_LIMIT", 4))

#: Image used by Argo CD components when the instance does not set one
DEFAULT_ARGOCD_IMAGE = _getenv("DEFAULT_ARGOCD_IMAGE", "quay.io/argoproj/argocd")

#: Tag used by Argo CD components when the instance does not set one
DEFAULT_ARGOCD_VERSION = _getenv("DEFAULT_ARGOCD_VERSION", "v2.10.4")

#: Image used by Redis when the instance does not set one
DEFAULT_REDIS_IMAGE = _getenv("DEFAULT_REDIS_IMAGE", "redis")

#: Tag used by Redis when the instance does not set one
DEFAULT_REDIS_VERSION = _getenv("DEFAULT_REDIS_VERSION", "7.0.14-alpine")


class Settings:
    """Operator settings"""

    resync_interval_seconds: float = RESYNC_INTERVAL_SECONDS
    conflict_retry_delay_seconds: float = CONFLICT_RETRY_DELAY_SECONDS
    transient_retry_delay_seconds: float = TRANSIENT_RETRY_DELAY_SECONDS
    controller_default_replicas: int = CONTROLLER_DEFAULT_REPLICAS
    cluster_secret_label_selector: str = CLUSTER_SECRET_LABEL_SELECTOR
    worker_limit: int = WORKER_LIMIT
    default_argocd_image: str = DEFAULT_ARGOCD_IMAGE
    default_argocd_version: str = DEFAULT_ARGOCD_VERSION
    default_redis_image: str = DEFAULT_REDIS_IMAGE
    default_redis_version: str = DEFAULT_REDIS_VERSION

    def __init__(
        self,
        *args,
        resync_interval_seconds: float = None,
        conflict_retry_delay_seconds: float = None,
        transient_retry_delay_seconds: float = None,
        controller_default_replicas: int = None,
        cluster_secret_label_selector: str = None,
        worker_limit: int = None,
        default_argocd_image: str = None,
        default_argocd_version: str = None,
        default_redis_image: str = None,
        default_redis_version: str = None,
        **kwargs,
    ):
        if resync_interval_seconds is not None:
            self.resync_interval_seconds = resync_interval_seconds

        if conflict_retry_delay_seconds is not None:
            self.conflict_retry_delay_seconds = conflict_retry_delay_seconds

        if transient_retry_delay_seconds is not None:
            self.transient_retry_delay_seconds = transient_retry_delay_seconds

        if controller_default_replicas is not None:
            self.controller_default_replicas = controller_default_replicas

        if cluster_secret_label_selector is not None:
            self.cluster_secret_label_selector = cluster_secret_label_selector

        if worker_limit is not None:
            self.worker_limit = worker_limit

        if default_argocd_image is not None:
            self.default_argocd_image = default_argocd_image

        if default_argocd_version is not None:
            self.default_argocd_version = default_argocd_version

        if default_redis_image is not None:
            self.default_redis_image = default_redis_image

        if default_redis_version is not None:
            self.default_redis_version = default_redis_version
