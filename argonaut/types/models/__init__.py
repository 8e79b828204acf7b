from .resource_requirements import ResourceRequirements
from .env_var import EnvVar
from .sharding import ShardingSpec
from .component import (
    ComponentSpec,
    ControllerSpec,
    RedisSpec,
    HASpec,
    RepoSpec,
    ServerSpec,
    AutoscaleSpec,
    HPASpec,
)
from .argocd_spec import ArgoCDSpec
from .argocd_resources import ArgoCDResources
from .argocd_status import StatusUpdate

__all__ = [
    "ResourceRequirements",
    "EnvVar",
    "ShardingSpec",
    "ComponentSpec",
    "ControllerSpec",
    "RedisSpec",
    "HASpec",
    "RepoSpec",
    "ServerSpec",
    "AutoscaleSpec",
    "HPASpec",
    "ArgoCDSpec",
    "ArgoCDResources",
    "StatusUpdate",
]
