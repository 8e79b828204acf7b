from .resource_requirements import ResourceRequirementsSchema
from .env_var import EnvVarSchema
from .sharding import ShardingSpecSchema
from .component import (
    ControllerSpecSchema,
    RedisSpecSchema,
    HASpecSchema,
    RepoSpecSchema,
    ServerSpecSchema,
    AutoscaleSpecSchema,
    HPASpecSchema,
)
from .argocd_spec import ArgoCDSpecSchema

__all__ = [
    "ResourceRequirementsSchema",
    "EnvVarSchema",
    "ShardingSpecSchema",
    "ControllerSpecSchema",
    "RedisSpecSchema",
    "HASpecSchema",
    "RepoSpecSchema",
    "ServerSpecSchema",
    "AutoscaleSpecSchema",
    "HPASpecSchema",
    "ArgoCDSpecSchema",
]
