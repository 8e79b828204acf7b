from typing import List, Optional
from argonaut.types.base import BaseModel
from argonaut.types.models.env_var import EnvVar
from argonaut.types.models.resource_requirements import ResourceRequirements
from argonaut.types.models.sharding import ShardingSpec


class ComponentSpec(BaseModel):
    """Settings shared by every resource family."""

    enabled: Optional[bool]
    image: Optional[str]
    version: Optional[str]
    resources: Optional[ResourceRequirements]
    env: Optional[List[EnvVar]]

    def is_enabled(self, default: bool = True) -> bool:
        """Tri-state switch: unset falls back to the family default."""
        enabled = self.get("enabled")
        return default if enabled is None else bool(enabled)

    def is_remote(self) -> bool:
        return bool(self.get("remote"))

    def is_managed(self, default: bool = True) -> bool:
        """Enabled and not delegated to an external endpoint."""
        return self.is_enabled(default) and not self.is_remote()


class ControllerSpec(ComponentSpec):
    sharding: Optional[ShardingSpec]


class RedisSpec(ComponentSpec):
    remote: Optional[str]


class HASpec(ComponentSpec):
    """Redis high availability mode, disabled unless requested."""

    def is_enabled(self, default: bool = False) -> bool:
        return super().is_enabled(default)


class RepoSpec(ComponentSpec):
    remote: Optional[str]
    replicas: Optional[int]


class HPASpec(BaseModel):
    min_replicas: Optional[int]
    max_replicas: int
    target_cpu_utilization_percentage: Optional[int]


class AutoscaleSpec(BaseModel):
    enabled: bool
    hpa: Optional[HPASpec]


class ServerSpec(ComponentSpec):
    replicas: Optional[int]
    autoscale: Optional[AutoscaleSpec]

    def autoscale_enabled(self) -> bool:
        return bool(self.autoscale and self.autoscale.enabled)
