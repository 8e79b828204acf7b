from typing import Optional
from argonaut.types.base import BaseModel


class ShardingSpec(BaseModel):
    """Application controller sharding configuration."""

    enabled: Optional[bool]
    replicas: Optional[int]
    dynamic_scaling_enabled: Optional[bool]
    min_shards: Optional[int]
    max_shards: Optional[int]
    clusters_per_shard: Optional[int]
