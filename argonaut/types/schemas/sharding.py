from marshmallow import fields
from argonaut.types.base import BaseSchema
from argonaut.types.models.sharding import ShardingSpec


class ShardingSpecSchema(BaseSchema):
    """Application controller sharding. Bounds are clamped, never rejected."""

    __model__ = ShardingSpec

    enabled = fields.Bool(data_key="enabled", allow_none=True, load_default=None)
    replicas = fields.Int(data_key="replicas", allow_none=True, load_default=None)
    dynamic_scaling_enabled = fields.Bool(
        data_key="dynamicScalingEnabled", allow_none=True, load_default=None
    )
    min_shards = fields.Int(data_key="minShards", allow_none=True, load_default=None)
    max_shards = fields.Int(data_key="maxShards", allow_none=True, load_default=None)
    clusters_per_shard = fields.Int(
        data_key="clustersPerShard", allow_none=True, load_default=None
    )
