from marshmallow import fields, EXCLUDE
from argonaut.types.base import BaseSchema
from argonaut.types.models.component import (
    ControllerSpec,
    RedisSpec,
    HASpec,
    RepoSpec,
    ServerSpec,
    AutoscaleSpec,
    HPASpec,
)
from argonaut.types.schemas.env_var import EnvVarSchema
from argonaut.types.schemas.resource_requirements import ResourceRequirementsSchema
from argonaut.types.schemas.sharding import ShardingSpecSchema


class ComponentSpecSchema(BaseSchema):
    enabled = fields.Bool(data_key="enabled", allow_none=True, load_default=None)
    image = fields.Str(data_key="image", allow_none=True, load_default=None)
    version = fields.Str(data_key="version", allow_none=True, load_default=None)
    resources = fields.Nested(
        ResourceRequirementsSchema(unknown=EXCLUDE),
        data_key="resources",
        allow_none=True,
        load_default=None,
    )
    env = fields.List(
        fields.Nested(EnvVarSchema()), data_key="env", allow_none=True, load_default=None
    )


class ControllerSpecSchema(ComponentSpecSchema):
    __model__ = ControllerSpec

    sharding = fields.Nested(
        ShardingSpecSchema(),
        data_key="sharding",
        allow_none=True,
        load_default=lambda: ShardingSpecSchema().load({}),
    )


class RedisSpecSchema(ComponentSpecSchema):
    __model__ = RedisSpec

    remote = fields.Str(data_key="remote", allow_none=True, load_default=None)


class HASpecSchema(ComponentSpecSchema):
    __model__ = HASpec


class RepoSpecSchema(ComponentSpecSchema):
    __model__ = RepoSpec

    remote = fields.Str(data_key="remote", allow_none=True, load_default=None)
    replicas = fields.Int(data_key="replicas", allow_none=True, load_default=None)


class HPASpecSchema(BaseSchema):
    __model__ = HPASpec

    min_replicas = fields.Int(data_key="minReplicas", allow_none=True, load_default=None)
    max_replicas = fields.Int(data_key="maxReplicas", required=True)
    target_cpu_utilization_percentage = fields.Int(
        data_key="targetCPUUtilizationPercentage", allow_none=True, load_default=None
    )


class AutoscaleSpecSchema(BaseSchema):
    __model__ = AutoscaleSpec

    enabled = fields.Bool(data_key="enabled", load_default=False)
    hpa = fields.Nested(HPASpecSchema(), data_key="hpa", allow_none=True, load_default=None)


class ServerSpecSchema(ComponentSpecSchema):
    __model__ = ServerSpec

    replicas = fields.Int(data_key="replicas", allow_none=True, load_default=None)
    autoscale = fields.Nested(
        AutoscaleSpecSchema(),
        data_key="autoscale",
        allow_none=True,
        load_default=None,
    )
