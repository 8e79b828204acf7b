from marshmallow import fields
from argonaut.types.base import BaseSchema
from argonaut.types.models.argocd_spec import ArgoCDSpec
from argonaut.types.schemas.component import (
    ControllerSpecSchema,
    RedisSpecSchema,
    HASpecSchema,
    RepoSpecSchema,
    ServerSpecSchema,
)


class ArgoCDSpecSchema(BaseSchema):
    __model__ = ArgoCDSpec

    image = fields.Str(data_key="image", allow_none=True, load_default=None)
    version = fields.Str(data_key="version", allow_none=True, load_default=None)
    controller = fields.Nested(
        ControllerSpecSchema(),
        data_key="controller",
        load_default=lambda: ControllerSpecSchema().load({}),
    )
    redis = fields.Nested(
        RedisSpecSchema(),
        data_key="redis",
        load_default=lambda: RedisSpecSchema().load({}),
    )
    ha = fields.Nested(
        HASpecSchema(),
        data_key="ha",
        load_default=lambda: HASpecSchema().load({}),
    )
    repo = fields.Nested(
        RepoSpecSchema(),
        data_key="repo",
        load_default=lambda: RepoSpecSchema().load({}),
    )
    server = fields.Nested(
        ServerSpecSchema(),
        data_key="server",
        load_default=lambda: ServerSpecSchema().load({}),
    )
    extra_config = fields.Dict(
        keys=fields.Str(),
        values=fields.Str(),
        data_key="extraConfig",
        allow_none=True,
        load_default=None,
    )
