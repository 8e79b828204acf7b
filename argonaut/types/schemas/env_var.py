from marshmallow import fields, validates_schema, ValidationError
from argonaut.types.base import BaseSchema
from argonaut.types.models.env_var import (
    ConfigMapKeySelector,
    SecretKeySelector,
    ObjectFieldSelector,
    EnvVarSource,
    EnvVar,
)


class ConfigMapKeySelectorSchema(BaseSchema):
    __model__ = ConfigMapKeySelector

    key = fields.Str(data_key="key", required=True, allow_none=False)
    name = fields.Str(data_key="name", required=True, allow_none=False)
    optional = fields.Bool(data_key="optional", allow_none=True, load_default=None)


class SecretKeySelectorSchema(BaseSchema):
    __model__ = SecretKeySelector

    key = fields.Str(data_key="key", required=True, allow_none=False)
    name = fields.Str(data_key="name", required=True, allow_none=False)
    optional = fields.Bool(data_key="optional", allow_none=True, load_default=None)


class ObjectFieldSelectorSchema(BaseSchema):
    __model__ = ObjectFieldSelector

    field_path = fields.Str(data_key="fieldPath", required=True, allow_none=False)
    api_version = fields.Str(data_key="apiVersion", allow_none=True, load_default=None)


class EnvVarSourceSchema(BaseSchema):
    """Schema for an environment variable source. Exactly one reference is allowed."""

    __model__ = EnvVarSource

    config_map_key_ref = fields.Nested(
        ConfigMapKeySelectorSchema(),
        data_key="configMapKeyRef",
        allow_none=True,
        load_default=None,
    )
    secret_key_ref = fields.Nested(
        SecretKeySelectorSchema(),
        data_key="secretKeyRef",
        allow_none=True,
        load_default=None,
    )
    field_ref = fields.Nested(
        ObjectFieldSelectorSchema(),
        data_key="fieldRef",
        allow_none=True,
        load_default=None,
    )

    @validates_schema
    def validate_single_reference(self, data, **kwargs):
        refs = [k for k in ("config_map_key_ref", "secret_key_ref", "field_ref") if data.get(k)]
        if len(refs) != 1:
            raise ValidationError(
                "valueFrom must set exactly one of configMapKeyRef, secretKeyRef or fieldRef"
            )


class EnvVarSchema(BaseSchema):
    __model__ = EnvVar

    name = fields.Str(data_key="name", required=True, allow_none=False)
    value = fields.Str(data_key="value", allow_none=True, load_default=None)
    value_from = fields.Nested(
        EnvVarSourceSchema(),
        data_key="valueFrom",
        allow_none=True,
        load_default=None,
    )

    @validates_schema
    def validate_value_or_source(self, data, **kwargs):
        if data.get("value") is not None and data.get("value_from") is not None:
            raise ValidationError("env entries cannot set both value and valueFrom")
