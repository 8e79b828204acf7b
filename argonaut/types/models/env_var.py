from typing import Optional
from argonaut.types.base import BaseModel


class ConfigMapKeySelector(BaseModel):
    key: str
    name: str
    optional: Optional[bool]


class SecretKeySelector(BaseModel):
    key: str
    name: str
    optional: Optional[bool]


class ObjectFieldSelector(BaseModel):
    field_path: str
    api_version: Optional[str]


class EnvVarSource(BaseModel):
    config_map_key_ref: Optional[ConfigMapKeySelector]
    secret_key_ref: Optional[SecretKeySelector]
    field_ref: Optional[ObjectFieldSelector]


class EnvVar(BaseModel):
    name: str
    value: Optional[str]
    value_from: Optional[EnvVarSource]
