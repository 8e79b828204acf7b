from typing import Dict, List, Optional
from kubernetes_asyncio.client import (
    V1ConfigMapKeySelector,
    V1Container,
    V1ContainerPort,
    V1EnvVar,
    V1EnvVarSource,
    V1ObjectFieldSelector,
    V1ObjectMeta,
    V1ResourceRequirements,
    V1SecretKeySelector,
    V1SecretVolumeSource,
    V1ServicePort,
    V1Volume,
    V1VolumeMount,
)
from argonaut.common.models.labels import Labels
from argonaut.types.models.env_var import EnvVar
from argonaut.types.models.resource_requirements import ResourceRequirements
from argonaut.types.settings import Settings


class BaseResource:
    """Base resource model: identity of the owning instance and shared builders."""

    OPERATOR_NAME = "argonaut"

    conf: Settings = Settings()

    #: Set at operator startup
    control_plane = None
    sensor = None

    _name: str
    _namespace: str

    def __init__(self, name: str, namespace: str):
        self._name = name
        self._namespace = namespace

    @property
    def name(self) -> str:
        return self._name

    @property
    def namespace(self) -> str:
        return self._namespace

    def component_labels(self, resource_name: str, component: str) -> Labels:
        return Labels.generate_default_labels(resource_name, component, self.name)

    def prepare_metadata(
        self, resource_name: str, labels: Labels, annotations: Dict[str, str] = None
    ) -> V1ObjectMeta:
        return V1ObjectMeta(
            name=resource_name,
            namespace=self.namespace,
            labels=labels.as_dict(),
            annotations=annotations,
        )

    @classmethod
    def container_image(
        cls,
        image: Optional[str],
        version: Optional[str],
        default_image: str,
        default_version: str,
    ) -> str:
        """``image:version`` with defaults; digests are joined with ``@``."""
        image = image or default_image
        version = version or default_version
        if version.startswith("sha256:"):
            return f"{image}@{version}"
        return f"{image}:{version}"

    @classmethod
    def prepare_resource_requirements(
        cls, resources: Optional[ResourceRequirements]
    ) -> V1ResourceRequirements:
        if resources is None:
            return V1ResourceRequirements()
        return V1ResourceRequirements(
            requests=resources.get("requests"), limits=resources.get("limits")
        )

    @classmethod
    def prepare_env_var(cls, env: EnvVar) -> V1EnvVar:
        source = env.value_from
        if source is None:
            return V1EnvVar(name=env.name, value=env.value)
        if source.config_map_key_ref:
            ref = source.config_map_key_ref
            value_from = V1EnvVarSource(
                config_map_key_ref=V1ConfigMapKeySelector(
                    key=ref.key, name=ref.name, optional=ref.optional
                )
            )
        elif source.secret_key_ref:
            ref = source.secret_key_ref
            value_from = V1EnvVarSource(
                secret_key_ref=V1SecretKeySelector(
                    key=ref.key, name=ref.name, optional=ref.optional
                )
            )
        else:
            # Defaulted by the API server when omitted.
            value_from = V1EnvVarSource(
                field_ref=V1ObjectFieldSelector(
                    field_path=source.field_ref.field_path,
                    api_version=source.field_ref.api_version or "v1",
                )
            )
        return V1EnvVar(name=env.name, value_from=value_from)

    @classmethod
    def prepare_env(
        cls, base: Dict[str, str], extra: Optional[List[EnvVar]] = None
    ) -> List[V1EnvVar]:
        env = [V1EnvVar(name=k, value=v) for k, v in base.items()]
        env.extend(cls.prepare_env_var(item) for item in extra or [])
        return sorted(env, key=lambda e: e.name)

    @classmethod
    def prepare_container(
        cls,
        name: str,
        image: str,
        command: List[str],
        ports: Dict[str, int],
        env: List[V1EnvVar],
        resources: V1ResourceRequirements,
        volume_mounts: List[V1VolumeMount],
    ) -> V1Container:
        return V1Container(
            name=name,
            image=image,
            image_pull_policy="Always",
            command=command,
            ports=[
                V1ContainerPort(name=port_name, container_port=port, protocol="TCP")
                for port_name, port in ports.items()
            ],
            env=env,
            resources=resources,
            volume_mounts=volume_mounts,
        )

    @classmethod
    def prepare_tls_volume(cls, volume_name: str, secret_name: str) -> V1Volume:
        """Secret volume that tolerates the secret not existing yet."""
        return V1Volume(
            name=volume_name,
            secret=V1SecretVolumeSource(
                secret_name=secret_name, default_mode=420, optional=True
            ),
        )

    @classmethod
    def prepare_volume_mount(cls, volume_name: str, path: str) -> V1VolumeMount:
        return V1VolumeMount(name=volume_name, mount_path=path)

    @classmethod
    def prepare_service_ports(cls, ports: Dict[str, tuple]) -> List[V1ServicePort]:
        """``{name: (port, target_port)}`` to service ports."""
        return [
            V1ServicePort(name=name, port=port, target_port=target, protocol="TCP")
            for name, (port, target) in ports.items()
        ]
