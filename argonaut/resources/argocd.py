import logging
from typing import Dict, List, Optional, Tuple
from kubernetes_asyncio.client import (
    V1ConfigMap,
    V1Deployment,
    V1DeploymentSpec,
    V1LabelSelector,
    V1ObjectMeta,
    V1PodSpec,
    V1PodTemplateSpec,
    V1Service,
    V1ServiceSpec,
    V1StatefulSet,
    V1StatefulSetSpec,
    V2CrossVersionObjectReference,
    V2HorizontalPodAutoscaler,
    V2HorizontalPodAutoscalerSpec,
    V2MetricSpec,
    V2MetricTarget,
    V2ResourceMetricSource,
)
from argonaut.common.models.labels import Labels
from argonaut.reconcile.fields import FieldGroup
from argonaut.reconcile.plan import ComputeStep, PassContext, Plan, ResourceStep
from argonaut.reconcile.prober import ExistenceProber
from argonaut.reconcile.rollout import RolloutTrigger, TrackedSecret
from argonaut.reconcile.sharding import resolve_controller_replicas
from argonaut.resources.base import BaseResource
from argonaut.types.models.argocd_resources import ArgoCDResources
from argonaut.types.models.argocd_spec import ArgoCDSpec
from argonaut.types.models.argocd_status import REDIS_TLS_CHECKSUM, REPO_TLS_CHECKSUM
from argonaut.utils.helpers import image_upgraded_stamp

REDIS_PORT = 6379
REPO_SERVER_PORT = 8081
REPO_SERVER_METRICS_PORT = 8084
SERVER_PORT = 8080
SERVER_METRICS_PORT = 8083
CONTROLLER_METRICS_PORT = 8082

REDIS_HA_REPLICAS = 3

REDIS_TLS_VOLUME = "argocd-operator-redis-tls"
REPO_TLS_VOLUME = "argocd-repo-server-tls"
REDIS_TLS_PATH = "/app/config/redis/tls"
REPO_TLS_PATH = "/app/config/reposerver/tls"

CONTROLLER_REPLICAS = "controller-replicas"


def _stamp_image_upgraded(existing, desired) -> None:
    template = existing.spec.template
    if template.metadata is None:
        template.metadata = V1ObjectMeta()
    labels = dict(template.metadata.labels or {})
    labels[Labels.IMAGE_UPGRADED_LABEL] = image_upgraded_stamp()
    template.metadata.labels = labels


_CONTAINER = "spec.template.spec.containers[0]"

WORKLOAD_FIELDS = (
    FieldGroup("image", f"{_CONTAINER}.image", extra_action=_stamp_image_upgraded),
    FieldGroup("command", f"{_CONTAINER}.command"),
    FieldGroup("env", f"{_CONTAINER}.env"),
    FieldGroup("resources", f"{_CONTAINER}.resources"),
    FieldGroup("volumeMounts", f"{_CONTAINER}.volume_mounts"),
    FieldGroup("volumes", "spec.template.spec.volumes"),
    FieldGroup("nodeSelector", "spec.template.spec.node_selector"),
    FieldGroup("tolerations", "spec.template.spec.tolerations"),
    FieldGroup("serviceAccountName", "spec.template.spec.service_account_name"),
    FieldGroup("templateLabels", "spec.template.metadata.labels"),
    FieldGroup("replicas", "spec.replicas"),
    FieldGroup("labels", "metadata.labels"),
    FieldGroup("annotations", "metadata.annotations"),
)

DEPLOYMENT_FIELDS = WORKLOAD_FIELDS + (FieldGroup("selector", "spec.selector"),)

# The selector of a StatefulSet is immutable.
STATEFUL_SET_FIELDS = WORKLOAD_FIELDS

SERVICE_FIELDS = (
    FieldGroup("labels", "metadata.labels"),
    FieldGroup("annotations", "metadata.annotations"),
    FieldGroup("type", "spec.type"),
    FieldGroup("selector", "spec.selector"),
    FieldGroup("ports", "spec.ports"),
)

CONFIG_MAP_FIELDS = (
    FieldGroup("labels", "metadata.labels"),
    FieldGroup("annotations", "metadata.annotations"),
    FieldGroup("data", "data"),
)

HPA_FIELDS = (
    FieldGroup("labels", "metadata.labels"),
    FieldGroup("minReplicas", "spec.min_replicas"),
    FieldGroup("maxReplicas", "spec.max_replicas"),
    FieldGroup("metrics", "spec.metrics"),
    FieldGroup("scaleTargetRef", "spec.scale_target_ref"),
)


class ArgoCD(BaseResource):
    """Desired state of everything an ArgoCD instance runs."""

    KIND = "ArgoCD"
    GROUP_NAME = "argoproj.io"
    GROUP_VERSION = "v1beta1"
    PLURAL_NAME = "argocds"

    COMPONENT_CONTROLLER = "application-controller"
    COMPONENT_REDIS = "redis"
    COMPONENT_REPO = "repo-server"
    COMPONENT_SERVER = "server"

    spec: ArgoCDSpec
    body: Optional[Dict]
    logger: logging.Logger

    @classmethod
    def from_spec(
        cls,
        name: str,
        namespace: str,
        spec: ArgoCDSpec,
        body: Dict = None,
        logger: logging.Logger = None,
    ) -> "ArgoCD":
        argocd = ArgoCD(name, namespace)
        argocd.spec = spec
        argocd.body = body
        argocd.logger = logger or logging.getLogger(__name__)
        return argocd

    # ------------------------------------------------------------------
    # names and addresses
    # ------------------------------------------------------------------

    @property
    def controller_name(self) -> str:
        return ArgoCDResources.application_controller_name(self.name)

    @property
    def redis_name(self) -> str:
        return ArgoCDResources.redis_name(self.name)

    @property
    def redis_ha_name(self) -> str:
        return ArgoCDResources.redis_ha_name(self.name)

    @property
    def repo_server_name(self) -> str:
        return ArgoCDResources.repo_server_name(self.name)

    @property
    def server_name(self) -> str:
        return ArgoCDResources.server_name(self.name)

    @property
    def server_hpa_name(self) -> str:
        return ArgoCDResources.server_hpa_name(self.name)

    @property
    def redis_address(self) -> str:
        if self.spec.redis.is_remote():
            return self.spec.redis.remote
        service = ArgoCDResources.qualified_service_name(self.redis_name, self.namespace)
        return f"{service}:{REDIS_PORT}"

    @property
    def repo_server_address(self) -> str:
        if self.spec.repo.is_remote():
            return self.spec.repo.remote
        service = ArgoCDResources.qualified_service_name(self.repo_server_name, self.namespace)
        return f"{service}:{REPO_SERVER_PORT}"

    # ------------------------------------------------------------------
    # family switches
    # ------------------------------------------------------------------

    @property
    def redis_managed(self) -> bool:
        return self.spec.redis.is_managed()

    @property
    def redis_ha(self) -> bool:
        return self.redis_managed and self.spec.redis_ha_enabled()

    @property
    def repo_managed(self) -> bool:
        return self.spec.repo.is_managed()

    @property
    def server_enabled(self) -> bool:
        return self.spec.server.is_enabled()

    @property
    def controller_enabled(self) -> bool:
        return self.spec.controller.is_enabled()

    # ------------------------------------------------------------------
    # images
    # ------------------------------------------------------------------

    def argocd_image(self, component_image: str = None, component_version: str = None) -> str:
        return self.container_image(
            component_image or self.spec.image,
            component_version or self.spec.version,
            self.conf.default_argocd_image,
            self.conf.default_argocd_version,
        )

    @property
    def redis_image(self) -> str:
        return self.container_image(
            self.spec.redis.image,
            self.spec.redis.version,
            self.conf.default_redis_image,
            self.conf.default_redis_version,
        )

    # ------------------------------------------------------------------
    # desired state builders
    # ------------------------------------------------------------------

    def _tls_volumes(self):
        return [
            self.prepare_tls_volume(REDIS_TLS_VOLUME, ArgoCDResources.REDIS_TLS_SECRET_NAME),
            self.prepare_tls_volume(REPO_TLS_VOLUME, ArgoCDResources.REPO_TLS_SECRET_NAME),
        ]

    def _tls_volume_mounts(self):
        return [
            self.prepare_volume_mount(REDIS_TLS_VOLUME, REDIS_TLS_PATH),
            self.prepare_volume_mount(REPO_TLS_VOLUME, REPO_TLS_PATH),
        ]

    def _pod_template(self, labels: Labels, container, volumes) -> V1PodTemplateSpec:
        return V1PodTemplateSpec(
            metadata=V1ObjectMeta(labels=labels.selector().as_dict()),
            spec=V1PodSpec(containers=[container], volumes=volumes),
        )

    def _deployment(self, resource_name: str, labels: Labels, template, replicas) -> V1Deployment:
        return V1Deployment(
            api_version="apps/v1",
            kind="Deployment",
            metadata=self.prepare_metadata(resource_name, labels),
            spec=V1DeploymentSpec(
                replicas=replicas,
                selector=V1LabelSelector(match_labels=labels.selector().as_dict()),
                template=template,
            ),
        )

    def _stateful_set(self, resource_name: str, labels: Labels, template, replicas) -> V1StatefulSet:
        return V1StatefulSet(
            api_version="apps/v1",
            kind="StatefulSet",
            metadata=self.prepare_metadata(resource_name, labels),
            spec=V1StatefulSetSpec(
                replicas=replicas,
                service_name=resource_name,
                selector=V1LabelSelector(match_labels=labels.selector().as_dict()),
                template=template,
            ),
        )

    def _service(self, resource_name: str, labels: Labels, selector: Labels, ports) -> V1Service:
        return V1Service(
            api_version="v1",
            kind="Service",
            metadata=self.prepare_metadata(resource_name, labels),
            spec=V1ServiceSpec(
                type="ClusterIP",
                selector=selector.selector().as_dict(),
                ports=self.prepare_service_ports(ports),
            ),
        )

    def prepare_config_map(self) -> V1ConfigMap:
        labels = self.component_labels(ArgoCDResources.CONFIG_MAP_NAME, "config")
        data = {"application.instanceLabelKey": "app.kubernetes.io/instance"}
        data.update(self.spec.extra_config or {})
        return V1ConfigMap(
            api_version="v1",
            kind="ConfigMap",
            metadata=self.prepare_metadata(ArgoCDResources.CONFIG_MAP_NAME, labels),
            data=data,
        )

    def prepare_redis_service(self) -> V1Service:
        labels = self.component_labels(self.redis_name, self.COMPONENT_REDIS)
        target = self.redis_ha_name if self.redis_ha else self.redis_name
        selector = self.component_labels(target, self.COMPONENT_REDIS)
        return self._service(
            self.redis_name, labels, selector, {"tcp-redis": (REDIS_PORT, REDIS_PORT)}
        )

    def _redis_container(self, resources):
        return self.prepare_container(
            name="redis",
            image=self.redis_image,
            command=[
                "redis-server",
                "--protected-mode",
                "no",
                "--save",
                "",
                "--appendonly",
                "no",
            ],
            ports={"redis": REDIS_PORT},
            env=self.prepare_env({}, self.spec.redis.env),
            resources=self.prepare_resource_requirements(resources),
            volume_mounts=[self.prepare_volume_mount(REDIS_TLS_VOLUME, REDIS_TLS_PATH)],
        )

    def prepare_redis_deployment(self) -> V1Deployment:
        labels = self.component_labels(self.redis_name, self.COMPONENT_REDIS)
        container = self._redis_container(self.spec.redis.resources)
        volumes = [self.prepare_tls_volume(REDIS_TLS_VOLUME, ArgoCDResources.REDIS_TLS_SECRET_NAME)]
        return self._deployment(
            self.redis_name, labels, self._pod_template(labels, container, volumes), 1
        )

    def prepare_redis_ha_stateful_set(self) -> V1StatefulSet:
        labels = self.component_labels(self.redis_ha_name, self.COMPONENT_REDIS)
        container = self._redis_container(self.spec.ha.resources or self.spec.redis.resources)
        volumes = [self.prepare_tls_volume(REDIS_TLS_VOLUME, ArgoCDResources.REDIS_TLS_SECRET_NAME)]
        return self._stateful_set(
            self.redis_ha_name,
            labels,
            self._pod_template(labels, container, volumes),
            REDIS_HA_REPLICAS,
        )

    def prepare_repo_service(self) -> V1Service:
        labels = self.component_labels(self.repo_server_name, self.COMPONENT_REPO)
        return self._service(
            self.repo_server_name,
            labels,
            labels,
            {
                "server": (REPO_SERVER_PORT, REPO_SERVER_PORT),
                "metrics": (REPO_SERVER_METRICS_PORT, REPO_SERVER_METRICS_PORT),
            },
        )

    def prepare_repo_deployment(self) -> V1Deployment:
        repo = self.spec.repo
        labels = self.component_labels(self.repo_server_name, self.COMPONENT_REPO)
        container = self.prepare_container(
            name="argocd-repo-server",
            image=self.argocd_image(repo.image, repo.version),
            command=[
                "uid_entrypoint.sh",
                "argocd-repo-server",
                "--redis",
                self.redis_address,
            ],
            ports={"server": REPO_SERVER_PORT, "metrics": REPO_SERVER_METRICS_PORT},
            env=self.prepare_env({}, repo.env),
            resources=self.prepare_resource_requirements(repo.resources),
            volume_mounts=self._tls_volume_mounts(),
        )
        replicas = repo.replicas if repo.replicas is not None and repo.replicas >= 0 else None
        return self._deployment(
            self.repo_server_name,
            labels,
            self._pod_template(labels, container, self._tls_volumes()),
            replicas,
        )

    def prepare_server_service(self) -> V1Service:
        labels = self.component_labels(self.server_name, self.COMPONENT_SERVER)
        return self._service(
            self.server_name,
            labels,
            labels,
            {"http": (80, SERVER_PORT), "https": (443, SERVER_PORT)},
        )

    def prepare_server_deployment(self) -> V1Deployment:
        server = self.spec.server
        labels = self.component_labels(self.server_name, self.COMPONENT_SERVER)
        container = self.prepare_container(
            name="argocd-server",
            image=self.argocd_image(server.image, server.version),
            command=[
                "argocd-server",
                "--staticassets",
                "/shared/app",
                "--repo-server",
                self.repo_server_address,
                "--redis",
                self.redis_address,
            ],
            ports={"server": SERVER_PORT, "metrics": SERVER_METRICS_PORT},
            env=self.prepare_env({}, server.env),
            resources=self.prepare_resource_requirements(server.resources),
            volume_mounts=self._tls_volume_mounts(),
        )
        # Replica count belongs to the autoscaler while it is enabled.
        replicas = None if server.autoscale_enabled() else server.replicas
        return self._deployment(
            self.server_name,
            labels,
            self._pod_template(labels, container, self._tls_volumes()),
            replicas,
        )

    def prepare_server_hpa(self) -> V2HorizontalPodAutoscaler:
        hpa = self.spec.server.autoscale.hpa if self.spec.server.autoscale else None
        labels = self.component_labels(self.server_hpa_name, self.COMPONENT_SERVER)
        min_replicas = hpa.min_replicas if hpa and hpa.min_replicas is not None else 1
        max_replicas = hpa.max_replicas if hpa else 3
        cpu = hpa.target_cpu_utilization_percentage if hpa else None
        return V2HorizontalPodAutoscaler(
            api_version="autoscaling/v2",
            kind="HorizontalPodAutoscaler",
            metadata=self.prepare_metadata(self.server_hpa_name, labels),
            spec=V2HorizontalPodAutoscalerSpec(
                min_replicas=min_replicas,
                max_replicas=max(max_replicas, min_replicas),
                scale_target_ref=V2CrossVersionObjectReference(
                    api_version="apps/v1", kind="Deployment", name=self.server_name
                ),
                metrics=[
                    V2MetricSpec(
                        type="Resource",
                        resource=V2ResourceMetricSource(
                            name="cpu",
                            target=V2MetricTarget(
                                type="Utilization",
                                average_utilization=cpu if cpu is not None else 50,
                            ),
                        ),
                    )
                ],
            ),
        )

    def prepare_application_controller_stateful_set(self, replicas: int) -> V1StatefulSet:
        controller = self.spec.controller
        labels = self.component_labels(self.controller_name, self.COMPONENT_CONTROLLER)
        container = self.prepare_container(
            name="argocd-application-controller",
            image=self.argocd_image(controller.image, controller.version),
            command=[
                "argocd-application-controller",
                "--operation-processors",
                "10",
                "--redis",
                self.redis_address,
                "--repo-server",
                self.repo_server_address,
                "--status-processors",
                "20",
                "--kubectl-parallelism-limit",
                "10",
            ],
            ports={"metrics": CONTROLLER_METRICS_PORT},
            env=self.prepare_env(
                {"ARGOCD_CONTROLLER_REPLICAS": str(replicas)}, controller.env
            ),
            resources=self.prepare_resource_requirements(controller.resources),
            volume_mounts=self._tls_volume_mounts(),
        )
        return self._stateful_set(
            self.controller_name,
            labels,
            self._pod_template(labels, container, self._tls_volumes()),
            replicas,
        )

    # ------------------------------------------------------------------
    # reconciliation inputs
    # ------------------------------------------------------------------

    def plan(self, prober: ExistenceProber) -> Plan:
        """Ordered steps converging every managed object of this instance."""

        async def controller_replicas(context: PassContext) -> int:
            return await resolve_controller_replicas(
                prober,
                self.namespace,
                self.spec.controller.sharding,
                self.conf.controller_default_replicas,
                self.conf.cluster_secret_label_selector,
                self.logger,
            )

        return Plan(
            [
                ResourceStep(
                    "config-map",
                    "ConfigMap",
                    ArgoCDResources.CONFIG_MAP_NAME,
                    True,
                    lambda ctx: self.prepare_config_map(),
                    CONFIG_MAP_FIELDS,
                ),
                ResourceStep(
                    "redis-service",
                    "Service",
                    self.redis_name,
                    self.redis_managed,
                    lambda ctx: self.prepare_redis_service(),
                    SERVICE_FIELDS,
                ),
                ResourceStep(
                    "redis-ha",
                    "StatefulSet",
                    self.redis_ha_name,
                    self.redis_ha,
                    lambda ctx: self.prepare_redis_ha_stateful_set(),
                    STATEFUL_SET_FIELDS,
                    exclusive_with=("redis",),
                ),
                ResourceStep(
                    "redis",
                    "Deployment",
                    self.redis_name,
                    self.redis_managed and not self.redis_ha,
                    lambda ctx: self.prepare_redis_deployment(),
                    DEPLOYMENT_FIELDS,
                    exclusive_with=("redis-ha",),
                ),
                ResourceStep(
                    "repo-service",
                    "Service",
                    self.repo_server_name,
                    self.repo_managed,
                    lambda ctx: self.prepare_repo_service(),
                    SERVICE_FIELDS,
                ),
                ResourceStep(
                    "repo-server",
                    "Deployment",
                    self.repo_server_name,
                    self.repo_managed,
                    lambda ctx: self.prepare_repo_deployment(),
                    DEPLOYMENT_FIELDS,
                ),
                ResourceStep(
                    "server-service",
                    "Service",
                    self.server_name,
                    self.server_enabled,
                    lambda ctx: self.prepare_server_service(),
                    SERVICE_FIELDS,
                ),
                ResourceStep(
                    "server",
                    "Deployment",
                    self.server_name,
                    self.server_enabled,
                    lambda ctx: self.prepare_server_deployment(),
                    DEPLOYMENT_FIELDS,
                ),
                ResourceStep(
                    "server-hpa",
                    "HorizontalPodAutoscaler",
                    self.server_hpa_name,
                    self.server_enabled and self.spec.server.autoscale_enabled(),
                    lambda ctx: self.prepare_server_hpa(),
                    HPA_FIELDS,
                    after=("server",),
                ),
                ComputeStep(CONTROLLER_REPLICAS, controller_replicas),
                ResourceStep(
                    "application-controller",
                    "StatefulSet",
                    self.controller_name,
                    self.controller_enabled,
                    lambda ctx: self.prepare_application_controller_stateful_set(
                        ctx[CONTROLLER_REPLICAS]
                    ),
                    STATEFUL_SET_FIELDS,
                    after=(CONTROLLER_REPLICAS,),
                ),
            ]
        )

    def tracked_secrets(self) -> List[TrackedSecret]:
        """TLS secrets whose content changes roll dependent workloads."""
        redis_label = Labels.REDIS_TLS_CERT_CHANGED_LABEL
        if self.redis_ha:
            redis_workload = RolloutTrigger(
                "StatefulSet", self.redis_ha_name, redis_label, recreate=True
            )
        else:
            redis_workload = RolloutTrigger("Deployment", self.redis_name, redis_label)

        repo_label = Labels.REPO_TLS_CERT_CHANGED_LABEL
        return [
            TrackedSecret(
                REDIS_TLS_CHECKSUM,
                ArgoCDResources.REDIS_TLS_SECRET_NAME,
                [
                    redis_workload,
                    RolloutTrigger("Deployment", self.server_name, redis_label),
                    RolloutTrigger("Deployment", self.repo_server_name, redis_label),
                    RolloutTrigger("StatefulSet", self.controller_name, redis_label),
                ],
                enabled=self.redis_managed,
            ),
            TrackedSecret(
                REPO_TLS_CHECKSUM,
                ArgoCDResources.REPO_TLS_SECRET_NAME,
                [
                    RolloutTrigger("Deployment", self.server_name, repo_label),
                    RolloutTrigger("Deployment", self.repo_server_name, repo_label),
                    RolloutTrigger("StatefulSet", self.controller_name, repo_label),
                ],
                enabled=self.repo_managed,
            ),
        ]

    def status_workloads(self) -> Dict[str, Tuple[bool, Optional[Tuple[str, str]]]]:
        """Status field -> (managed, (kind, name)) of the workload reporting its health."""
        if self.redis_ha:
            redis = ("StatefulSet", self.redis_ha_name)
        else:
            redis = ("Deployment", self.redis_name)
        return {
            "applicationController": (
                self.controller_enabled,
                ("StatefulSet", self.controller_name),
            ),
            "redis": (self.redis_managed, redis),
            "repo": (self.repo_managed, ("Deployment", self.repo_server_name)),
            "server": (self.server_enabled, ("Deployment", self.server_name)),
        }
