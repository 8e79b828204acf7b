from typing import Any, Dict, List, Optional, Tuple
from kubernetes_asyncio.client import (
    ApiClient,
    ApiException,
    AppsV1Api,
    AutoscalingV2Api,
    CoreV1Api,
    V1DeleteOptions,
)
from argonaut.utils.errors import (
    TRANSPORT_ERRORS,
    already_exists_error,
    classify_api_exception,
    classify_transport_error,
    not_found_error,
)

#: kind -> (api attribute, method suffix)
KINDS: Dict[str, Tuple[str, str]] = {
    "Deployment": ("apps_v1_api", "deployment"),
    "StatefulSet": ("apps_v1_api", "stateful_set"),
    "Service": ("core_v1_api", "service"),
    "ConfigMap": ("core_v1_api", "config_map"),
    "Secret": ("core_v1_api", "secret"),
    "HorizontalPodAutoscaler": ("autoscaling_v2_api", "horizontal_pod_autoscaler"),
}


class ControlPlane:
    """Typed access to namespaced objects of the kinds the operator manages.

    Not-found on read is reported as ``None``, already-exists on create and
    not-found on delete are tolerated. Everything else, transport failures
    included, is raised as ``ConflictError`` or ``TransientAPIError``.
    """

    _api_client: ApiClient
    _apps_v1_api: AppsV1Api = None
    _core_v1_api: CoreV1Api = None
    _autoscaling_v2_api: AutoscalingV2Api = None

    def __init__(self, api_client: ApiClient = None):
        self._api_client = api_client

    @property
    def api_client(self) -> ApiClient:
        if self._api_client is None:
            self._api_client = ApiClient()
        return self._api_client

    @property
    def apps_v1_api(self) -> AppsV1Api:
        if self._apps_v1_api is None:
            self._apps_v1_api = AppsV1Api(self.api_client)
        return self._apps_v1_api

    @property
    def core_v1_api(self) -> CoreV1Api:
        if self._core_v1_api is None:
            self._core_v1_api = CoreV1Api(self.api_client)
        return self._core_v1_api

    @property
    def autoscaling_v2_api(self) -> AutoscalingV2Api:
        if self._autoscaling_v2_api is None:
            self._autoscaling_v2_api = AutoscalingV2Api(self.api_client)
        return self._autoscaling_v2_api

    def _method(self, verb: str, kind: str):
        try:
            api_attr, suffix = KINDS[kind]
        except KeyError:
            raise ValueError(f"Unsupported kind: {kind}")
        return getattr(getattr(self, api_attr), f"{verb}_namespaced_{suffix}")

    async def _call(self, verb: str, kind: str, **kwargs) -> Any:
        """Invoke one API method. Transport failures surface as TransientAPIError."""
        try:
            return await self._method(verb, kind)(**kwargs)
        except TRANSPORT_ERRORS as ex:
            raise classify_transport_error(ex) from ex

    async def get(self, kind: str, namespace: str, name: str) -> Optional[Any]:
        """Retrieve the latest state of an object, ``None`` when absent."""
        try:
            return await self._call("read", kind, name=name, namespace=namespace)
        except ApiException as ex:
            if not_found_error(ex):
                return None
            raise classify_api_exception(ex) from ex

    async def list(
        self, kind: str, namespace: str, label_selector: str = None
    ) -> List[Any]:
        try:
            result = await self._call(
                "list", kind, namespace=namespace, label_selector=label_selector
            )
        except ApiException as ex:
            raise classify_api_exception(ex) from ex
        return list(result.items or [])

    async def create(self, kind: str, namespace: str, body: Any) -> bool:
        """Create an object. Returns False if it already existed."""
        try:
            await self._call("create", kind, namespace=namespace, body=body)
        except ApiException as ex:
            if already_exists_error(ex):
                return False
            raise classify_api_exception(ex) from ex
        return True

    async def update(self, kind: str, namespace: str, body: Any) -> None:
        """Replace an object. The body carries the resourceVersion it was read at."""
        try:
            await self._call(
                "replace", kind, name=body.metadata.name, namespace=namespace, body=body
            )
        except ApiException as ex:
            raise classify_api_exception(ex) from ex

    async def delete(
        self, kind: str, namespace: str, name: str, propagation_policy: str = "Foreground"
    ) -> bool:
        """Delete an object. Returns False if it was already gone."""
        try:
            await self._call(
                "delete",
                kind,
                name=name,
                namespace=namespace,
                body=V1DeleteOptions(propagation_policy=propagation_policy),
            )
        except ApiException as ex:
            if not_found_error(ex):
                return False
            raise classify_api_exception(ex) from ex
        return True
