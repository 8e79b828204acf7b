"""Unit tests for the control plane accessor's error handling."""

import asyncio
import json
import aiohttp
import pytest
from unittest.mock import AsyncMock, Mock
from kubernetes_asyncio.client import ApiException, V1ObjectMeta, V1Secret, V1SecretList
from argonaut.reconcile.prober import ExistenceProber
from argonaut.reconcile.sharding import count_clusters, resolve_controller_replicas
from argonaut.resources.accessor import ControlPlane
from argonaut.types.schemas import ShardingSpecSchema
from argonaut.utils.errors import ConflictError, TransientAPIError

SELECTOR = "argocd.argoproj.io/secret-type=cluster"


def api_exception(status, reason):
    ex = ApiException(status=status, reason=reason)
    ex.body = json.dumps({"reason": reason})
    return ex


@pytest.fixture
def core_api():
    return Mock()


@pytest.fixture
def control_plane(core_api):
    control_plane = ControlPlane(api_client=Mock())
    control_plane._core_v1_api = core_api
    return control_plane


class TestControlPlane:
    @pytest.mark.asyncio
    async def test_not_found_reads_as_absent(self, control_plane, core_api):
        core_api.read_namespaced_config_map = AsyncMock(side_effect=api_exception(404, "NotFound"))
        assert await control_plane.get("ConfigMap", "argocd", "argocd-cm") is None

    @pytest.mark.asyncio
    async def test_already_exists_on_create(self, control_plane, core_api):
        core_api.create_namespaced_config_map = AsyncMock(side_effect=api_exception(409, "AlreadyExists"))
        assert await control_plane.create("ConfigMap", "argocd", Mock()) is False

    @pytest.mark.asyncio
    async def test_conflict_on_update(self, control_plane, core_api):
        core_api.replace_namespaced_config_map = AsyncMock(side_effect=api_exception(409, "Conflict"))
        with pytest.raises(ConflictError):
            await control_plane.update("ConfigMap", "argocd", Mock())

    @pytest.mark.asyncio
    async def test_list_items(self, control_plane, core_api):
        secret = V1Secret(metadata=V1ObjectMeta(name="cluster-0"))
        core_api.list_namespaced_secret = AsyncMock(return_value=V1SecretList(items=[secret]))
        assert await control_plane.list("Secret", "argocd", SELECTOR) == [secret]
        core_api.list_namespaced_secret.assert_awaited_once_with(
            namespace="argocd", label_selector=SELECTOR
        )

    @pytest.mark.asyncio
    async def test_disconnect_is_transient(self, control_plane, core_api):
        core_api.list_namespaced_secret = AsyncMock(side_effect=aiohttp.ServerDisconnectedError())
        with pytest.raises(TransientAPIError) as exc_info:
            await control_plane.list("Secret", "argocd", SELECTOR)
        assert isinstance(exc_info.value.__cause__, aiohttp.ServerDisconnectedError)

    @pytest.mark.asyncio
    async def test_client_timeout_is_transient(self, control_plane, core_api):
        core_api.read_namespaced_secret = AsyncMock(side_effect=asyncio.TimeoutError())
        with pytest.raises(TransientAPIError):
            await control_plane.get("Secret", "argocd", "argocd-repo-server-tls")

    def test_unsupported_kind(self, control_plane):
        with pytest.raises(ValueError):
            control_plane._method("read", "Ingress")


class TestInventoryTransportFailure:
    @pytest.mark.asyncio
    async def test_disconnect_falls_back_to_default_replicas(self, control_plane, core_api):
        core_api.list_namespaced_secret = AsyncMock(side_effect=aiohttp.ServerDisconnectedError())
        prober = ExistenceProber(control_plane)
        sharding = ShardingSpecSchema().load(
            {"dynamicScalingEnabled": True, "minShards": 2, "maxShards": 8, "clustersPerShard": 2}
        )

        assert await count_clusters(prober, "argocd", SELECTOR) is None
        assert await resolve_controller_replicas(prober, "argocd", sharding, 1, SELECTOR) == 1
