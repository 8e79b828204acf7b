"""Unit tests for status reporting and the status update document."""

import pytest
from kubernetes_asyncio.client import (
    V1Deployment,
    V1DeploymentCondition,
    V1DeploymentSpec,
    V1DeploymentStatus,
    V1LabelSelector,
    V1ObjectMeta,
    V1PodTemplateSpec,
)
from argonaut.reconcile.prober import ExistenceProber
from argonaut.reconcile.status import overall_phase, reconcile_status, workload_health
from argonaut.types.models import StatusUpdate


def deployment(name, replicas=1, ready=None):
    return V1Deployment(
        metadata=V1ObjectMeta(name=name, namespace="argocd"),
        spec=V1DeploymentSpec(
            replicas=replicas,
            selector=V1LabelSelector(match_labels={"app": name}),
            template=V1PodTemplateSpec(),
        ),
        status=V1DeploymentStatus(ready_replicas=ready),
    )


class TestHealth:
    def test_absent_is_unknown(self):
        assert workload_health(None) == "Unknown"

    def test_ready_replicas(self):
        assert workload_health(deployment("a", replicas=2, ready=1)) == "Pending"
        assert workload_health(deployment("a", replicas=2, ready=2)) == "Running"
        assert workload_health(deployment("a", replicas=None, ready=None)) == "Pending"

    def test_stalled_deployment_is_failed(self):
        workload = deployment("a", replicas=1, ready=0)
        workload.status.conditions = [
            V1DeploymentCondition(type="Progressing", status="False", reason="ProgressDeadlineExceeded")
        ]
        assert workload_health(workload) == "Failed"

    def test_phase_ignores_unmanaged_families(self):
        health = {"server": "Running", "redis": "Unknown"}
        assert overall_phase(health, {"server": True, "redis": False}) == "Available"
        assert overall_phase(health, {"server": True, "redis": True}) == "Pending"

    @pytest.mark.asyncio
    async def test_only_changed_values_are_written(self, control_plane):
        control_plane.seed("Deployment", deployment("argocd-server", ready=1))
        workloads = {
            "server": (True, ("Deployment", "argocd-server")),
            "redis": (False, ("Deployment", "argocd-redis")),
        }
        status = StatusUpdate({"server": "Running", "phase": "Pending"})

        await reconcile_status(ExistenceProber(control_plane), "argocd", workloads, status)

        assert status.as_patch() == {"redis": "Unknown", "phase": "Available"}


class TestStatusUpdate:
    def test_empty(self):
        assert StatusUpdate({"phase": "Available"}).set("phase", "Available").is_empty()

    def test_checksums_are_nested(self):
        update = StatusUpdate({"checksums": {"redis-tls": "abc"}})
        update.set_checksum("repo-tls", "def").set("phase", "Pending")
        assert update.as_patch() == {"phase": "Pending", "checksums": {"repo-tls": "def"}}
        assert update.fields() == ["phase", "checksums"]
        assert update.current_checksums == {"redis-tls": "abc"}

    def test_clear_only_present_checksums(self):
        update = StatusUpdate({"checksums": {"redis-tls": "abc"}})
        update.clear_checksum("repo-tls")
        assert update.is_empty()
        update.clear_checksum("redis-tls")
        assert update.as_patch() == {"checksums": {"redis-tls": None}}
