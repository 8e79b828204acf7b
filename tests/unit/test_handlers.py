"""Unit tests for the ArgoCD kopf handlers."""

import kopf
import pytest
from types import SimpleNamespace
from argonaut.handlers import argocd as handlers
from argonaut.resources.argocd import ArgoCD
from argonaut.sensors.base import OperatorSensor
from argonaut.utils.errors import ConflictError, TransientAPIError
from tests.unit.support import tls_secret

NS = "argocd"


class RecordingSensor(OperatorSensor):
    def __init__(self):
        self.completed = []
        self.status_fields = []

    def on_reconcile_start(self, instance_name, namespace, generation, trigger_source):
        return {"trigger_source": trigger_source}

    def on_reconcile_complete(self, instance_name, namespace, state, success, error=None):
        self.completed.append((state["trigger_source"], success, error.__class__.__name__ if error else None))

    def on_status_update(self, instance_name, namespace, update_fields):
        self.status_fields.append(sorted(update_fields))


@pytest.fixture
def sensor(monkeypatch, control_plane):
    sensor = RecordingSensor()
    monkeypatch.setattr(ArgoCD, "control_plane", control_plane)
    monkeypatch.setattr(ArgoCD, "sensor", sensor)
    return sensor


async def reconcile(logger, spec=None, status=None, generation=1, trigger_source="manual"):
    patch = SimpleNamespace(status={})
    body = {
        "apiVersion": "argoproj.io/v1beta1",
        "kind": "ArgoCD",
        "metadata": {"name": "argocd", "namespace": NS, "uid": "0a1b2c3d", "generation": generation},
        "spec": spec or {},
    }
    await handlers.reconcile(
        "argocd",
        NS,
        spec or {},
        body["metadata"],
        status or {},
        patch,
        body,
        logger,
        trigger_source=trigger_source,
    )
    return patch


def condition(patch, type_):
    return next(c for c in patch.status["conditions"] if c["type"] == type_)


class TestReconcileHandler:
    @pytest.mark.asyncio
    async def test_success_marks_ready(self, control_plane, sensor, logger):
        patch = await reconcile(logger, generation=3, trigger_source="create")

        assert condition(patch, "Ready")["status"] == "True"
        assert patch.status["observedGeneration"] == 3
        assert patch.status["phase"] == "Pending"
        assert control_plane.stored("Deployment", NS, "argocd-server") is not None
        assert sensor.completed == [("create", True, None)]

    @pytest.mark.asyncio
    async def test_unchanged_status_is_not_written(self, control_plane, sensor, logger):
        first = await reconcile(logger)
        second = await reconcile(logger, status=first.status)
        assert second.status == {}
        assert len(sensor.status_fields) == 1

    @pytest.mark.asyncio
    async def test_conflict_becomes_quick_retry(self, control_plane, sensor, logger):
        await reconcile(logger)
        control_plane.fail_on[("update", "ConfigMap", "argocd-cm")] = ConflictError("stale")

        with pytest.raises(kopf.TemporaryError) as exc_info:
            await reconcile(logger, spec={"extraConfig": {"a": "b"}})

        assert exc_info.value.delay == ArgoCD.conf.conflict_retry_delay_seconds
        assert sensor.completed[-1] == ("manual", False, "ConflictError")

    @pytest.mark.asyncio
    async def test_transient_failure_keeps_partial_status(self, control_plane, sensor, logger):
        control_plane.seed("Secret", tls_secret("argocd-repo-server-tls", NS, "foo", "bar"))
        control_plane.fail_on[("update", "StatefulSet", "argocd-application-controller")] = (
            TransientAPIError("unavailable", 503)
        )

        with pytest.raises(kopf.TemporaryError) as exc_info:
            patch = SimpleNamespace(status={})
            await handlers.reconcile(
                "argocd", NS, {}, {"generation": 1}, {}, patch, {"metadata": {}}, logger
            )

        assert exc_info.value.delay == ArgoCD.conf.transient_retry_delay_seconds
        assert condition(patch, "Ready")["status"] == "False"
        assert condition(patch, "Progressing")["reason"] == "TransientAPIError"
        assert "checksums" not in patch.status

    @pytest.mark.asyncio
    async def test_invalid_spec_is_permanent(self, control_plane, sensor, logger):
        spec = {"server": {"autoscale": {"enabled": True, "hpa": {"minReplicas": 1}}}}

        with pytest.raises(kopf.PermanentError):
            await reconcile(logger, spec=spec)

        assert control_plane.writes == []
        assert sensor.completed == [("manual", False, "PermanentError")]


class TestHandlers:
    @pytest.mark.asyncio
    async def test_delete_only_logs(self, control_plane, sensor, logger):
        await handlers.on_delete("argocd", NS, logger)
        assert control_plane.writes == []

    @pytest.mark.asyncio
    async def test_resume_reports_reason(self, control_plane, sensor, logger):
        patch = SimpleNamespace(status={})
        await handlers.on_create(
            "argocd",
            NS,
            {},
            {"generation": 1},
            {},
            patch,
            {"metadata": {}},
            kopf.Reason.RESUME,
            logger,
        )
        assert sensor.completed == [("resume", True, None)]
