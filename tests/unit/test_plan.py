"""Unit tests for reconcile plan construction and ordering checks."""

import pytest
from argonaut.reconcile.plan import ComputeStep, Plan, PlanError, ResourceStep
from argonaut.reconcile.prober import ExistenceProber


def resource(name, after=(), exclusive_with=()):
    return ResourceStep(
        name,
        "ConfigMap",
        name,
        True,
        lambda ctx: None,
        (),
        exclusive_with=exclusive_with,
        after=after,
    )


async def nothing(ctx):
    return None


class TestPlan:
    def test_steps_keep_declared_order(self):
        plan = Plan([resource("a"), resource("b", after=("a",)), resource("c")])
        assert plan.names() == ["a", "b", "c"]
        assert len(plan) == 3
        assert plan["b"].after == ("a",)

    def test_duplicate_step_is_rejected(self):
        with pytest.raises(PlanError, match="Duplicate"):
            Plan([resource("a"), resource("a")])

    def test_unknown_reference_is_rejected(self):
        with pytest.raises(PlanError, match="unknown step 'missing'"):
            Plan([resource("a", after=("missing",))])

    def test_unknown_exclusive_reference_is_rejected(self):
        with pytest.raises(PlanError):
            Plan([resource("a", exclusive_with=("missing",))])

    def test_dependency_ordered_later_is_rejected(self):
        with pytest.raises(PlanError, match="must run after"):
            Plan([resource("b", after=("a",)), resource("a")])

    def test_exclusive_steps_may_reference_each_other(self):
        plan = Plan([resource("a", exclusive_with=("b",)), resource("b", exclusive_with=("a",))])
        assert plan.names() == ["a", "b"]

    def test_compute_step_dependency(self):
        plan = Plan([ComputeStep("replicas", nothing), resource("controller", after=("replicas",))])
        assert isinstance(plan["replicas"], ComputeStep)


class TestArgoCDPlan:
    def test_instance_plan_order(self, make_argocd, control_plane):
        plan = make_argocd().plan(ExistenceProber(control_plane))
        assert plan.names() == [
            "config-map",
            "redis-service",
            "redis-ha",
            "redis",
            "repo-service",
            "repo-server",
            "server-service",
            "server",
            "server-hpa",
            "controller-replicas",
            "application-controller",
        ]

    def test_default_instance_switches(self, make_argocd, control_plane):
        plan = make_argocd().plan(ExistenceProber(control_plane))
        assert plan["redis"].enabled is True
        assert plan["redis-ha"].enabled is False
        assert plan["server-hpa"].enabled is False
        assert plan["application-controller"].enabled is True

    def test_remote_families_are_not_managed(self, make_argocd, control_plane):
        argocd = make_argocd(
            {"redis": {"remote": "redis.example.com:6379"}, "repo": {"remote": "repo.example.com:8081"}}
        )
        plan = argocd.plan(ExistenceProber(control_plane))
        for name in ("redis-service", "redis", "redis-ha", "repo-service", "repo-server"):
            assert plan[name].enabled is False

    def test_autoscale_enables_hpa(self, make_argocd, control_plane):
        argocd = make_argocd({"server": {"autoscale": {"enabled": True, "hpa": {"maxReplicas": 5}}}})
        plan = argocd.plan(ExistenceProber(control_plane))
        assert plan["server-hpa"].enabled is True
