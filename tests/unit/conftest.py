"""Shared fixtures: an in-memory control plane and instance builders."""

import logging
import pytest
from argonaut.resources.argocd import ArgoCD
from argonaut.types.schemas import ArgoCDSpecSchema
from tests.unit.support import FakeControlPlane


@pytest.fixture
def control_plane():
    return FakeControlPlane()


@pytest.fixture
def logger():
    return logging.getLogger("argonaut.tests")


@pytest.fixture
def instance_body():
    return {
        "apiVersion": "argoproj.io/v1beta1",
        "kind": "ArgoCD",
        "metadata": {"name": "argocd", "namespace": "argocd", "uid": "0a1b2c3d"},
        "spec": {},
    }


@pytest.fixture
def make_argocd(instance_body, logger):
    """Build an ArgoCD resource from a raw CR spec dict."""

    def _make(spec=None, name="argocd", namespace="argocd"):
        spec_model = ArgoCDSpecSchema().load(spec or {})
        return ArgoCD.from_spec(name, namespace, spec_model, body=instance_body, logger=logger)

    return _make
