"""In-memory control plane and secret builders shared by the unit tests."""

import base64
import copy
from kubernetes_asyncio.client import V1ObjectMeta, V1Secret
from argonaut.utils.errors import ConflictError, TransientAPIError


def b64(value: str) -> str:
    return base64.b64encode(value.encode()).decode()


def served(obj):
    """Drop empty lists and maps from a model, as the API server omits them on read."""
    if isinstance(obj, list):
        for item in obj:
            served(item)
        return obj
    types = getattr(obj, "openapi_types", None)
    if types is None:
        return obj
    for attr in types:
        value = getattr(obj, attr)
        if isinstance(value, (list, dict)) and not value:
            setattr(obj, attr, None)
        else:
            served(value)
    return obj


class FakeControlPlane:
    """In-memory stand-in for the Kubernetes API.

    Objects are stored as deep copies keyed by (kind, namespace, name). Every
    write is recorded in ``writes`` and written objects are stored in served
    form, without empty lists or maps. Updates are rejected with ConflictError
    when the body's resourceVersion is stale. ``fail_on`` maps
    ``(verb, kind, name)`` to an exception raised for that call.
    """

    def __init__(self):
        self.objects = {}
        self.writes = []
        self.fail_on = {}
        self._version = 0

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    def _check_failure(self, verb, kind, name):
        error = self.fail_on.get((verb, kind, name))
        if error is not None:
            raise error

    def seed(self, kind: str, obj) -> None:
        obj = copy.deepcopy(obj)
        obj.metadata.resource_version = self._next_version()
        self.objects[(kind, obj.metadata.namespace, obj.metadata.name)] = obj

    def stored(self, kind: str, namespace: str, name: str):
        return self.objects.get((kind, namespace, name))

    def writes_of(self, verb: str = None):
        return [w for w in self.writes if verb is None or w[0] == verb]

    def reset_writes(self) -> None:
        self.writes = []

    async def get(self, kind, namespace, name):
        self._check_failure("get", kind, name)
        obj = self.objects.get((kind, namespace, name))
        return copy.deepcopy(obj) if obj is not None else None

    async def list(self, kind, namespace, label_selector=None):
        self._check_failure("list", kind, None)
        wanted = dict(
            part.split("=", 1) for part in (label_selector or "").split(",") if part
        )
        found = []
        for (k, ns, _), obj in self.objects.items():
            if k != kind or ns != namespace:
                continue
            labels = obj.metadata.labels or {}
            if all(labels.get(key) == value for key, value in wanted.items()):
                found.append(copy.deepcopy(obj))
        return found

    async def create(self, kind, namespace, body):
        name = body.metadata.name
        self._check_failure("create", kind, name)
        if (kind, namespace, name) in self.objects:
            return False
        obj = served(copy.deepcopy(body))
        obj.metadata.namespace = namespace
        obj.metadata.resource_version = self._next_version()
        self.objects[(kind, namespace, name)] = obj
        self.writes.append(("create", kind, name))
        return True

    async def update(self, kind, namespace, body):
        name = body.metadata.name
        self._check_failure("update", kind, name)
        current = self.objects.get((kind, namespace, name))
        if current is None:
            raise TransientAPIError(f"{kind} {name} not found", status=404)
        if body.metadata.resource_version != current.metadata.resource_version:
            raise ConflictError(f"{kind} {name} was modified")
        obj = served(copy.deepcopy(body))
        obj.metadata.resource_version = self._next_version()
        self.objects[(kind, namespace, name)] = obj
        self.writes.append(("update", kind, name))

    async def delete(self, kind, namespace, name, propagation_policy="Foreground"):
        self._check_failure("delete", kind, name)
        if self.objects.pop((kind, namespace, name), None) is None:
            return False
        self.writes.append(("delete", kind, name))
        return True


def tls_secret(name: str, namespace: str, cert: str, key: str, type_="kubernetes.io/tls"):
    return V1Secret(
        api_version="v1",
        kind="Secret",
        type=type_,
        metadata=V1ObjectMeta(name=name, namespace=namespace),
        data={"tls.crt": b64(cert), "tls.key": b64(key)},
    )
