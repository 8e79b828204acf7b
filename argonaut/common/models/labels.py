from typing import Dict


class ResourceLabels:
    ARGOCD_DOMAIN: str = "argocd.argoproj.io/"

    #: Marks secrets that register a managed cluster with an instance.
    ARGOCD_SECRET_TYPE_LABEL = ARGOCD_DOMAIN + "secret-type"

    #: Pod template label stamped when the Redis TLS material changes.
    REDIS_TLS_CERT_CHANGED_LABEL = "redis.tls.cert.changed"

    #: Pod template label stamped when the repo-server TLS material changes.
    REPO_TLS_CERT_CHANGED_LABEL = "repo.tls.cert.changed"

    #: Pod template label stamped when a workload image changes.
    IMAGE_UPGRADED_LABEL = "image.upgraded"


class Labels(ResourceLabels):
    KUBERNETES_DOMAIN = "app.kubernetes.io/"

    KUBERNETES_NAME_LABEL = KUBERNETES_DOMAIN + "name"

    KUBERNETES_PART_OF_LABEL = KUBERNETES_DOMAIN + "part-of"

    KUBERNETES_COMPONENT_LABEL = KUBERNETES_DOMAIN + "component"

    KUBERNETES_MANAGED_BY_LABEL = KUBERNETES_DOMAIN + "managed-by"

    APPLICATION_NAME = "argocd"

    _labels: Dict[str, str]

    def __init__(self, labels: Dict[str, str] = None) -> None:
        self._labels = dict(labels) if labels else dict()

    def update(self, labels: Dict[str, str]) -> "Labels":
        self._labels.update(labels.copy())
        return self

    def as_dict(self) -> Dict[str, str]:
        """Return labels as dictionary."""
        return self._labels.copy()

    def include(self, label: str, value: str) -> "Labels":
        self.update({label: value})
        return self

    def include_kubernetes_name(self, name: str) -> "Labels":
        return self.include(
            self.KUBERNETES_NAME_LABEL, self.get_or_valid_label_value(name)
        )

    def include_kubernetes_part_of(self) -> "Labels":
        return self.include(self.KUBERNETES_PART_OF_LABEL, self.APPLICATION_NAME)

    def include_kubernetes_component(self, component: str) -> "Labels":
        return self.include(self.KUBERNETES_COMPONENT_LABEL, component)

    def include_kubernetes_managed_by(self, instance_name: str) -> "Labels":
        return self.include(
            self.KUBERNETES_MANAGED_BY_LABEL,
            self.get_or_valid_label_value(instance_name),
        )

    def get_or_valid_label_value(self, value: str):
        """Trims the value to a valid Label value:
        * (([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9])?
        * 63 characters max
        """
        if not value:
            return ""
        value = value[:63]
        return value.rstrip("-_.")

    def selector(self) -> "Labels":
        """Subset of labels stable enough to select pods by."""
        return Labels(
            {
                key: self._labels[key]
                for key in (self.KUBERNETES_NAME_LABEL,)
                if key in self._labels
            }
        )

    def __str__(self):
        return f"Labels<{self._labels}>"

    @classmethod
    def generate_default_labels(
        cls, resource_name: str, component: str, instance_name: str
    ) -> "Labels":
        return (
            Labels()
            .include_kubernetes_name(resource_name)
            .include_kubernetes_part_of()
            .include_kubernetes_component(component)
            .include_kubernetes_managed_by(instance_name)
        )
