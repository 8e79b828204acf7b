class ArgoCDResources:
    """Encapsulates the naming scheme used for the resources which the operator manages
    for an ArgoCD instance."""

    #: Argo CD reads its settings from this fixed name.
    CONFIG_MAP_NAME = "argocd-cm"

    REDIS_TLS_SECRET_NAME = "argocd-operator-redis-tls"

    REPO_TLS_SECRET_NAME = "argocd-repo-server-tls"

    @classmethod
    def application_controller_name(self, instance_name: str):
        """Returns the name of the application controller `StatefulSet`."""
        return f"{instance_name}-application-controller"

    @classmethod
    def redis_name(self, instance_name: str):
        """Returns the name of the standalone Redis `Deployment` and its `Service`."""
        return f"{instance_name}-redis"

    @classmethod
    def redis_ha_name(self, instance_name: str):
        """Returns the name of the Redis HA `StatefulSet`."""
        return f"{instance_name}-redis-ha-server"

    @classmethod
    def repo_server_name(self, instance_name: str):
        return f"{instance_name}-repo-server"

    @classmethod
    def server_name(self, instance_name: str):
        return f"{instance_name}-server"

    @classmethod
    def server_hpa_name(self, instance_name: str):
        return self.server_name(instance_name)

    @classmethod
    def qualified_service_name(self, service_name: str, namespace: str):
        """Returns qualified name of a service which works across different namespaces."""
        return f"{service_name}.{namespace}.svc.cluster.local"
