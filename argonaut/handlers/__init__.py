from argonaut.handlers import argocd, probes

__all__ = [
    "argocd",
    "probes",
]
