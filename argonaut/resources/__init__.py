from .accessor import ControlPlane, KINDS
from .base import BaseResource

__all__ = [
    "ControlPlane",
    "KINDS",
    "BaseResource",
]
