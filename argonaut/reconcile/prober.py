import logging
from typing import Any, List, Optional
from argonaut.resources.accessor import ControlPlane

logger = logging.getLogger(__name__)


class ExistenceProber:
    """Read-only view of the control plane.

    ``probe`` answers found (the live object) or confirmed absent (``None``).
    Read failures propagate and are never reported as absent.
    """

    def __init__(self, control_plane: ControlPlane):
        self.control_plane = control_plane

    async def probe(self, kind: str, namespace: str, name: str) -> Optional[Any]:
        existing = await self.control_plane.get(kind, namespace, name)
        if existing is None:
            logger.debug(f"{kind} {namespace}/{name} not found")
        return existing

    async def list(
        self, kind: str, namespace: str, label_selector: str = None
    ) -> List[Any]:
        return await self.control_plane.list(kind, namespace, label_selector)
