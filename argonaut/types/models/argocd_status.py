from typing import Any, Dict, Optional

HEALTH_UNKNOWN = "Unknown"
HEALTH_PENDING = "Pending"
HEALTH_RUNNING = "Running"
HEALTH_FAILED = "Failed"

PHASE_PENDING = "Pending"
PHASE_AVAILABLE = "Available"

#: Status keys for the tracked TLS secrets
REDIS_TLS_CHECKSUM = "redis-tls"
REPO_TLS_CHECKSUM = "repo-tls"


class StatusUpdate:
    """Partial status document produced by one reconciliation pass.

    Only fields set here are written, so concurrent passes touching
    different keys do not overwrite each other. Checksums live in a nested
    map and are merged key by key; a cleared checksum is written as null.
    """

    def __init__(self, current: Optional[Dict[str, Any]] = None):
        self._current = dict(current or {})
        self._fields: Dict[str, Any] = {}
        self._checksums: Dict[str, Optional[str]] = {}

    @property
    def current_checksums(self) -> Dict[str, str]:
        return dict(self._current.get("checksums") or {})

    def set(self, field: str, value: Any) -> "StatusUpdate":
        if self._current.get(field) != value:
            self._fields[field] = value
        return self

    def set_checksum(self, key: str, checksum: str) -> "StatusUpdate":
        self._checksums[key] = checksum
        return self

    def clear_checksum(self, key: str) -> "StatusUpdate":
        if key in self.current_checksums:
            self._checksums[key] = None
        return self

    def is_empty(self) -> bool:
        return not self._fields and not self._checksums

    def fields(self):
        names = list(self._fields.keys())
        if self._checksums:
            names.append("checksums")
        return names

    def as_patch(self) -> Dict[str, Any]:
        patch = dict(self._fields)
        if self._checksums:
            patch["checksums"] = dict(self._checksums)
        return patch
