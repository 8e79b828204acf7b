import time
import jsonpickle
from datetime import datetime, timezone
from typing import Any

#: Layout used for the ``image.upgraded`` pod template stamp.
IMAGE_UPGRADED_FORMAT = "%m%d%Y-%H%M%S-%Z"


def now() -> str:
    return datetime.now(timezone.utc).isoformat()


def now_nano() -> str:
    """Nanosecond wall clock as a label-safe string."""
    return str(time.time_ns())


def image_upgraded_stamp() -> str:
    return datetime.now(timezone.utc).strftime(IMAGE_UPGRADED_FORMAT)


def to_plain(value: Any) -> Any:
    """Convert kubernetes models (and containers of them) to plain data."""
    if hasattr(value, "to_dict") and callable(value.to_dict):
        return value.to_dict()
    if isinstance(value, dict):
        return {k: to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value


def sort_dict_keys(d):
    """Recursively sort dictionary keys and handle nested structures."""
    if isinstance(d, dict):
        return {key: sort_dict_keys(value) for key, value in sorted(d.items())}
    elif isinstance(d, list):
        return [sort_dict_keys(item) for item in d]
    else:
        return d


def prune_empty(value: Any) -> Any:
    """Drop None values and empty containers the way the API server omits them.

    Returns None when nothing is left.
    """
    if isinstance(value, dict):
        pruned = {k: prune_empty(v) for k, v in value.items()}
        pruned = {k: v for k, v in pruned.items() if v is not None}
        return pruned or None
    if isinstance(value, list):
        pruned = [prune_empty(v) for v in value]
        return pruned or None
    return value


def canonicalize(data) -> str:
    """
    Returns a canonical JSON representation of a value.

    Kubernetes models are flattened first and unset or empty fields are
    dropped, then keys are sorted so the representation is independent of
    insertion order.
    """
    return jsonpickle.dumps(sort_dict_keys(prune_empty(to_plain(data))), unpicklable=False)


def deep_compare(data1, data2) -> bool:
    """Structural equality of two values, models included. Unset equals empty."""
    return canonicalize(data1) == canonicalize(data2)


def upsert_condition(conds, newc):
    """In-memory merge by .type. Only bump lastTransitionTime when status flips."""
    conds = list(conds or [])
    for i, c in enumerate(conds):
        if c.get("type") == newc["type"]:
            ltt = c.get("lastTransitionTime") or now()
            if c.get("status") != newc["status"]:
                ltt = now()
            conds[i] = {**c, **newc, "lastTransitionTime": ltt}
            break
    else:
        conds.append({**newc, "lastTransitionTime": now()})
    return conds
