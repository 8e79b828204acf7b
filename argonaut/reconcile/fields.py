"""Field-level drift detection.

A resource kind declares an ordered table of :class:`FieldGroup` entries.
Each group names an attribute path resolved on both the live object and the
desired object. :func:`update_if_changed` compares every group, copies the
desired value into the live object where they differ, and reports which
groups changed so the caller can issue a single update.
"""
import copy
import re
import logging
from typing import Any, Callable, List, NamedTuple, Optional, Sequence, Tuple, Union
from argonaut.utils.helpers import deep_compare

logger = logging.getLogger(__name__)

ExtraAction = Callable[[Any, Any], None]
Comparator = Callable[[Any, Any], bool]

_SEGMENT = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)((?:\[\d+\])*)$")
_INDEX = re.compile(r"\[(\d+)\]")


class FieldPathError(ValueError):
    """A field group path cannot be resolved on the live object."""


Step = Union[str, int]


def parse_path(path: str) -> Tuple[Step, ...]:
    """``spec.template.spec.containers[0].image`` -> ('spec', ..., 'containers', 0, 'image')."""
    steps: List[Step] = []
    for segment in path.split("."):
        match = _SEGMENT.match(segment)
        if not match:
            raise FieldPathError(f"Invalid field path segment '{segment}' in '{path}'")
        steps.append(match.group(1))
        steps.extend(int(i) for i in _INDEX.findall(match.group(2)))
    return tuple(steps)


def _child(obj: Any, step: Step) -> Any:
    if obj is None:
        return None
    if isinstance(step, int):
        if isinstance(obj, (list, tuple)) and -len(obj) <= step < len(obj):
            return obj[step]
        return None
    if isinstance(obj, dict):
        return obj.get(step)
    return getattr(obj, step, None)


def get_field(obj: Any, path: str) -> Any:
    """Resolve ``path`` on ``obj``; any missing link resolves to None."""
    for step in parse_path(path):
        obj = _child(obj, step)
        if obj is None:
            return None
    return obj


def set_field(obj: Any, path: str, value: Any) -> None:
    steps = parse_path(path)
    parent = obj
    for step in steps[:-1]:
        parent = _child(parent, step)
        if parent is None:
            raise FieldPathError(f"Cannot set '{path}': parent of '{step}' is missing")
    leaf = steps[-1]
    if isinstance(leaf, int):
        if not isinstance(parent, list) or not (-len(parent) <= leaf < len(parent)):
            raise FieldPathError(f"Cannot set '{path}': index {leaf} out of range")
        parent[leaf] = value
    elif isinstance(parent, dict):
        parent[leaf] = value
    else:
        setattr(parent, leaf, value)


class FieldGroup(NamedTuple):
    """One comparable unit of a resource.

    ``extra_action(existing, desired)`` runs once when the group differs.
    ``compare(existing_value, desired_value)`` overrides structural equality.
    """

    name: str
    path: str
    extra_action: Optional[ExtraAction] = None
    compare: Optional[Comparator] = None


class DiffResult(NamedTuple):
    changed: bool
    explanation: str
    groups: Tuple[str, ...] = ()


def update_if_changed(
    groups: Sequence[FieldGroup], existing: Any, desired: Any
) -> DiffResult:
    """Bring ``existing`` in line with ``desired`` group by group.

    A group whose desired value is None is skipped, so an unset desired field
    never clears a live value. Builders express removal with an explicit empty
    value. Extra actions run after all copies, once per differing group.
    """
    changed: List[FieldGroup] = []
    for group in groups:
        desired_value = get_field(desired, group.path)
        if desired_value is None:
            continue
        existing_value = get_field(existing, group.path)
        compare = group.compare or deep_compare
        if compare(existing_value, desired_value):
            continue
        set_field(existing, group.path, copy.deepcopy(desired_value))
        changed.append(group)

    for group in changed:
        if group.extra_action is not None:
            group.extra_action(existing, desired)

    names = tuple(group.name for group in changed)
    return DiffResult(bool(changed), ", ".join(names), names)
