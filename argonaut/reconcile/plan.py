"""Explicit, ordered reconcile plan for one instance.

Steps run in list order. A step may declare the steps it must run ``after``;
the plan refuses to build if such a step is unknown or placed later, so
ordering constraints are checked rather than implied by call order.
"""
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Sequence, Tuple
from argonaut.reconcile.fields import FieldGroup


class PlanError(ValueError):
    """The step list violates its own ordering declarations."""


class PassContext(dict):
    """Values computed earlier in a pass, keyed by step name."""


class Step:
    name: str
    after: Tuple[str, ...]

    def references(self) -> Tuple[str, ...]:
        return tuple(self.after)


class ComputeStep(Step):
    """Computes a value later steps read from the pass context."""

    def __init__(
        self,
        name: str,
        compute: Callable[[PassContext], Awaitable[Any]],
        after: Sequence[str] = (),
    ):
        self.name = name
        self.compute = compute
        self.after = tuple(after)

    def __repr__(self) -> str:
        return f"ComputeStep<{self.name}>"


class ResourceStep(Step):
    """Converges one managed object.

    Args:
        name: Step name, unique within the plan
        kind: Kubernetes kind of the managed object
        resource_name: Name of the managed object
        enabled: Whether the object should exist in this pass
        build: Builds the desired object from the pass context
        field_groups: Ordered comparison table for the kind
        exclusive_with: Steps managing an alternative form of the same role
        after: Steps that must run first
    """

    def __init__(
        self,
        name: str,
        kind: str,
        resource_name: str,
        enabled: bool,
        build: Callable[[PassContext], Any],
        field_groups: Sequence[FieldGroup],
        exclusive_with: Sequence[str] = (),
        after: Sequence[str] = (),
    ):
        self.name = name
        self.kind = kind
        self.resource_name = resource_name
        self.enabled = enabled
        self.build = build
        self.field_groups = tuple(field_groups)
        self.exclusive_with = tuple(exclusive_with)
        self.after = tuple(after)

    def references(self) -> Tuple[str, ...]:
        return self.after + self.exclusive_with

    def __repr__(self) -> str:
        return f"ResourceStep<{self.name} {self.kind}/{self.resource_name}>"


class Plan:
    """Ordered steps for one reconciliation pass."""

    _steps: List[Step]
    _index: Dict[str, Step]

    def __init__(self, steps: Sequence[Step]):
        self._steps = list(steps)
        self._index = {}
        for step in self._steps:
            if step.name in self._index:
                raise PlanError(f"Duplicate step '{step.name}'")
            self._index[step.name] = step
        self._validate()

    def _validate(self) -> None:
        seen = set()
        for step in self._steps:
            for ref in step.references():
                if ref not in self._index:
                    raise PlanError(f"Step '{step.name}' references unknown step '{ref}'")
            for ref in step.after:
                if ref not in seen:
                    raise PlanError(
                        f"Step '{step.name}' must run after '{ref}' but is ordered before it"
                    )
            seen.add(step.name)

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def __getitem__(self, name: str) -> Step:
        return self._index[name]

    def names(self) -> List[str]:
        return [step.name for step in self._steps]
