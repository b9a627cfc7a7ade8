"""Dispatch rules: priority orderings over the ready set.

Concepts
--------
DispatchRule
    Closed tagged variant over :class:`RuleKind`. ``FIFO`` keeps the ready
    scan order, ``SPT`` / ``LPT`` order by ascending / descending duration
    and ``CUSTOM`` delegates to a user comparator ``cmp(a, b) -> int``
    (negative when ``a`` has priority).

Tie-break
    Operations that compare equal under the active rule are ordered by
    ascending ``job_id`` and then ascending ``sequence``. This is exactly the
    FIFO scan order, and Python's sort is stable, so every rule is
    deterministic.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import cmp_to_key
from typing import Callable, Iterable, Optional, Union

from .exceptions import UnknownRuleError
from .models import Operation, ProblemInstance

Comparator = Callable[[Operation, Operation], int]


class SchedulingAlgorithm(str, Enum):
    """Built-in dispatch rules selectable by name."""

    FIFO = "fifo"
    SPT = "spt"
    LPT = "lpt"


class RuleKind(str, Enum):
    FIFO = "fifo"
    SPT = "spt"
    LPT = "lpt"
    CUSTOM = "custom"


ALGORITHM_NAMES = {
    RuleKind.FIFO: "FIFO (First-In-First-Out)",
    RuleKind.SPT: "SPT (Shortest Processing Time)",
    RuleKind.LPT: "LPT (Longest Processing Time)",
}


@dataclass(frozen=True)
class DispatchRule:
    """Priority function used to order ready operations.

    Attributes:
        kind: Variant tag.
        comparator: Required for ``CUSTOM``, forbidden otherwise.
        label: Display name of a ``CUSTOM`` rule.
    """

    kind: RuleKind
    comparator: Optional[Comparator] = None
    label: str = "Custom"

    def __post_init__(self) -> None:
        if self.kind is RuleKind.CUSTOM and self.comparator is None:
            raise UnknownRuleError("Custom dispatch rule requires a comparator")
        if self.kind is not RuleKind.CUSTOM and self.comparator is not None:
            raise UnknownRuleError(f"Built-in rule {self.kind.value} does not take a comparator")

    @classmethod
    def fifo(cls) -> "DispatchRule":
        return cls(RuleKind.FIFO)

    @classmethod
    def spt(cls) -> "DispatchRule":
        return cls(RuleKind.SPT)

    @classmethod
    def lpt(cls) -> "DispatchRule":
        return cls(RuleKind.LPT)

    @classmethod
    def custom(cls, comparator: Comparator, label: str = "Custom") -> "DispatchRule":
        return cls(RuleKind.CUSTOM, comparator=comparator, label=label)

    @property
    def name(self) -> str:
        if self.kind is RuleKind.CUSTOM:
            return self.label
        return ALGORITHM_NAMES[self.kind]

    def order(self, problem: ProblemInstance, ready: Iterable[int]) -> list[int]:
        """Sort ready operation indices by priority (highest first).

        Args:
            problem: Instance owning the operations.
            ready: Operation indices, typically from ``ready_operations``.

        Returns:
            New list; the input is left untouched.
        """
        ops = problem.operations
        # tie-break first, the stable primary sort keeps it among equals
        ordered = sorted(ready, key=lambda i: ops[i].key)
        if self.kind is RuleKind.FIFO:
            return ordered
        if self.kind is RuleKind.SPT:
            ordered.sort(key=lambda i: ops[i].duration)
        elif self.kind is RuleKind.LPT:
            ordered.sort(key=lambda i: -ops[i].duration)
        elif self.kind is RuleKind.CUSTOM:
            comparator = self.comparator
            ordered.sort(key=cmp_to_key(lambda a, b: comparator(ops[a], ops[b])))
        else:  # pragma: no cover
            raise UnknownRuleError(f"Unknown dispatch rule: {self.kind}")
        return ordered


RuleLike = Union[DispatchRule, SchedulingAlgorithm, str, Comparator]


def resolve_rule(value: RuleLike) -> DispatchRule:
    """Normalise any accepted rule value into a :class:`DispatchRule`.

    Args:
        value: A rule, a :class:`SchedulingAlgorithm` member, a case-insensitive
            name (``"fifo"``, ``"spt"``, ``"lpt"``) or a comparator callable.

    Raises:
        UnknownRuleError: If the value names no known rule.
    """
    if isinstance(value, DispatchRule):
        return value
    if isinstance(value, str):
        try:
            algorithm = SchedulingAlgorithm(value.strip().lower())
        except ValueError:
            raise UnknownRuleError(f"Unknown dispatch rule: {value!r}") from None
        return DispatchRule(RuleKind(algorithm.value))
    if callable(value):
        return DispatchRule.custom(value)
    raise UnknownRuleError(f"Unknown dispatch rule: {value!r}")


def by_key(key: Callable[[Operation], object]) -> Comparator:
    """Build a comparator from a priority key (smaller key = higher priority)."""

    def compare(a: Operation, b: Operation) -> int:
        ka, kb = key(a), key(b)
        if ka < kb:  # type: ignore[operator]
            return -1
        if kb < ka:  # type: ignore[operator]
            return 1
        return 0

    return compare
