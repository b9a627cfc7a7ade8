"""Algorithm selector façade and result comparison.

``Solver`` holds the active dispatch rule and turns a problem instance into a
:class:`~jssp.models.ScheduleResult`; ``compare_solutions`` is a stateless
reporting helper placing two results side by side.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .engine import check_complete, schedule
from .exceptions import InvalidProblemError
from .metrics import build_result
from .models import ProblemInstance, ScheduleResult
from .rules import Comparator, DispatchRule, RuleLike, SchedulingAlgorithm, resolve_rule

logger = logging.getLogger("jssp.solver")


class Solver:
    """Run the list-scheduling engine with a selectable dispatch rule.

    Args:
        algorithm: Anything accepted by :func:`~jssp.rules.resolve_rule`.

    Raises:
        UnknownRuleError: If ``algorithm`` names no known rule.
    """

    def __init__(self, algorithm: RuleLike = SchedulingAlgorithm.FIFO) -> None:
        self._rule = resolve_rule(algorithm)

    @classmethod
    def fifo(cls) -> "Solver":
        return cls(DispatchRule.fifo())

    @classmethod
    def spt(cls) -> "Solver":
        return cls(DispatchRule.spt())

    @classmethod
    def lpt(cls) -> "Solver":
        return cls(DispatchRule.lpt())

    @classmethod
    def custom(cls, comparator: Comparator, name: str = "Custom") -> "Solver":
        return cls(DispatchRule.custom(comparator, label=name))

    @property
    def rule(self) -> DispatchRule:
        return self._rule

    @property
    def algorithm(self) -> str:
        """Variant tag of the active rule (``"fifo"``, ``"spt"``, ``"lpt"``, ``"custom"``)."""
        return self._rule.kind.value

    def set_algorithm(self, algorithm: RuleLike) -> None:
        self._rule = resolve_rule(algorithm)

    @staticmethod
    def algorithm_name(algorithm: RuleLike) -> str:
        return resolve_rule(algorithm).name

    @property
    def current_algorithm_name(self) -> str:
        return self._rule.name

    def solve(self, problem: Optional[ProblemInstance]) -> ScheduleResult:
        """Reset ``problem``, schedule it and capture an independent result.

        The instance itself is left in its scheduled state; the returned
        result holds a deep copy, so re-solving the instance later does not
        alter previously returned results.

        Raises:
            InvalidProblemError: If ``problem`` is None or malformed.
            SchedulingError: If the engine cannot complete the schedule.
        """
        if problem is None:
            raise InvalidProblemError("Problem instance is null")
        rounds = schedule(problem, self._rule)
        check_complete(problem)
        result = build_result(problem, algorithm=self._rule.name)
        logger.info(
            "%s: makespan=%d total_completion=%d avg_flow=%.2f rounds=%d",
            result.algorithm,
            result.makespan,
            result.total_completion_time,
            result.average_flow_time,
            rounds,
        )
        return result


@dataclass(frozen=True)
class MetricRow:
    metric: str
    first: float
    second: float


@dataclass(frozen=True)
class SolutionComparison:
    """Side-by-side metrics of two results.

    Fields:
        names: Labels of the first and second result.
        rows: One row per metric (makespan, total completion, average flow).
        winner: Label of the result with the strictly lower makespan, or
            ``None`` on a tie.
    """

    names: tuple[str, str]
    rows: tuple[MetricRow, ...]
    winner: Optional[str]

    def format(self) -> str:
        name1, name2 = self.names
        lines = [
            "=== Algorithm Comparison ===",
            f"{'Metric':>22}{name1:>15}{name2:>15}",
            "-" * 52,
        ]
        for row in self.rows:
            if row.metric == "Average Flow Time":
                lines.append(f"{row.metric:>22}{row.first:>15.2f}{row.second:>15.2f}")
            else:
                lines.append(f"{row.metric:>22}{int(row.first):>15d}{int(row.second):>15d}")
        if self.winner is None:
            lines.append("Better Solution: Tie (equal makespan)")
        else:
            lines.append(f"Better Solution: {self.winner} (lower makespan)")
        return "\n".join(lines)


def compare_solutions(
    result1: ScheduleResult,
    result2: ScheduleResult,
    name1: str = "Algorithm 1",
    name2: str = "Algorithm 2",
) -> SolutionComparison:
    """Compare two results metric by metric; the lower makespan wins."""
    rows = (
        MetricRow("Makespan", result1.makespan, result2.makespan),
        MetricRow(
            "Total Completion Time", result1.total_completion_time, result2.total_completion_time
        ),
        MetricRow("Average Flow Time", result1.average_flow_time, result2.average_flow_time),
    )
    if result1.makespan < result2.makespan:
        winner: Optional[str] = name1
    elif result2.makespan < result1.makespan:
        winner = name2
    else:
        winner = None
    comparison = SolutionComparison(names=(name1, name2), rows=rows, winner=winner)
    logger.info("\n%s", comparison.format())
    return comparison
