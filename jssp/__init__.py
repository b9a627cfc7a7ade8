"""Core package of the JSSP list scheduler.

Exports the problem model, the solver façade and the error hierarchy.
"""

from jssp.exceptions import (  # noqa: F401
    InvalidProblemError,
    JSSPError,
    SchedulingError,
    UnknownRuleError,
)
from jssp.models import Job, Machine, Operation, ProblemInstance, ScheduleResult  # noqa: F401
from jssp.rules import DispatchRule, SchedulingAlgorithm  # noqa: F401
from jssp.solver import Solver, compare_solutions  # noqa: F401

__all__ = [
    "DispatchRule",
    "InvalidProblemError",
    "JSSPError",
    "Job",
    "Machine",
    "Operation",
    "ProblemInstance",
    "ScheduleResult",
    "SchedulingAlgorithm",
    "SchedulingError",
    "Solver",
    "UnknownRuleError",
    "compare_solutions",
]
