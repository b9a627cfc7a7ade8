"""Ready-set computation for the list-scheduling loop."""

from __future__ import annotations

from .models import ProblemInstance


def ready_operations(problem: ProblemInstance) -> list[int]:
    """Return indices of operations eligible for scheduling.

    An operation is ready when it is unscheduled and its same-job predecessor
    (if any) is already scheduled. The engine commits chains front to back,
    so during a run each job contributes at most one ready operation.

    Args:
        problem: Partially scheduled instance. Not modified.

    Returns:
        Operation indices in scan order: ascending job id, then sequence key.
    """
    ready: list[int] = []
    for job in problem.jobs:
        predecessor_done = True
        for index in job.operations:
            op = problem.operations[index]
            if not op.is_scheduled and predecessor_done:
                ready.append(index)
            predecessor_done = op.is_scheduled
    return ready


def job_ready_time(problem: ProblemInstance, index: int) -> int:
    """End time of the predecessor of operation ``index`` (0 for a chain head)."""
    predecessor = problem.predecessor(problem.operations[index])
    if predecessor is None or predecessor.end is None:
        return 0
    return predecessor.end
