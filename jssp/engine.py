"""Round-based list scheduling of a problem instance plus post-run feasibility checks."""

import logging
from typing import Optional

from .exceptions import (
    IncompleteScheduleError,
    InvalidProblemError,
    RoundBudgetExceededError,
    UnsatisfiablePrecedenceError,
)
from .models import Operation, ProblemInstance
from .readiness import job_ready_time, ready_operations
from .rules import DispatchRule

logger = logging.getLogger("jssp.engine")


def schedule(
    problem: Optional[ProblemInstance],
    rule: DispatchRule,
    max_rounds: Optional[int] = None,
) -> int:
    """Build a list schedule for ``problem`` in place.

    Each round computes the ready set, orders it by ``rule`` and commits every
    ready operation as early as possible, subject to two constraints: (1) job
    precedence (an operation starts after its predecessor finishes) and
    (2) machine capacity (one operation at a time per machine). Every round
    with a non-empty ready set commits at least one operation, so a
    well-formed instance completes within ``total_operations`` rounds.

    Args:
        problem: Instance to schedule. Reset before the first round.
        rule: Dispatch rule ordering the ready set.
        max_rounds: Round budget. Defaults to the total operation count.

    Returns:
        Number of rounds executed.

    Raises:
        InvalidProblemError: If ``problem`` is None or fails validation
            (dangling job/machine reference, non-positive duration).
        UnsatisfiablePrecedenceError: If no operation is ready (or a round
            commits nothing) while operations remain unscheduled.
        RoundBudgetExceededError: If ``max_rounds`` rounds pass without
            completing the schedule.
    """
    if problem is None:
        raise InvalidProblemError("Problem instance is null")
    problem.validate()
    problem.reset()

    total = problem.total_operations
    budget = total if max_rounds is None else max_rounds
    remaining = total
    rounds = 0
    logger.debug(
        "Scheduling %d operations (%d jobs, %d machines) with %s",
        total,
        problem.num_jobs,
        problem.num_machines,
        rule.name,
    )

    while remaining > 0:
        if rounds >= budget:
            raise RoundBudgetExceededError(
                f"Round budget {budget} exhausted with {remaining}/{total} operations unscheduled"
            )
        ready = ready_operations(problem)
        if not ready:
            raise UnsatisfiablePrecedenceError(
                f"No ready operation while {remaining}/{total} operations are unscheduled"
            )
        rounds += 1
        committed = 0
        for index in rule.order(problem, ready):
            commit(problem, problem.operations[index])
            committed += 1
        if committed == 0:  # pragma: no cover
            raise UnsatisfiablePrecedenceError(f"Round {rounds} made no progress")
        remaining -= committed

    logger.debug("Schedule complete after %d rounds", rounds)
    return rounds


def commit(problem: ProblemInstance, operation: Operation) -> int:
    """Place ``operation`` at its earliest feasible start and return that start."""
    machine = problem.machines[operation.machine_id]
    start = max(machine.available_from, job_ready_time(problem, operation.index))
    machine.schedule_operation(operation, start)
    logger.debug(
        "Scheduled job %d operation %d on machine %d [%d-%d]",
        operation.job_id,
        operation.sequence,
        operation.machine_id,
        operation.start,
        operation.end,
    )
    return start


def check_complete(problem: ProblemInstance) -> bool:
    """Ensure every operation carries a start and end time.

    Raises:
        IncompleteScheduleError: Listing how many operations are missing.
    """
    missing = problem.unscheduled_count()
    if missing:
        raise IncompleteScheduleError(
            f"Incomplete schedule: {missing}/{len(problem.operations)} operations unscheduled"
        )
    return True


def check_precedence(problem: ProblemInstance) -> bool:
    """Ensure each scheduled operation starts after its predecessor ends.

    Raises:
        AssertionError: On the first violated job chain.
    """
    for job in problem.jobs:
        prev_end = None
        for op in problem.job_operations(job.job_id):
            if not op.is_scheduled:
                continue
            if op.end != op.start + op.duration:
                raise AssertionError(
                    f"Job {op.job_id} operation {op.sequence}: end {op.end} != "
                    f"start {op.start} + duration {op.duration}"
                )
            if prev_end is not None and op.start < prev_end:
                raise AssertionError(
                    f"Precedence violated in job {op.job_id}: operation {op.sequence} "
                    f"starts at {op.start} before predecessor ends at {prev_end}"
                )
            prev_end = op.end
    return True


def check_no_machine_overlap(problem: ProblemInstance) -> bool:
    """Ensure no two operations overlap on the same machine.

    Operations are grouped by machine, ordered by start, and each must start
    no earlier than the previous one ended.

    Raises:
        AssertionError: On the first detected temporal overlap for a machine.
    """
    by_machine: dict[int, list[Operation]] = {}
    for op in problem.operations:
        if op.is_scheduled:
            by_machine.setdefault(op.machine_id, []).append(op)
    for machine_ops in by_machine.values():
        machine_ops.sort(key=lambda o: o.start)
        prev_end = -1
        for op in machine_ops:
            if op.start < prev_end:
                raise AssertionError(
                    f"Overlap on machine {op.machine_id} between end {prev_end} "
                    f"and start {op.start}"
                )
            prev_end = op.end
    return True
