"""Objective values of a (fully or partially) scheduled instance."""

from __future__ import annotations

from dataclasses import dataclass

from .models import ProblemInstance, ScheduleResult


@dataclass(frozen=True)
class ScheduleMetrics:
    job_completion_times: tuple[int, ...]
    makespan: int
    total_completion_time: int
    average_flow_time: float


def job_completion_time(problem: ProblemInstance, job_id: int) -> int:
    """Latest end among the job's scheduled operations (0 if none)."""
    return max(
        (op.end for op in problem.job_operations(job_id) if op.end is not None),
        default=0,
    )


def compute_metrics(problem: ProblemInstance) -> ScheduleMetrics:
    """Compute makespan, total completion time and average flow time.

    Unscheduled operations are ignored, so partial schedules are accepted.
    With no jobs every metric is zero; the average never divides by zero.
    """
    completions = tuple(job_completion_time(problem, job.job_id) for job in problem.jobs)
    total = sum(completions)
    return ScheduleMetrics(
        job_completion_times=completions,
        makespan=max(completions, default=0),
        total_completion_time=total,
        average_flow_time=total / len(completions) if completions else 0.0,
    )


def build_result(problem: ProblemInstance, algorithm: str = "") -> ScheduleResult:
    """Snapshot ``problem`` and bundle it with its metrics."""
    snapshot = problem.snapshot()
    metrics = compute_metrics(snapshot)
    return ScheduleResult(
        problem=snapshot,
        makespan=metrics.makespan,
        total_completion_time=metrics.total_completion_time,
        average_flow_time=metrics.average_flow_time,
        algorithm=algorithm,
    )
