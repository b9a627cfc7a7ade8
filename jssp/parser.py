"""Plain-text instance format.

The first two integers are ``num_jobs num_machines``; they are followed by
whitespace-separated ``job_id machine_id duration`` triples. A triple's
position in the file is its sequence key, so a job's operations run in file
order. Anything after ``#`` on a line is a comment.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .exceptions import InvalidProblemError
from .models import ProblemInstance

logger = logging.getLogger("jssp.parser")


def _tokens(text: str) -> list[str]:
    tokens: list[str] = []
    for line in text.splitlines():
        tokens.extend(line.split("#", 1)[0].split())
    return tokens


def parse_instance_text(text: str) -> ProblemInstance:
    """Parse an instance from its text form.

    Raises:
        InvalidProblemError: On a missing or non-positive header, non-integer
            tokens, a trailing incomplete triple, out-of-range ids,
            non-positive durations or an instance without operations.
    """
    try:
        values = [int(tok) for tok in _tokens(text)]
    except ValueError as e:
        raise InvalidProblemError(f"Non-integer token in instance data: {e}") from e
    if len(values) < 2:
        raise InvalidProblemError("Missing header: expected 'num_jobs num_machines'")
    jobs, machines = values[0], values[1]
    if jobs <= 0 or machines <= 0:
        raise InvalidProblemError(f"Invalid number of jobs or machines: {jobs} {machines}")
    body = values[2:]
    if len(body) % 3:
        raise InvalidProblemError(
            f"Operation data must be triples, got {len(body)} values after the header"
        )
    if not body:
        raise InvalidProblemError("No valid operations found")

    problem = ProblemInstance.create(jobs, machines)
    for pos in range(0, len(body), 3):
        job_id, machine_id, duration = body[pos : pos + 3]
        # add_operation rejects bad ids and durations
        problem.add_operation(job_id, machine_id, duration)
    logger.info(
        "Parsed problem: %d jobs, %d machines, %d operations",
        problem.num_jobs,
        problem.num_machines,
        problem.total_operations,
    )
    return problem


def load_instance(file_path: str | Path) -> ProblemInstance:
    with open(file_path, "r", encoding="utf-8") as f:
        return parse_instance_text(f.read())


def format_instance(problem: ProblemInstance) -> str:
    lines = [f"{problem.num_jobs} {problem.num_machines}"]
    # sequence order across jobs preserves every chain on reload
    for op in sorted(problem.operations, key=lambda o: (o.sequence, o.job_id)):
        lines.append(f"{op.job_id} {op.machine_id} {op.duration}")
    return "\n".join(lines) + "\n"


def save_instance(problem: ProblemInstance, file_path: str | Path) -> None:
    with open(file_path, "w", encoding="utf-8") as f:
        f.write(format_instance(problem))


def generate_simple_problem() -> ProblemInstance:
    """Small 3x3 demo instance.

    Job 0: M0(2) M1(3) M2(1); Job 1: M1(1) M2(2) M0(3); Job 2: M2(3) M0(1) M1(2).
    """
    problem = ProblemInstance.create(3, 3)
    for job_id, chain in enumerate(
        [
            [(0, 2), (1, 3), (2, 1)],
            [(1, 1), (2, 2), (0, 3)],
            [(2, 3), (0, 1), (1, 2)],
        ]
    ):
        for machine_id, duration in chain:
            problem.add_operation(job_id, machine_id, duration)
    return problem
