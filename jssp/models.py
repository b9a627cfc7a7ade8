"""Core data structures for Job Shop instances and their schedules.

This module defines:
    Operation       -- one unit of work (job, machine, duration, sequence key).
    Job             -- ordered chain of operation indices.
    Machine         -- availability timestamp plus commit-ordered schedule.
    ProblemInstance -- arena owning every operation, job and machine.
    ScheduleResult  -- immutable snapshot of a scheduled instance + metrics.

Jobs and machines never hold operation objects, only integer indices into
``ProblemInstance.operations``. A snapshot is therefore a plain deep copy
with no aliasing back into the live instance.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Optional

from .exceptions import InvalidProblemError

OperationKey = tuple[int, int]  # (job_id, sequence)


@dataclass(slots=True)
class Operation:
    """Single operation of a job.

    Attributes:
        index: Position in ``ProblemInstance.operations``.
        job_id: Owning job.
        machine_id: Machine required for processing.
        duration: Positive processing time.
        sequence: Precedence key, strictly increasing inside a job.
        start: Scheduled start time or ``None`` while unscheduled.
        end: Scheduled completion time or ``None`` while unscheduled.
    """

    index: int
    job_id: int
    machine_id: int
    duration: int
    sequence: int
    start: Optional[int] = None
    end: Optional[int] = None

    @property
    def is_scheduled(self) -> bool:
        return self.end is not None

    @property
    def key(self) -> OperationKey:
        return (self.job_id, self.sequence)

    def clear(self) -> None:
        self.start = None
        self.end = None


@dataclass(slots=True)
class Job:
    """Precedence chain; ``operations`` is sorted by ascending sequence key."""

    job_id: int
    operations: list[int] = field(default_factory=list)


@dataclass(slots=True)
class Machine:
    """Single-capacity resource.

    Attributes:
        machine_id: Identifier (index into ``ProblemInstance.machines``).
        available_from: End time of the last committed operation (0 if none).
        operations: Operation indices in commit order.
    """

    machine_id: int
    available_from: int = 0
    operations: list[int] = field(default_factory=list)

    def schedule_operation(self, operation: Operation, start: int) -> None:
        """Commit ``operation`` at ``start`` and advance availability."""
        operation.start = start
        operation.end = start + operation.duration
        self.operations.append(operation.index)
        self.available_from = operation.end

    def reset(self) -> None:
        self.available_from = 0
        self.operations.clear()


@dataclass
class ProblemInstance:
    """Mutable JSSP instance owned by a single scheduling run at a time.

    Use :meth:`create` to build an instance with a fixed number of jobs and
    machines and :meth:`add_operation` to append operations to job chains.
    """

    jobs: list[Job] = field(default_factory=list)
    machines: list[Machine] = field(default_factory=list)
    operations: list[Operation] = field(default_factory=list)

    @classmethod
    def create(cls, num_jobs: int, num_machines: int) -> "ProblemInstance":
        if num_jobs < 0 or num_machines < 0:
            raise InvalidProblemError(
                f"Invalid number of jobs or machines: {num_jobs}, {num_machines}"
            )
        return cls(
            jobs=[Job(job_id=j) for j in range(num_jobs)],
            machines=[Machine(machine_id=m) for m in range(num_machines)],
        )

    @property
    def num_jobs(self) -> int:
        return len(self.jobs)

    @property
    def num_machines(self) -> int:
        return len(self.machines)

    @property
    def total_operations(self) -> int:
        return sum(len(job.operations) for job in self.jobs)

    def add_operation(
        self,
        job_id: int,
        machine_id: int,
        duration: int,
        sequence: Optional[int] = None,
    ) -> Operation:
        """Append an operation to the end of a job's chain.

        Args:
            job_id: Existing job identifier.
            machine_id: Existing machine identifier.
            duration: Positive processing time.
            sequence: Explicit precedence key. Defaults to the problem-wide
                creation counter, which is monotonic inside every job.

        Returns:
            The created operation.

        Raises:
            InvalidProblemError: On an unknown job or machine, a non-positive
                duration, or a sequence key not greater than the job's last one.
        """
        if not (0 <= job_id < self.num_jobs):
            raise InvalidProblemError(f"Job index out of range: {job_id}")
        if not (0 <= machine_id < self.num_machines):
            raise InvalidProblemError(f"Machine index out of range: {machine_id}")
        if duration <= 0:
            raise InvalidProblemError(
                f"Non-positive duration {duration} for job {job_id} on machine {machine_id}"
            )
        index = len(self.operations)
        if sequence is None:
            sequence = index
        chain = self.jobs[job_id].operations
        if chain and self.operations[chain[-1]].sequence >= sequence:
            raise InvalidProblemError(
                f"Sequence key {sequence} does not follow the last key of job {job_id}"
            )
        operation = Operation(
            index=index,
            job_id=job_id,
            machine_id=machine_id,
            duration=duration,
            sequence=sequence,
        )
        self.operations.append(operation)
        chain.append(index)
        return operation

    def job_operations(self, job_id: int) -> list[Operation]:
        return [self.operations[i] for i in self.jobs[job_id].operations]

    def machine_operations(self, machine_id: int) -> list[Operation]:
        return [self.operations[i] for i in self.machines[machine_id].operations]

    def predecessor(self, operation: Operation) -> Optional[Operation]:
        """Return the same-job operation with the next-smaller sequence key."""
        chain = self.jobs[operation.job_id].operations
        position = chain.index(operation.index)
        if position == 0:
            return None
        return self.operations[chain[position - 1]]

    def unscheduled_count(self) -> int:
        return sum(1 for op in self.operations if not op.is_scheduled)

    def validate(self) -> None:
        """Check the arena's referential integrity.

        Raises:
            InvalidProblemError: On a dangling job/machine reference, a
                non-positive duration, an operation owned by zero or several
                jobs, or a job chain whose sequence keys do not increase.
        """
        owners = [0] * len(self.operations)
        for job_id, job in enumerate(self.jobs):
            if job.job_id != job_id:
                raise InvalidProblemError(f"Job at position {job_id} has id {job.job_id}")
            last_sequence = None
            for index in job.operations:
                if not (0 <= index < len(self.operations)):
                    raise InvalidProblemError(f"Job {job_id} references missing operation {index}")
                op = self.operations[index]
                if op.job_id != job_id:
                    raise InvalidProblemError(
                        f"Operation {index} listed in job {job_id} but belongs to job {op.job_id}"
                    )
                if last_sequence is not None and op.sequence <= last_sequence:
                    raise InvalidProblemError(f"Sequence keys of job {job_id} are not increasing")
                last_sequence = op.sequence
                owners[index] += 1
        for machine_id, machine in enumerate(self.machines):
            if machine.machine_id != machine_id:
                raise InvalidProblemError(
                    f"Machine at position {machine_id} has id {machine.machine_id}"
                )
        for position, op in enumerate(self.operations):
            if op.index != position:
                raise InvalidProblemError(f"Operation index {op.index} stored at slot {position}")
            if not (0 <= op.job_id < self.num_jobs):
                raise InvalidProblemError(
                    f"Operation {op.index} references missing job {op.job_id}"
                )
            if not (0 <= op.machine_id < self.num_machines):
                raise InvalidProblemError(
                    f"Operation {op.index} references missing machine {op.machine_id}"
                )
            if op.duration <= 0:
                raise InvalidProblemError(
                    f"Operation {op.index} has non-positive duration {op.duration}"
                )
            if owners[op.index] != 1:
                raise InvalidProblemError(
                    f"Operation {op.index} is owned by {owners[op.index]} jobs"
                )

    def reset(self) -> None:
        """Return every operation to Unscheduled and every machine to time 0."""
        for machine in self.machines:
            machine.reset()
        for op in self.operations:
            op.clear()

    def snapshot(self) -> "ProblemInstance":
        """Independent deep copy; later mutations of ``self`` do not leak into it."""
        return copy.deepcopy(self)


@dataclass(frozen=True)
class ScheduleResult:
    """Scheduled instance snapshot together with its objective values.

    Fields:
        problem: Deep copy of the instance taken after scheduling. Consumers
            treat it as read-only history.
        makespan: Maximum completion time across all operations.
        total_completion_time: Sum of per-job completion times.
        average_flow_time: ``total_completion_time / num_jobs`` (0.0 if no jobs).
        algorithm: Display name of the dispatch rule that produced it.
    """

    problem: ProblemInstance
    makespan: int
    total_completion_time: int
    average_flow_time: float
    algorithm: str = ""
