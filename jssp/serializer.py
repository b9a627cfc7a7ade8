"""Export and import of schedule results.

Two formats are supported, JSON and a human-readable text report. Both load
back into a :class:`ScheduleResult` with the metrics re-checked against the
schedule; :func:`export_solution` and :func:`load_solution` pick the format
from the file extension.
"""

from __future__ import annotations

import json
import logging
import math
import re
from pathlib import Path
from typing import Any, Optional

from .exceptions import InvalidProblemError
from .metrics import compute_metrics
from .models import ProblemInstance, ScheduleResult

logger = logging.getLogger("jssp.serializer")

_TITLE = "JSSP SOLUTION EXPORT"


def result_to_dict(result: ScheduleResult) -> dict[str, Any]:
    problem = result.problem
    return {
        "problem": {
            "num_jobs": problem.num_jobs,
            "num_machines": problem.num_machines,
            "total_operations": problem.total_operations,
        },
        "algorithm": result.algorithm,
        "operations": [
            {
                "job": op.job_id,
                "machine": op.machine_id,
                "duration": op.duration,
                "sequence": op.sequence,
                "start": op.start,
                "end": op.end,
                "scheduled": op.is_scheduled,
            }
            for job in problem.jobs
            for op in problem.job_operations(job.job_id)
        ],
        "machines": [
            {
                "machine_id": machine.machine_id,
                "available_from": machine.available_from,
                "operations": [
                    [op.job_id, op.sequence, op.start, op.end]
                    for op in problem.machine_operations(machine.machine_id)
                ],
            }
            for machine in problem.machines
        ],
        "metrics": {
            "makespan": result.makespan,
            "total_completion_time": result.total_completion_time,
            "average_flow_time": result.average_flow_time,
        },
    }


def result_from_dict(data: dict[str, Any], average_tolerance: float = 1e-9) -> ScheduleResult:
    """Rebuild a result from :func:`result_to_dict` output.

    Metrics are recomputed from the operations and compared with the stored
    ones.

    Args:
        data: Mapping in the :func:`result_to_dict` layout.
        average_tolerance: Absolute tolerance for the stored average flow time.

    Raises:
        InvalidProblemError: On missing keys, inconsistent operation times,
            unknown machine entries, operations listed under the wrong
            machine or metrics that do not match the schedule.
    """
    try:
        header = data["problem"]
        problem = ProblemInstance.create(int(header["num_jobs"]), int(header["num_machines"]))
        by_key: dict[tuple[int, int], int] = {}
        for entry in sorted(data["operations"], key=lambda e: (e["job"], e["sequence"])):
            op = problem.add_operation(
                int(entry["job"]),
                int(entry["machine"]),
                int(entry["duration"]),
                sequence=int(entry["sequence"]),
            )
            if entry.get("start") is not None and entry.get("end") is not None:
                op.start, op.end = int(entry["start"]), int(entry["end"])
                if op.end != op.start + op.duration:
                    raise InvalidProblemError(
                        f"Operation {op.key} has end {op.end} != start + duration"
                    )
            by_key[op.key] = op.index
        declared_total = header.get("total_operations")
        if declared_total is not None and int(declared_total) != problem.total_operations:
            raise InvalidProblemError(
                f"Header declares {declared_total} operations, found {problem.total_operations}"
            )
        for machine_entry in data["machines"]:
            machine_id = int(machine_entry["machine_id"])
            if not (0 <= machine_id < problem.num_machines):
                raise InvalidProblemError(f"Unknown machine id {machine_id}")
            machine = problem.machines[machine_id]
            machine.available_from = int(machine_entry["available_from"])
            for job_id, sequence, start, end in machine_entry["operations"]:
                index = by_key[(int(job_id), int(sequence))]
                op = problem.operations[index]
                if op.machine_id != machine_id:
                    raise InvalidProblemError(
                        f"Operation {op.key} listed under machine {machine_id} "
                        f"but runs on machine {op.machine_id}"
                    )
                if (int(start), int(end)) != (op.start, op.end):
                    raise InvalidProblemError(
                        f"Machine {machine_id} lists operation {op.key} at [{start}-{end}], "
                        f"job entry says [{op.start}-{op.end}]"
                    )
                machine.operations.append(index)
        stored = data["metrics"]
        stored_makespan = int(stored["makespan"])
        stored_total = int(stored["total_completion_time"])
        stored_average = float(stored["average_flow_time"])
        algorithm = str(data.get("algorithm", ""))
    except InvalidProblemError:
        raise
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise InvalidProblemError(f"Malformed solution data: {e!r}") from e

    metrics = compute_metrics(problem)
    if (
        metrics.makespan != stored_makespan
        or metrics.total_completion_time != stored_total
        or not math.isclose(
            metrics.average_flow_time, stored_average, abs_tol=average_tolerance
        )
    ):
        raise InvalidProblemError("Stored metrics do not match the schedule")
    return ScheduleResult(
        problem=problem,
        makespan=metrics.makespan,
        total_completion_time=metrics.total_completion_time,
        average_flow_time=metrics.average_flow_time,
        algorithm=algorithm,
    )


def export_json(result: ScheduleResult, file_path: str | Path) -> str:
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(result_to_dict(result), indent=2), encoding="utf-8")
    logger.info("Solution exported to %s", path)
    return str(path)


def load_json(file_path: str | Path) -> ScheduleResult:
    with open(file_path, "r", encoding="utf-8") as f:
        return result_from_dict(json.load(f))


def format_text(result: ScheduleResult) -> str:
    problem = result.problem
    lines = [
        _TITLE,
        "====================",
        "",
        "PROBLEM METADATA:",
        f"Jobs: {problem.num_jobs}",
        f"Machines: {problem.num_machines}",
        f"Total Operations: {problem.total_operations}",
        f"Algorithm: {result.algorithm}",
        "",
        "SCHEDULING RESULTS:",
    ]
    for job in problem.jobs:
        lines.append(f"Job {job.job_id}:")
        for op in problem.job_operations(job.job_id):
            lines.append(
                f"  Operation {op.sequence}: Machine {op.machine_id} [{op.start}-{op.end}]"
            )
    lines += ["", "MACHINE SCHEDULES:"]
    for machine in problem.machines:
        lines.append(f"Machine {machine.machine_id}:")
        for op in problem.machine_operations(machine.machine_id):
            lines.append(f"  Job {op.job_id} Operation {op.sequence} [{op.start}-{op.end}]")
    lines += [
        "",
        "PERFORMANCE METRICS:",
        f"Makespan: {result.makespan}",
        f"Total Completion Time: {result.total_completion_time}",
        f"Average Flow Time: {result.average_flow_time:.2f}",
    ]
    return "\n".join(lines) + "\n"


def export_text(result: ScheduleResult, file_path: str | Path) -> str:
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_text(result), encoding="utf-8")
    logger.info("Solution exported to %s", path)
    return str(path)


_SECTIONS = {
    "PROBLEM METADATA:": "meta",
    "SCHEDULING RESULTS:": "jobs",
    "MACHINE SCHEDULES:": "machines",
    "PERFORMANCE METRICS:": "metrics",
}
_JOB_HEADER = re.compile(r"^Job (\d+):$")
_JOB_OPERATION = re.compile(r"^  Operation (\d+): Machine (\d+) \[(\d+)-(\d+)\]$")
_MACHINE_HEADER = re.compile(r"^Machine (\d+):$")
_MACHINE_OPERATION = re.compile(r"^  Job (\d+) Operation (\d+) \[(\d+)-(\d+)\]$")


def result_from_text(text: str) -> ScheduleResult:
    """Rebuild a result from a :func:`format_text` report.

    The report carries no durations, so each one is taken as ``end - start``
    and every operation must be scheduled. The rebuilt data then goes through
    :func:`result_from_dict`, with the average flow time compared at the
    report's two-decimal precision.

    Raises:
        InvalidProblemError: On an unrecognised line, a missing section value
            or anything :func:`result_from_dict` rejects.
    """
    lines = text.splitlines()
    if not lines or lines[0].strip() != _TITLE:
        raise InvalidProblemError("Not a solution report: missing title line")

    section = None
    values: dict[str, str] = {}
    operations: list[dict[str, int]] = []
    machine_rows: dict[int, list[list[int]]] = {}
    current: Optional[int] = None
    for lineno, raw in enumerate(lines[1:], start=2):
        line = raw.rstrip()
        if not line or set(line) == {"="}:
            continue
        if line in _SECTIONS:
            section, current = _SECTIONS[line], None
            continue
        if section in ("meta", "metrics"):
            key, sep, value = line.partition(":")
            if not sep:
                raise InvalidProblemError(f"Line {lineno}: expected 'key: value', got {line!r}")
            values[key.strip()] = value.strip()
            continue
        if section == "jobs":
            header = _JOB_HEADER.match(line)
            if header:
                current = int(header.group(1))
                continue
            match = _JOB_OPERATION.match(line)
            if match and current is not None:
                sequence, machine_id, start, end = map(int, match.groups())
                operations.append(
                    {
                        "job": current,
                        "machine": machine_id,
                        "duration": end - start,
                        "sequence": sequence,
                        "start": start,
                        "end": end,
                    }
                )
                continue
        if section == "machines":
            header = _MACHINE_HEADER.match(line)
            if header:
                current = int(header.group(1))
                machine_rows.setdefault(current, [])
                continue
            match = _MACHINE_OPERATION.match(line)
            if match and current is not None:
                machine_rows[current].append([int(g) for g in match.groups()])
                continue
        raise InvalidProblemError(f"Line {lineno}: unexpected {line!r}")

    try:
        data = {
            "problem": {
                "num_jobs": values["Jobs"],
                "num_machines": values["Machines"],
                "total_operations": values.get("Total Operations"),
            },
            "algorithm": values.get("Algorithm", ""),
            "operations": operations,
            "machines": [
                {
                    "machine_id": machine_id,
                    "available_from": max((row[3] for row in rows), default=0),
                    "operations": rows,
                }
                for machine_id, rows in machine_rows.items()
            ],
            "metrics": {
                "makespan": values["Makespan"],
                "total_completion_time": values["Total Completion Time"],
                "average_flow_time": values["Average Flow Time"],
            },
        }
    except KeyError as e:
        raise InvalidProblemError(f"Solution report is missing {e.args[0]!r}") from e
    return result_from_dict(data, average_tolerance=0.01)


def load_text(file_path: str | Path) -> ScheduleResult:
    with open(file_path, "r", encoding="utf-8") as f:
        return result_from_text(f.read())


def _is_json(file_path: str | Path) -> bool:
    return Path(file_path).suffix.lower() == ".json"


def export_solution(result: ScheduleResult, file_path: str | Path) -> str:
    """Write ``result`` as JSON for a ``.json`` path, as a text report otherwise."""
    if _is_json(file_path):
        return export_json(result, file_path)
    return export_text(result, file_path)


def load_solution(file_path: str | Path) -> ScheduleResult:
    """Counterpart of :func:`export_solution`, chosen by file extension."""
    if _is_json(file_path):
        return load_json(file_path)
    return load_text(file_path)
