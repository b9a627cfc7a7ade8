"""Pytest configuration, shared instance builders & custom summary hook.

Also ensures the project root is on sys.path so 'import jssp' works without
an editable install.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_root = Path(__file__).resolve().parents[1]
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

from jssp.models import ProblemInstance  # noqa: E402
from jssp.parser import generate_simple_problem  # noqa: E402


def build_problem(
    num_jobs: int, num_machines: int, chains: list[list[tuple[int, int]]]
) -> ProblemInstance:
    """Build an instance from per-job ``(machine, duration)`` chains."""
    problem = ProblemInstance.create(num_jobs, num_machines)
    for job_id, chain in enumerate(chains):
        for machine_id, duration in chain:
            problem.add_operation(job_id, machine_id, duration)
    return problem


@pytest.fixture
def simple_problem() -> ProblemInstance:
    return generate_simple_problem()


@pytest.fixture
def two_jobs_one_machine() -> ProblemInstance:
    # durations 10 and 2 competing for machine 0 in round 1
    return build_problem(2, 1, [[(0, 10)], [(0, 2)]])


def pytest_terminal_summary(
    terminalreporter: pytest.TerminalReporter,
    exitstatus: int,
    config: pytest.Config,
) -> None:  # noqa: D401
    """Append a compact custom summary at the end of test session."""
    stats = terminalreporter.stats
    passed = len(stats.get("passed", []))
    failed = len(stats.get("failed", []))
    errors = len(stats.get("error", []))
    skipped = len(stats.get("skipped", []))

    terminalreporter.section("Custom summary", sep="=")
    terminalreporter.write_line(
        f"Passed: {passed} | Failed: {failed} | Errors: {errors} | Skipped: {skipped}"
    )
    if failed:
        terminalreporter.write_line("Failed tests:")
        for rep in stats["failed"]:
            terminalreporter.write_line(f"  - {rep.nodeid}")
