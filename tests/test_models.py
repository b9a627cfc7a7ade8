import importlib
import pkgutil

import pytest

from conftest import build_problem
import jssp
from jssp.exceptions import InvalidProblemError
from jssp.models import ProblemInstance


def test_create_indexes_jobs_and_machines():
    problem = ProblemInstance.create(3, 2)
    assert [j.job_id for j in problem.jobs] == [0, 1, 2]
    assert [m.machine_id for m in problem.machines] == [0, 1]
    assert problem.total_operations == 0


def test_add_operation_assigns_increasing_sequence(simple_problem):
    assert simple_problem.total_operations == 9
    for job in simple_problem.jobs:
        keys = [op.sequence for op in simple_problem.job_operations(job.job_id)]
        assert keys == sorted(keys)
        assert len(set(keys)) == len(keys)
    assert all(not op.is_scheduled for op in simple_problem.operations)


@pytest.mark.parametrize(
    "job_id, machine_id, duration",
    [
        (2, 0, 5),  # job out of range
        (-1, 0, 5),
        (0, 1, 5),  # machine out of range
        (0, 0, 0),  # zero duration
        (0, 0, -3),
    ],
)
def test_add_operation_rejects_bad_data(job_id, machine_id, duration):
    problem = ProblemInstance.create(2, 1)
    with pytest.raises(InvalidProblemError):
        problem.add_operation(job_id, machine_id, duration)


def test_explicit_sequence_must_increase():
    problem = ProblemInstance.create(1, 1)
    problem.add_operation(0, 0, 1, sequence=5)
    with pytest.raises(InvalidProblemError):
        problem.add_operation(0, 0, 1, sequence=5)


def test_predecessor_follows_chain(simple_problem):
    first, second, _ = simple_problem.job_operations(1)
    assert simple_problem.predecessor(first) is None
    assert simple_problem.predecessor(second) is first


def test_validate_detects_dangling_machine(simple_problem):
    simple_problem.validate()
    simple_problem.operations[4].machine_id = 7
    with pytest.raises(InvalidProblemError):
        simple_problem.validate()


def test_validate_detects_operation_in_two_jobs():
    problem = build_problem(2, 1, [[(0, 1)], [(0, 1)]])
    problem.jobs[1].operations.append(0)
    with pytest.raises(InvalidProblemError):
        problem.validate()


def test_reset_clears_times_and_machines():
    problem = build_problem(1, 1, [[(0, 4)]])
    problem.machines[0].schedule_operation(problem.operations[0], 3)
    assert problem.operations[0].end == 7
    assert problem.machines[0].available_from == 7
    problem.reset()
    assert problem.operations[0].start is None
    assert not problem.operations[0].is_scheduled
    assert problem.machines[0].available_from == 0
    assert problem.machines[0].operations == []


def test_snapshot_is_independent(simple_problem):
    snap = simple_problem.snapshot()
    simple_problem.machines[0].schedule_operation(simple_problem.operations[0], 0)
    assert not snap.operations[0].is_scheduled
    assert snap.machines[0].operations == []
    assert snap.operations[0] is not simple_problem.operations[0]


@pytest.mark.parametrize("name", [m.name for m in pkgutil.iter_modules(jssp.__path__)])
def test_every_module_has_a_docstring(name):
    module = importlib.import_module(f"jssp.{name}")
    assert module.__doc__ and module.__doc__.strip()
