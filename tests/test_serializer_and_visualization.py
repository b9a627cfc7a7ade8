import json

import pytest

from conftest import build_problem

from jssp.exceptions import InvalidProblemError
from jssp.serializer import (
    export_json,
    export_solution,
    export_text,
    format_text,
    load_json,
    load_solution,
    load_text,
    result_from_dict,
    result_from_text,
    result_to_dict,
)
from jssp.solver import Solver
from jssp.visualization import plot_gantt


@pytest.fixture
def fifo_result(simple_problem):
    return Solver.fifo().solve(simple_problem)


def test_json_export_and_load(tmp_path, fifo_result):
    path = export_json(fifo_result, tmp_path / "out" / "fifo.json")
    data = json.loads(open(path, encoding="utf-8").read())
    assert data["problem"] == {"num_jobs": 3, "num_machines": 3, "total_operations": 9}
    assert data["metrics"]["makespan"] == 8
    assert data["algorithm"] == "FIFO (First-In-First-Out)"
    assert data["machines"][0]["operations"][0] == [0, 0, 0, 2]

    loaded = load_json(path)
    assert loaded.makespan == fifo_result.makespan
    assert loaded.total_completion_time == fifo_result.total_completion_time
    assert [(o.key, o.start, o.end) for o in loaded.problem.operations] == [
        (o.key, o.start, o.end) for o in fifo_result.problem.operations
    ]
    assert loaded.problem.machines[0].operations == fifo_result.problem.machines[0].operations


def test_tampered_metrics_rejected(fifo_result):
    data = result_to_dict(fifo_result)
    data["metrics"]["makespan"] = 1
    with pytest.raises(InvalidProblemError):
        result_from_dict(data)


def test_inconsistent_operation_times_rejected(fifo_result):
    data = result_to_dict(fifo_result)
    data["operations"][0]["end"] += 1
    with pytest.raises(InvalidProblemError):
        result_from_dict(data)


def test_missing_keys_rejected(fifo_result):
    data = result_to_dict(fifo_result)
    del data["machines"]
    with pytest.raises(InvalidProblemError):
        result_from_dict(data)


def test_text_export(tmp_path, fifo_result):
    path = export_text(fifo_result, tmp_path / "fifo.txt")
    text = open(path, encoding="utf-8").read()
    assert text.startswith("JSSP SOLUTION EXPORT")
    assert "  Operation 0: Machine 0 [0-2]" in text
    assert "Machine 2:" in text
    assert "Makespan: 8" in text
    assert "Average Flow Time: 7.00" in text


def test_gantt_png_written(tmp_path, fifo_result):
    target = tmp_path / "charts" / "gantt.png"
    written = plot_gantt(fifo_result, save_path=str(target))
    assert written == str(target)
    assert target.exists() and target.stat().st_size > 0
    assert plot_gantt(fifo_result) is None


def _times(result):
    return [(o.key, o.machine_id, o.duration, o.start, o.end) for o in result.problem.operations]


def test_text_report_loads_back(tmp_path, fifo_result):
    path = export_text(fifo_result, tmp_path / "fifo.txt")
    loaded = load_text(path)
    assert loaded.algorithm == fifo_result.algorithm
    assert loaded.makespan == 8
    assert loaded.total_completion_time == 21
    assert loaded.average_flow_time == pytest.approx(7.0)
    assert _times(loaded) == _times(fifo_result)
    for machine in fifo_result.problem.machines:
        assert loaded.problem.machines[machine.machine_id].operations == machine.operations


def test_text_report_average_compared_at_two_decimals():
    # SPT on one machine: completions 2, 7 and 17, average 26/3 printed as 8.67
    result = Solver.spt().solve(build_problem(3, 1, [[(0, 10)], [(0, 2)], [(0, 5)]]))
    text = format_text(result)
    assert "Average Flow Time: 8.67" in text
    assert result_from_text(text).average_flow_time == pytest.approx(26 / 3)


@pytest.mark.parametrize(
    "old,new",
    [
        ("Makespan: 8", "Makespan: 9"),
        ("JSSP SOLUTION EXPORT", "SOMETHING ELSE"),
        ("  Operation 0: Machine 0 [0-2]", "  Operation 0: Machine 0 [0-3]"),
        ("Machine 2:\n", "Machine -1:\n"),
        ("Machine 1:\n", "Machine 7:\n"),
        ("Jobs: 3\n", ""),
        ("Makespan: 8", "Makespan 8"),
    ],
)
def test_damaged_text_report_rejected(fifo_result, old, new):
    text = format_text(fifo_result)
    assert old in text
    with pytest.raises(InvalidProblemError):
        result_from_text(text.replace(old, new, 1))


@pytest.mark.parametrize("name", ["fifo.json", "fifo.JSON", "fifo.txt", "fifo.report"])
def test_format_chosen_by_extension(tmp_path, fifo_result, name):
    path = export_solution(fifo_result, tmp_path / name)
    head = open(path, encoding="utf-8").read(1)
    assert head == ("{" if name.lower().endswith(".json") else "J")
    loaded = load_solution(path)
    assert loaded.makespan == fifo_result.makespan
    assert _times(loaded) == _times(fifo_result)


def test_negative_machine_id_rejected(fifo_result):
    data = result_to_dict(fifo_result)
    data["machines"][2]["machine_id"] = -1
    with pytest.raises(InvalidProblemError, match="Unknown machine id -1"):
        result_from_dict(data)


def test_operation_listed_under_wrong_machine_rejected(fifo_result):
    data = result_to_dict(fifo_result)
    data["machines"][0]["machine_id"], data["machines"][1]["machine_id"] = 1, 0
    with pytest.raises(InvalidProblemError, match="listed under machine"):
        result_from_dict(data)


def test_operation_count_mismatch_rejected(fifo_result):
    data = result_to_dict(fifo_result)
    data["problem"]["total_operations"] = 10
    with pytest.raises(InvalidProblemError):
        result_from_dict(data)
