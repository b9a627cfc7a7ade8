import pytest

from conftest import build_problem
from jssp.exceptions import UnknownRuleError
from jssp.readiness import job_ready_time, ready_operations
from jssp.rules import DispatchRule, RuleKind, SchedulingAlgorithm, by_key, resolve_rule


def test_ready_set_initially_chain_heads(simple_problem):
    ready = ready_operations(simple_problem)
    assert [simple_problem.operations[i].key for i in ready] == [(0, 0), (1, 3), (2, 6)]


def test_ready_set_advances_after_commit(simple_problem):
    head = simple_problem.operations[0]
    simple_problem.machines[head.machine_id].schedule_operation(head, 0)
    ready = ready_operations(simple_problem)
    assert [simple_problem.operations[i].key for i in ready] == [(0, 1), (1, 3), (2, 6)]
    assert job_ready_time(simple_problem, 1) == 2
    assert job_ready_time(simple_problem, 3) == 0


def test_ready_set_is_pure(simple_problem):
    before = [(op.start, op.end) for op in simple_problem.operations]
    ready_operations(simple_problem)
    assert [(op.start, op.end) for op in simple_problem.operations] == before


def test_ready_set_empty_when_complete():
    problem = build_problem(1, 1, [[(0, 2)]])
    problem.machines[0].schedule_operation(problem.operations[0], 0)
    assert ready_operations(problem) == []


def _durations(problem, ordered):
    return [problem.operations[i].duration for i in ordered]


def test_builtin_orders():
    problem = build_problem(3, 1, [[(0, 5)], [(0, 1)], [(0, 9)]])
    ready = ready_operations(problem)
    assert _durations(problem, DispatchRule.fifo().order(problem, ready)) == [5, 1, 9]
    assert _durations(problem, DispatchRule.spt().order(problem, ready)) == [1, 5, 9]
    assert _durations(problem, DispatchRule.lpt().order(problem, ready)) == [9, 5, 1]


def test_ties_broken_by_job_id():
    problem = build_problem(3, 1, [[(0, 4)], [(0, 4)], [(0, 4)]])
    ready = list(reversed(ready_operations(problem)))
    for rule in (DispatchRule.spt(), DispatchRule.lpt(), DispatchRule.fifo()):
        ordered = rule.order(problem, ready)
        assert [problem.operations[i].job_id for i in ordered] == [0, 1, 2]


def test_custom_comparator_and_key_helper():
    problem = build_problem(3, 3, [[(2, 1)], [(0, 1)], [(1, 1)]])
    ready = ready_operations(problem)
    rule = DispatchRule.custom(by_key(lambda op: op.machine_id), label="Lowest machine")
    ordered = rule.order(problem, ready)
    assert [problem.operations[i].machine_id for i in ordered] == [0, 1, 2]
    assert rule.name == "Lowest machine"


def test_rule_variant_consistency():
    with pytest.raises(UnknownRuleError):
        DispatchRule(RuleKind.CUSTOM)
    with pytest.raises(UnknownRuleError):
        DispatchRule(RuleKind.SPT, comparator=lambda a, b: 0)


@pytest.mark.parametrize(
    "value, kind",
    [
        ("fifo", RuleKind.FIFO),
        (" SPT ", RuleKind.SPT),
        (SchedulingAlgorithm.LPT, RuleKind.LPT),
        (DispatchRule.spt(), RuleKind.SPT),
        (lambda a, b: a.duration - b.duration, RuleKind.CUSTOM),
    ],
)
def test_resolve_rule(value, kind):
    assert resolve_rule(value).kind is kind


@pytest.mark.parametrize("value", ["edd", "", 42, None])
def test_resolve_rule_unknown(value):
    with pytest.raises(UnknownRuleError):
        resolve_rule(value)
