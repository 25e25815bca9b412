from __future__ import annotations

import logging

import pytest

from colony_distributor.models import AggregationResult, CategoryPriority, PriorityMatrix, Task, TaskCategory
from colony_distributor.scoring import PriorityScorer, ScoringError, attribute_value


def _task(category: TaskCategory, task_id: str, **attributes) -> Task:
    return Task(
        category=category,
        position=(0.0, 0.0),
        target=(0.0, 0.0),
        estimated_duration=1.0,
        experience_gain=1.0,
        attributes=attributes,
        task_id=task_id,
    )


def _matrix() -> PriorityMatrix:
    return PriorityMatrix(
        {
            TaskCategory.MINING: CategoryPriority(base=10, modifiers={"resource_scarcity": 2}),
            TaskCategory.BUILDING: CategoryPriority(base=8, modifiers={"urgency": 1.5}),
        }
    )


def test_score_applies_base_and_weighted_modifiers() -> None:
    scorer = PriorityScorer(lambda category: 1.0)
    task = _task(TaskCategory.MINING, "m1", resource_scarcity=3)

    assert scorer.score(task, TaskCategory.MINING, _matrix()) == pytest.approx(16.0)


def test_score_scales_by_colony_need() -> None:
    scorer = PriorityScorer(lambda category: 1.5 if category is TaskCategory.MINING else 1.0)
    task = _task(TaskCategory.MINING, "m1", resource_scarcity=3)

    assert scorer.score(task, TaskCategory.MINING, _matrix()) == pytest.approx(24.0)


def test_score_allows_negative_priorities() -> None:
    matrix = PriorityMatrix({TaskCategory.MINING: CategoryPriority(base=1, modifiers={"difficulty": -2})})
    task = _task(TaskCategory.MINING, "m1", difficulty=5)

    assert PriorityScorer().score(task, TaskCategory.MINING, matrix) == pytest.approx(-9.0)


def test_score_uses_derived_distance() -> None:
    matrix = PriorityMatrix({TaskCategory.MINING: CategoryPriority(base=10, modifiers={"distance": -0.5})})
    task = Task(
        category=TaskCategory.MINING,
        position=(0.0, 0.0),
        target=(3.0, 4.0),
        estimated_duration=1.0,
        experience_gain=1.0,
    )

    assert PriorityScorer().score(task, TaskCategory.MINING, matrix) == pytest.approx(7.5)


@pytest.mark.parametrize(
    "attributes",
    [
        {},
        {"resource_scarcity": "high"},
        {"resource_scarcity": float("nan")},
    ],
)
def test_unresolvable_modifier_scores_zero(attributes, caplog) -> None:
    task = _task(TaskCategory.MINING, "bad", **attributes)

    with caplog.at_level(logging.ERROR, logger="colony_distributor.scoring"):
        priority = PriorityScorer().score(task, TaskCategory.MINING, _matrix())

    assert priority == 0.0
    assert "priority_calculation_failed" in caplog.messages


def test_missing_category_entry_scores_zero() -> None:
    task = _task(TaskCategory.RESEARCH, "r1", novelty=4)

    assert PriorityScorer().score(task, TaskCategory.RESEARCH, _matrix()) == 0.0


def test_attribute_value_rejects_unknown_modifier() -> None:
    with pytest.raises(ScoringError):
        attribute_value(_task(TaskCategory.MINING, "m1"), "urgency")


def test_prioritize_orders_descending_and_keeps_ties_in_aggregation_order() -> None:
    aggregation = AggregationResult(
        tasks={
            TaskCategory.MINING: [
                _task(TaskCategory.MINING, "m-low", resource_scarcity=0.5),
                _task(TaskCategory.MINING, "m-high", resource_scarcity=5),
            ],
            TaskCategory.BUILDING: [
                _task(TaskCategory.BUILDING, "b-tie", urgency=2),
                _task(TaskCategory.BUILDING, "b-negative", urgency=-20),
            ],
        }
    )

    ranked = PriorityScorer().prioritize(aggregation, _matrix())
    priorities = [item.priority for item in ranked]

    assert priorities == sorted(priorities, reverse=True)
    assert [item.task.task_id for item in ranked] == ["m-high", "m-low", "b-tie", "b-negative"]
    assert ranked[-1].priority < 0


def test_prioritize_zeroes_category_when_need_multiplier_fails() -> None:
    def multiplier(category: TaskCategory) -> float:
        if category is TaskCategory.MINING:
            raise RuntimeError("tracker offline")
        return 1.0

    aggregation = AggregationResult(
        tasks={
            TaskCategory.MINING: [_task(TaskCategory.MINING, "m1", resource_scarcity=3)],
            TaskCategory.BUILDING: [_task(TaskCategory.BUILDING, "b1", urgency=2)],
        }
    )

    ranked = PriorityScorer(multiplier).prioritize(aggregation, _matrix())

    assert [(item.task.task_id, item.priority) for item in ranked] == [("b1", 11.0), ("m1", 0.0)]


def test_priority_matrix_from_mapping_accepts_plain_dicts() -> None:
    matrix = PriorityMatrix.from_mapping({"mining": {"base": 10, "modifiers": {"resource_scarcity": 2}}})

    entry = matrix.get(TaskCategory.MINING)
    assert entry is not None
    assert entry.base == 10.0
    assert entry.modifiers == {"resource_scarcity": 2.0}
