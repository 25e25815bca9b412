from __future__ import annotations

import logging

from colony_distributor.adapters import SimulatedColonist
from colony_distributor.matching import AssignmentMatcher, ExperienceSuitability
from colony_distributor.models import ScoredTask, Task, TaskCategory


def _scored(category: TaskCategory, priority: float, task_id: str, **kwargs) -> ScoredTask:
    task = Task(
        category=category,
        position=kwargs.pop("position", (0.0, 0.0)),
        target=(0.0, 0.0),
        estimated_duration=1.0,
        experience_gain=1.0,
        task_id=task_id,
        **kwargs,
    )
    return ScoredTask(task=task, priority=priority)


def test_single_task_goes_to_first_colonist_only(caplog) -> None:
    first = SimulatedColonist("first")
    second = SimulatedColonist("second")
    tasks = [_scored(TaskCategory.BUILDING, 10.0, "dome")]

    with caplog.at_level(logging.WARNING, logger="colony_distributor.matching"):
        matches = AssignmentMatcher().match([first, second], tasks)

    assert [(match.colonist.colonist_id, match.task.task_id) for match in matches] == [("first", "dome")]
    assert tasks[0].task.available is False
    assert "no_suitable_task" in caplog.messages
    assert caplog.records[-1].colonist_id == "second"


def test_colonists_take_tasks_in_priority_order() -> None:
    colonists = [SimulatedColonist("a"), SimulatedColonist("b")]
    tasks = [
        _scored(TaskCategory.MINING, 20.0, "high"),
        _scored(TaskCategory.RESEARCH, 5.0, "low"),
    ]

    matches = AssignmentMatcher().match(colonists, tasks)

    assert [(match.colonist.colonist_id, match.task.task_id) for match in matches] == [("a", "high"), ("b", "low")]


def test_unavailable_tasks_are_skipped() -> None:
    tasks = [
        _scored(TaskCategory.MINING, 20.0, "taken", available=False),
        _scored(TaskCategory.MINING, 5.0, "open"),
    ]

    matches = AssignmentMatcher().match([SimulatedColonist("a")], tasks)

    assert matches[0].task.task_id == "open"


def test_experience_requirement_filters_tasks() -> None:
    novice = SimulatedColonist("novice")
    expert = SimulatedColonist("expert", experience={TaskCategory.RESEARCH: 4.0})
    tasks = [
        _scored(TaskCategory.RESEARCH, 30.0, "lab", required_experience=3.0),
        _scored(TaskCategory.MAINTENANCE, 1.0, "pump"),
    ]

    matches = AssignmentMatcher().match([novice, expert], tasks)

    assert [(match.colonist.colonist_id, match.task.task_id) for match in matches] == [
        ("novice", "pump"),
        ("expert", "lab"),
    ]


def test_distance_threshold_filters_far_tasks() -> None:
    matcher = AssignmentMatcher(ExperienceSuitability(max_distance=5.0))
    tasks = [
        _scored(TaskCategory.MINING, 30.0, "far", position=(100.0, 0.0)),
        _scored(TaskCategory.MINING, 10.0, "near", position=(3.0, 4.0)),
    ]

    matches = matcher.match([SimulatedColonist("a")], tasks)

    assert matches[0].task.task_id == "near"


def test_failing_suitability_check_disqualifies_only_that_pair() -> None:
    def suitability(colonist, task) -> bool:
        if task.task_id == "broken":
            raise KeyError("skill table missing")
        return True

    tasks = [
        _scored(TaskCategory.MINING, 30.0, "broken"),
        _scored(TaskCategory.MINING, 10.0, "fine"),
    ]

    matches = AssignmentMatcher(suitability).match([SimulatedColonist("a")], tasks)

    assert matches[0].task.task_id == "fine"
    assert tasks[0].task.available is True
