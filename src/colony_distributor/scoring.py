"""Priority scoring and ranking of aggregated tasks."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from numbers import Real

from colony_distributor.models import AggregationResult, PriorityMatrix, ScoredTask, Task, TaskCategory

DERIVED_ATTRIBUTES: dict[str, Callable[[Task], float]] = {
    "distance": lambda task: task.distance,
}


class ScoringError(ValueError):
    """Raised when a task cannot be scored against the priority matrix."""


def attribute_value(task: Task, modifier: str) -> float:
    """Resolve a modifier to a finite number from task attributes or derived values."""
    if modifier in task.attributes:
        value = task.attributes[modifier]
    elif modifier in DERIVED_ATTRIBUTES:
        value = DERIVED_ATTRIBUTES[modifier](task)
    else:
        raise ScoringError(f"Task {task.task_id} has no attribute {modifier!r}")

    if not isinstance(value, Real):
        raise ScoringError(f"Attribute {modifier!r} of task {task.task_id} is not numeric: {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise ScoringError(f"Attribute {modifier!r} of task {task.task_id} is not finite")
    return value


class PriorityScorer:
    """Computes ``(base + sum(weight * attribute)) * colony need`` per task."""

    def __init__(
        self,
        need_multiplier: Callable[[TaskCategory], float] | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._need_multiplier = need_multiplier or (lambda category: 1.0)
        self._logger = logger or logging.getLogger("colony_distributor.scoring")

    def score(
        self,
        task: Task,
        category: TaskCategory,
        matrix: PriorityMatrix,
        *,
        need_multiplier: float | None = None,
    ) -> float:
        """Return the task priority, or 0 when any input cannot be resolved."""
        try:
            config = matrix.get(category)
            if config is None:
                raise ScoringError(f"No priority entry for category {category.value!r}")

            priority = float(config.base)
            for modifier, weight in config.modifiers.items():
                priority += attribute_value(task, modifier) * weight

            multiplier = self._need_multiplier(category) if need_multiplier is None else need_multiplier
            priority *= multiplier
            if not math.isfinite(priority):
                raise ScoringError(f"Priority for task {task.task_id} is not finite")
        except Exception as exc:  # noqa: BLE001 - a bad task must not abort the ranking.
            self._logger.error(
                "priority_calculation_failed",
                extra={"category": category.value, "task_id": task.task_id, "error": str(exc)},
            )
            return 0.0

        self._logger.debug(
            "priority_calculated",
            extra={"category": category.value, "task_id": task.task_id, "priority": priority},
        )
        return priority

    def prioritize(self, aggregation: AggregationResult, matrix: PriorityMatrix) -> list[ScoredTask]:
        """Flatten tasks in aggregation order and sort once by descending priority.

        The sort is stable, so equal priorities keep category then discovery order.
        """
        scored: list[ScoredTask] = []
        for category, tasks in aggregation.tasks.items():
            multiplier = self._category_multiplier(category) if tasks else None
            for task in tasks:
                if multiplier is None:
                    priority = 0.0
                else:
                    priority = self.score(task, category, matrix, need_multiplier=multiplier)
                scored.append(ScoredTask(task=task, priority=priority))

        scored.sort(key=lambda item: item.priority, reverse=True)
        if scored:
            top = scored[0]
            self._logger.info(
                "tasks_prioritized",
                extra={"count": len(scored), "top_category": top.task.category.value, "top_priority": top.priority},
            )
        else:
            self._logger.info("tasks_prioritized", extra={"count": 0})
        return scored

    def _category_multiplier(self, category: TaskCategory) -> float | None:
        try:
            multiplier = float(self._need_multiplier(category))
        except Exception:  # noqa: BLE001 - resource tracker is an external data source.
            self._logger.exception("need_multiplier_failed", extra={"category": category.value})
            return None
        if not math.isfinite(multiplier):
            self._logger.error("need_multiplier_not_finite", extra={"category": category.value})
            return None
        return multiplier
