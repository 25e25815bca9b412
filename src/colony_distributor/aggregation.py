"""Collects task candidates from the per-category providers."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from colony_distributor.contracts import TaskProvider
from colony_distributor.models import AggregationResult, TaskCategory


class TaskAggregator:
    """Queries each category provider independently so one failure never hides the rest."""

    def __init__(
        self,
        providers: Mapping[TaskCategory, TaskProvider],
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._providers = {TaskCategory(category): provider for category, provider in providers.items()}
        self._logger = logger or logging.getLogger("colony_distributor.aggregation")

    def collect_tasks(self) -> AggregationResult:
        result = AggregationResult()
        for category in TaskCategory:
            provider = self._providers.get(category)
            if provider is None:
                continue
            try:
                tasks = list(provider.list_tasks())
            except Exception:  # noqa: BLE001 - provider is an external data source.
                result.failed_categories.append(category)
                self._logger.exception("task_provider_failed", extra={"category": category.value})
                continue

            mismatched = [task.task_id for task in tasks if task.category != category]
            if mismatched:
                self._logger.warning(
                    "task_category_mismatch",
                    extra={"category": category.value, "task_ids": mismatched},
                )
            result.tasks[category] = tasks

        self._logger.info(
            "tasks_collected",
            extra={
                "counts": {category.value: len(tasks) for category, tasks in result.tasks.items()},
                "failed_categories": [category.value for category in result.failed_categories],
                "status": result.status.value,
            },
        )
        return result
