"""Greedy colonist-to-task matching over the prioritized task list."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence

from colony_distributor.contracts import Colonist
from colony_distributor.models import Match, ScoredTask, Task

Suitability = Callable[[Colonist, Task], bool]


class ExperienceSuitability:
    """Colonist qualifies when experienced enough and, optionally, close enough."""

    def __init__(self, max_distance: float | None = None) -> None:
        self.max_distance = max_distance

    def __call__(self, colonist: Colonist, task: Task) -> bool:
        experience = colonist.experience.get(task.category, 0.0)
        if experience < task.required_experience:
            return False
        if self.max_distance is not None and math.dist(colonist.position, task.position) > self.max_distance:
            return False
        return True


class AssignmentMatcher:
    """Gives each free colonist the first suitable, still-available task.

    A matched task is consumed on the spot, so a single pass never hands the
    same task to two colonists.
    """

    def __init__(self, suitability: Suitability | None = None, *, logger: logging.Logger | None = None) -> None:
        self._suitability = suitability or ExperienceSuitability()
        self._logger = logger or logging.getLogger("colony_distributor.matching")

    def match(self, free_colonists: Sequence[Colonist], prioritized: Sequence[ScoredTask]) -> list[Match]:
        matches: list[Match] = []
        for colonist in free_colonists:
            scored = self.find_best_task(colonist, prioritized)
            if scored is None:
                self._logger.warning("no_suitable_task", extra={"colonist_id": colonist.colonist_id})
                continue
            scored.task.available = False
            matches.append(Match(colonist=colonist, scored=scored))
        return matches

    def find_best_task(self, colonist: Colonist, prioritized: Sequence[ScoredTask]) -> ScoredTask | None:
        for scored in prioritized:
            if not scored.task.available:
                continue
            if self._is_suitable(colonist, scored.task):
                self._logger.debug(
                    "task_found",
                    extra={
                        "colonist_id": colonist.colonist_id,
                        "task_id": scored.task.task_id,
                        "category": scored.task.category.value,
                    },
                )
                return scored
        return None

    def _is_suitable(self, colonist: Colonist, task: Task) -> bool:
        try:
            return bool(self._suitability(colonist, task))
        except Exception:  # noqa: BLE001 - one bad pair only disqualifies that pair.
            self._logger.exception(
                "suitability_check_failed",
                extra={"colonist_id": colonist.colonist_id, "task_id": task.task_id},
            )
            return False
