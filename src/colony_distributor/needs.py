"""Colony need estimation from current vs target resource levels."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from colony_distributor.contracts import ResourceTracker
from colony_distributor.models import TaskCategory


def resource_shortfall(
    current: Mapping[str, float],
    target: Mapping[str, float],
    resources: Iterable[str] | None = None,
) -> float:
    """Sum of relative shortfalls ``max(0, (target - current) / target)``.

    Resources without a positive target are ignored. ``resources`` limits the
    sum to the given names; by default every resource in ``current`` counts.
    """
    names = current.keys() if resources is None else resources
    need = 0.0
    for name in names:
        goal = target.get(name)
        if goal is None or goal <= 0:
            continue
        level = current.get(name, 0.0)
        need += max(0.0, (goal - level) / goal)
    return need


class ColonyNeedEstimator:
    def __init__(
        self,
        tracker: ResourceTracker,
        category_resources: Mapping[TaskCategory, Iterable[str]] | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._tracker = tracker
        self._category_resources = {
            TaskCategory(category): list(names) for category, names in (category_resources or {}).items()
        }
        self._logger = logger or logging.getLogger("colony_distributor.needs")

    def resource_need(self) -> float:
        """Diagnostic scalar over all tracked resources; 0 when the tracker fails."""
        try:
            need = resource_shortfall(self._tracker.get_current_levels(), self._tracker.get_target_levels())
        except Exception:  # noqa: BLE001 - tracker is an external data source.
            self._logger.exception("resource_need_failed")
            return 0.0
        self._logger.info("resource_need_calculated", extra={"need": need})
        return need

    def multiplier(self, category: TaskCategory) -> float:
        """Scale factor ``1 + shortfall`` over the resources mapped to ``category``.

        Tracker errors propagate so the caller can decide how to score.
        """
        resources = self._category_resources.get(category)
        if not resources:
            return 1.0
        current = self._tracker.get_current_levels()
        target = self._tracker.get_target_levels()
        return 1.0 + resource_shortfall(current, target, resources)
