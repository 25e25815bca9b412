"""Advisory workload balancing across task categories."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from colony_distributor.models import BalancingAction, BalancingKind, TaskCategory
from colony_distributor.stats import WorkloadStats


def normalize(weights: Mapping[TaskCategory, float]) -> dict[TaskCategory, float]:
    total = sum(weights.values())
    if total <= 0:
        return {}
    return {TaskCategory(category): weight / total for category, weight in weights.items()}


class WorkloadBalancer:
    """Compares recorded assignment counts with an ideal category mix."""

    def __init__(
        self,
        ideal_distribution: Mapping[TaskCategory, float],
        *,
        tolerance: float = 1e-9,
        logger: logging.Logger | None = None,
    ) -> None:
        self._ideal = dict(ideal_distribution)
        self._tolerance = tolerance
        self._logger = logger or logging.getLogger("colony_distributor.balancing")

    def balance(self, stats: WorkloadStats) -> list[BalancingAction]:
        try:
            return self._actions(stats)
        except Exception:  # noqa: BLE001 - balancing is advisory only.
            self._logger.exception("workload_balance_failed")
            return []

    def _actions(self, stats: WorkloadStats) -> list[BalancingAction]:
        counts = stats.snapshot()
        total = stats.total()
        ideal = normalize(self._ideal)
        current = stats.distribution()

        actions: list[BalancingAction] = []
        if total:
            for category, ideal_share in ideal.items():
                if category not in counts:
                    continue
                delta = ideal_share * total - counts[category]
                if abs(delta) <= self._tolerance:
                    continue
                actions.append(
                    BalancingAction(
                        category=category,
                        kind=BalancingKind.DEFICIT if delta > 0 else BalancingKind.SURPLUS,
                        amount=abs(delta),
                        current_share=current[category],
                        ideal_share=ideal_share,
                    )
                )

        self._logger.info(
            "workload_balance_calculated",
            extra={
                "current": {category.value: share for category, share in current.items()},
                "ideal": {category.value: share for category, share in ideal.items()},
                "actions": len(actions),
            },
        )
        return actions
