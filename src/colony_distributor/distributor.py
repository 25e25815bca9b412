"""Orchestrates colonist distribution cycles."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import asdict
from datetime import datetime, timezone
from uuid import uuid4

from colony_distributor.aggregation import TaskAggregator
from colony_distributor.balancing import WorkloadBalancer
from colony_distributor.contracts import Colonist, Pathfinder, ResourceTracker, TaskProvider
from colony_distributor.history import AssignmentHistoryStore, AssignmentRecord, InMemoryHistoryStore
from colony_distributor.lifecycle import TaskLifecycleHandler
from colony_distributor.matching import AssignmentMatcher, ExperienceSuitability, Suitability
from colony_distributor.models import (
    AggregationResult,
    AggregationStatus,
    BalancingAction,
    DistributionCycle,
    PriorityMatrix,
    ScoredTask,
    TaskCategory,
)
from colony_distributor.needs import ColonyNeedEstimator
from colony_distributor.scoring import PriorityScorer
from colony_distributor.stats import CompletionStats, WorkloadStats
from colony_distributor.telemetry import Telemetry


class ColonistDistributor:
    """Assigns free colonists to the highest-priority tasks they can perform.

    One call to :meth:`auto_distribute_colonists` runs a full cycle:
    aggregate tasks, score them, match colonists greedily and start the
    assignments. Every step degrades to "assign nothing" on failure, so a
    cycle never raises to the driver. Cycles must not overlap.
    """

    def __init__(
        self,
        colonists: Iterable[Colonist],
        providers: Mapping[TaskCategory, TaskProvider],
        pathfinder: Pathfinder,
        resources: ResourceTracker,
        *,
        priority_matrix: PriorityMatrix,
        ideal_distribution: Mapping[TaskCategory, float],
        category_resources: Mapping[TaskCategory, Iterable[str]] | None = None,
        suitability: Suitability | None = None,
        workload_stats: WorkloadStats | None = None,
        history_store: AssignmentHistoryStore | None = None,
        telemetry: Telemetry | None = None,
        reassign_on_complete: bool = True,
        strict_aggregation: bool = False,
        balance_tolerance: float = 1e-9,
        logger: logging.Logger | None = None,
    ) -> None:
        self._colonists = colonists
        self._priority_matrix = priority_matrix
        self._strict_aggregation = strict_aggregation
        self._telemetry = telemetry
        self._history_store = history_store or InMemoryHistoryStore()
        self._logger = logger or logging.getLogger("colony_distributor.distributor")

        self._needs = ColonyNeedEstimator(resources, category_resources)
        self._aggregator = TaskAggregator(providers)
        self._scorer = PriorityScorer(self._needs.multiplier)
        self._matcher = AssignmentMatcher(suitability or ExperienceSuitability())
        self._balancer = WorkloadBalancer(ideal_distribution, tolerance=balance_tolerance)
        self._lifecycle = TaskLifecycleHandler(
            pathfinder,
            workload_stats=workload_stats,
            history_store=self._history_store,
            reassign=self._reassign_colonist if reassign_on_complete else None,
        )
        self._logger.info("distributor_initialized")

    @property
    def workload_stats(self) -> WorkloadStats:
        return self._lifecycle.workload_stats

    @property
    def completion_stats(self) -> CompletionStats:
        return self._lifecycle.completion_stats

    @property
    def lifecycle(self) -> TaskLifecycleHandler:
        return self._lifecycle

    def auto_distribute_colonists(self) -> None:
        """Run one full distribution cycle."""
        self.run_cycle()

    def run_cycle(self) -> DistributionCycle:
        cycle = DistributionCycle(cycle_id=uuid4().hex)
        self._logger.info("distribution_started", extra={"cycle_id": cycle.cycle_id})
        try:
            self._run_cycle(cycle)
        except Exception:  # noqa: BLE001 - a failed cycle still completes.
            cycle.aborted = True
            self._logger.exception("distribution_failed", extra={"cycle_id": cycle.cycle_id})
        cycle.finished_at = datetime.now(timezone.utc)

        self._logger.info(
            "distribution_completed",
            extra={
                "cycle_id": cycle.cycle_id,
                "assigned": len(cycle.assignments),
                "unassigned": len(cycle.unassigned),
            },
        )
        self._emit_cycle(cycle)
        return cycle

    def get_free_colonists(self) -> list[Colonist]:
        free: list[Colonist] = []
        for colonist in self._colonists:
            try:
                if colonist.is_free():
                    free.append(colonist)
            except Exception:  # noqa: BLE001 - skip colonists whose status cannot be read.
                self._logger.exception(
                    "colonist_status_failed",
                    extra={"colonist_id": getattr(colonist, "colonist_id", None)},
                )
        self._logger.info("free_colonists_found", extra={"count": len(free)})
        return free

    def collect_tasks(self) -> AggregationResult:
        return self._aggregator.collect_tasks()

    def prioritize_tasks(self, aggregation: AggregationResult) -> list[ScoredTask]:
        return self._scorer.prioritize(aggregation, self._priority_matrix)

    def process_completions(self) -> int:
        """Handle every completion reported by colonists since the last call."""
        return self._lifecycle.process_completions()

    def balance_workload(self) -> list[BalancingAction]:
        return self._balancer.balance(self.workload_stats)

    def calculate_resource_need(self) -> float:
        return self._needs.resource_need()

    def colony_need_multiplier(self, category: TaskCategory) -> float:
        try:
            return self._needs.multiplier(category)
        except Exception:  # noqa: BLE001 - diagnostic only.
            self._logger.exception("need_multiplier_failed", extra={"category": category.value})
            return 1.0

    def list_recent_assignments(self, limit: int = 20) -> list[AssignmentRecord]:
        return self._history_store.list_recent(limit)

    def _run_cycle(self, cycle: DistributionCycle) -> None:
        free_colonists = self.get_free_colonists()
        cycle.free_colonists = len(free_colonists)
        if not free_colonists:
            return

        aggregation = self.collect_tasks()
        cycle.task_count = aggregation.task_count()
        cycle.aggregation_status = aggregation.status
        cycle.failed_categories = list(aggregation.failed_categories)
        if aggregation.status is AggregationStatus.PARTIAL and self._strict_aggregation:
            cycle.aborted = True
            cycle.unassigned = [colonist.colonist_id for colonist in free_colonists]
            self._logger.warning(
                "distribution_aborted",
                extra={"failed_categories": [category.value for category in aggregation.failed_categories]},
            )
            return

        prioritized = self.prioritize_tasks(aggregation)
        matches = self._matcher.match(free_colonists, prioritized)
        matched_ids = {match.colonist.colonist_id for match in matches}
        cycle.unassigned = [
            colonist.colonist_id for colonist in free_colonists if colonist.colonist_id not in matched_ids
        ]

        for match in matches:
            result = self._lifecycle.assign(match)
            if result.ok:
                cycle.assignments.append((result.colonist_id, result.category, result.task_id))
            else:
                cycle.failed_assignments += 1
                cycle.unassigned.append(result.colonist_id)

    def _reassign_colonist(self, colonist: Colonist) -> bool:
        aggregation = self.collect_tasks()
        if aggregation.status is AggregationStatus.PARTIAL and self._strict_aggregation:
            return False
        prioritized = self.prioritize_tasks(aggregation)
        matches = self._matcher.match([colonist], prioritized)
        if not matches:
            return False
        return self._lifecycle.assign(matches[0]).ok

    def _emit_cycle(self, cycle: DistributionCycle) -> None:
        if self._telemetry is None:
            return
        try:
            self._telemetry.emit("distribution_cycle_completed", asdict(cycle))
        except Exception:  # noqa: BLE001 - telemetry never gates distribution.
            self._logger.exception("telemetry_emit_failed", extra={"cycle_id": cycle.cycle_id})
