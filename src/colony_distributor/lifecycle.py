"""Assignment execution and completion handling for colonist-task pairings."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from uuid import uuid4

from colony_distributor.contracts import Colonist, Pathfinder
from colony_distributor.history import AssignmentHistoryStore, AssignmentRecord, AssignmentStatus, InMemoryHistoryStore
from colony_distributor.models import AssignmentResult, Match, TaskCategory, TaskCompleted
from colony_distributor.stats import CompletionStats, WorkloadStats

ReassignHook = Callable[[Colonist], bool]


@dataclass(slots=True)
class ActiveAssignment:
    assignment_id: str
    colonist: Colonist
    category: TaskCategory
    task_id: str
    experience_gain: float


class TaskLifecycleHandler:
    """Moves colonists from Free to Assigned and back once completion is reported.

    Colonists signal completion through their ``on_complete`` callback, which
    only queues a :class:`TaskCompleted` event. ``process_completions`` drains
    the queue, so completions never run inside a distribution cycle unless the
    driver asks for it.
    """

    def __init__(
        self,
        pathfinder: Pathfinder,
        *,
        workload_stats: WorkloadStats | None = None,
        completion_stats: CompletionStats | None = None,
        history_store: AssignmentHistoryStore | None = None,
        reassign: ReassignHook | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._pathfinder = pathfinder
        self.workload_stats = workload_stats or WorkloadStats()
        self.completion_stats = completion_stats or CompletionStats()
        self._history_store = history_store or InMemoryHistoryStore()
        self._reassign = reassign
        self._logger = logger or logging.getLogger("colony_distributor.lifecycle")

        self._active: dict[str, ActiveAssignment] = {}
        self._events: deque[TaskCompleted] = deque()

    @property
    def active_assignments(self) -> dict[str, ActiveAssignment]:
        """In-flight assignments keyed by assignment id."""
        return dict(self._active)

    @property
    def pending_completions(self) -> int:
        return len(self._events)

    def set_reassign_hook(self, reassign: ReassignHook | None) -> None:
        self._reassign = reassign

    def assign(self, match: Match) -> AssignmentResult:
        colonist = match.colonist
        task = match.task
        assignment_id = uuid4().hex
        event = TaskCompleted(
            colonist_id=colonist.colonist_id,
            category=task.category,
            experience_gain=task.experience_gain,
            assignment_id=assignment_id,
            task_id=task.task_id,
        )
        try:
            path = self._pathfinder.compute_path(colonist.position, task.position)
            colonist.assign_task(
                category=task.category,
                path=path,
                target=task.target,
                duration=task.estimated_duration,
                experience_gain=task.experience_gain,
                on_complete=lambda: self._events.append(event),
            )
        except Exception as exc:  # noqa: BLE001 - colonist stays free, nothing is committed.
            error = f"{type(exc).__name__}: {exc}"
            self._logger.exception(
                "assignment_failed",
                extra={"colonist_id": colonist.colonist_id, "task_id": task.task_id, "category": task.category.value},
            )
            self._history_store.append(
                AssignmentRecord(
                    colonist_id=colonist.colonist_id,
                    category=task.category,
                    task_id=task.task_id,
                    status=AssignmentStatus.FAILED,
                    priority=match.scored.priority,
                    error=error,
                )
            )
            return AssignmentResult(
                colonist_id=colonist.colonist_id,
                task_id=task.task_id,
                category=task.category,
                ok=False,
                error=error,
            )

        count = self.workload_stats.increment(task.category)
        self._active[assignment_id] = ActiveAssignment(
            assignment_id=assignment_id,
            colonist=colonist,
            category=task.category,
            task_id=task.task_id,
            experience_gain=task.experience_gain,
        )
        self._history_store.append(
            AssignmentRecord(
                colonist_id=colonist.colonist_id,
                category=task.category,
                task_id=task.task_id,
                status=AssignmentStatus.ASSIGNED,
                priority=match.scored.priority,
            )
        )
        self._logger.info(
            "colonist_assigned",
            extra={
                "colonist_id": colonist.colonist_id,
                "task_id": task.task_id,
                "category": task.category.value,
                "workload_count": count,
            },
        )
        return AssignmentResult(
            colonist_id=colonist.colonist_id,
            task_id=task.task_id,
            category=task.category,
            ok=True,
            assignment_id=assignment_id,
        )

    def process_completions(self) -> int:
        """Drain queued completion events; returns how many were handled."""
        handled = 0
        while self._events:
            event = self._events.popleft()
            if self.handle_completion(event):
                handled += 1
        return handled

    def handle_completion(self, event: TaskCompleted) -> bool:
        active = self._active.get(event.assignment_id)
        if active is None:
            self._logger.warning(
                "stale_completion_skipped",
                extra={"colonist_id": event.colonist_id, "task_id": event.task_id},
            )
            return False

        colonist = active.colonist
        try:
            colonist.gain_experience(event.category, event.experience_gain)
        except Exception:  # noqa: BLE001 - one colonist's completion must not block the others.
            self._logger.exception(
                "task_completion_failed",
                extra={"colonist_id": event.colonist_id, "task_id": event.task_id},
            )
            return False

        del self._active[event.assignment_id]
        self.completion_stats.record(event.category, event.experience_gain)
        self._logger.info(
            "task_completed",
            extra={"colonist_id": event.colonist_id, "task_id": event.task_id, "category": event.category.value},
        )
        try:
            self._history_store.append(
                AssignmentRecord(
                    colonist_id=event.colonist_id,
                    category=event.category,
                    task_id=event.task_id,
                    status=AssignmentStatus.COMPLETED,
                )
            )
        except Exception:  # noqa: BLE001 - history is a record, not state.
            self._logger.exception(
                "completion_history_failed",
                extra={"colonist_id": event.colonist_id, "task_id": event.task_id},
            )
        try:
            self._check_for_reassignment(colonist)
        except Exception:  # noqa: BLE001 - the completion itself is already committed.
            self._logger.exception("reassignment_failed", extra={"colonist_id": event.colonist_id})
        return True

    def _check_for_reassignment(self, colonist: Colonist) -> None:
        if self._reassign is None or not colonist.is_free():
            return
        if self._reassign(colonist):
            self._logger.info("colonist_reassigned", extra={"colonist_id": colonist.colonist_id})
