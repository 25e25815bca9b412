"""Boundaries for the colony collaborators the distributor reads or drives."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Protocol

from colony_distributor.models import Position, Task, TaskCategory


class Colonist(Protocol):
    """A worker able to perform one task at a time."""

    colonist_id: str
    position: Position
    experience: Mapping[TaskCategory, float]

    def is_free(self) -> bool:
        """Return whether the colonist can accept a new task."""

    def assign_task(
        self,
        *,
        category: TaskCategory,
        path: Sequence[Position],
        target: Position,
        duration: float,
        experience_gain: float,
        on_complete: Callable[[], None],
    ) -> None:
        """Start walking ``path`` and working on the task; call ``on_complete`` when done."""

    def gain_experience(self, category: TaskCategory, amount: float) -> None:
        """Add experience in a task category."""


class TaskProvider(Protocol):
    """Produces the current task candidates of one category."""

    def list_tasks(self) -> Sequence[Task]:
        """Return task descriptors for this cycle."""


class Pathfinder(Protocol):
    def compute_path(self, start: Position, goal: Position) -> Sequence[Position]:
        """Return an opaque route from ``start`` to ``goal``."""


class ResourceTracker(Protocol):
    """Reports current and target stock levels per resource."""

    def get_current_levels(self) -> Mapping[str, float]:
        ...

    def get_target_levels(self) -> Mapping[str, float]:
        ...
