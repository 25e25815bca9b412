"""In-process colony collaborators.

These stand in for the game's entity, pathfinding and resource systems so
distribution cycles can run from the CLI and in tests without a live colony.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace

from colony_distributor.models import Position, Task, TaskCategory


@dataclass(slots=True)
class SimulatedColonist:
    """Colonist that works through a task when the simulation clock advances."""

    colonist_id: str
    position: Position = (0.0, 0.0)
    experience: dict[TaskCategory, float] = field(default_factory=dict)
    current_category: TaskCategory | None = None
    path: list[Position] = field(default_factory=list)
    target: Position | None = None
    remaining: float = 0.0
    _on_complete: Callable[[], None] | None = field(default=None, repr=False, compare=False)

    def is_free(self) -> bool:
        return self.current_category is None

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
        if not self.is_free():
            raise RuntimeError(f"Colonist {self.colonist_id} is busy with {self.current_category}")
        self.current_category = category
        self.path = list(path)
        self.target = target
        self.remaining = max(0.0, float(duration))
        self._on_complete = on_complete

    def gain_experience(self, category: TaskCategory, amount: float) -> None:
        self.experience[category] = self.experience.get(category, 0.0) + amount

    def advance(self, seconds: float) -> bool:
        """Advance the task timer; returns True when the task finished on this tick."""
        if self.is_free():
            return False
        self.remaining -= seconds
        if self.remaining > 0:
            return False

        if self.target is not None:
            self.position = self.target
        callback = self._on_complete
        self.current_category = None
        self.path = []
        self.target = None
        self.remaining = 0.0
        self._on_complete = None
        if callback is not None:
            callback()
        return True


class StaticTaskProvider:
    """Returns fresh copies of a fixed task list on every call."""

    def __init__(self, tasks: Sequence[Task]) -> None:
        self._tasks = list(tasks)

    def list_tasks(self) -> list[Task]:
        return [replace(task, attributes=dict(task.attributes)) for task in self._tasks]


class StraightLinePathfinder:
    """Waypoints along the straight segment between two points."""

    def __init__(self, step: float = 1.0) -> None:
        if step <= 0:
            raise ValueError("step must be positive")
        self.step = step

    def compute_path(self, start: Position, goal: Position) -> list[Position]:
        length = math.dist(start, goal)
        segments = max(1, math.ceil(length / self.step))
        return [
            (
                start[0] + (goal[0] - start[0]) * index / segments,
                start[1] + (goal[1] - start[1]) * index / segments,
            )
            for index in range(segments + 1)
        ]


class StaticResourceTracker:
    """Mutable current/target resource levels."""

    def __init__(self, current: Mapping[str, float], target: Mapping[str, float]) -> None:
        self.current = dict(current)
        self.target = dict(target)

    def get_current_levels(self) -> dict[str, float]:
        return dict(self.current)

    def get_target_levels(self) -> dict[str, float]:
        return dict(self.target)

    def set_level(self, resource: str, value: float) -> None:
        self.current[resource] = value
