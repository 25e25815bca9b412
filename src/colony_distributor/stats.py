"""Assignment and completion counters owned by a distributor instance."""

from __future__ import annotations

from collections import Counter

from colony_distributor.models import TaskCategory


class WorkloadStats:
    """Monotonic count of successful assignments per task category.

    Only the lifecycle handler increments it. ``reset`` is provided for an
    external driver (e.g. a colony-day rollover); the distributor never calls it.
    """

    def __init__(self) -> None:
        self._counts: Counter[TaskCategory] = Counter()

    def increment(self, category: TaskCategory) -> int:
        self._counts[category] += 1
        return self._counts[category]

    def count(self, category: TaskCategory) -> int:
        return self._counts[category]

    def total(self) -> int:
        return sum(self._counts.values())

    def snapshot(self) -> dict[TaskCategory, int]:
        return dict(self._counts)

    def distribution(self) -> dict[TaskCategory, float]:
        total = self.total()
        if not total:
            return {}
        return {category: count / total for category, count in self._counts.items()}

    def reset(self) -> None:
        self._counts.clear()


class CompletionStats:
    """Completed tasks and experience granted per category."""

    def __init__(self) -> None:
        self._completed: Counter[TaskCategory] = Counter()
        self._experience: dict[TaskCategory, float] = {}

    def record(self, category: TaskCategory, experience_gain: float) -> None:
        self._completed[category] += 1
        self._experience[category] = self._experience.get(category, 0.0) + experience_gain

    def completed(self, category: TaskCategory) -> int:
        return self._completed[category]

    def experience_granted(self, category: TaskCategory) -> float:
        return self._experience.get(category, 0.0)

    def snapshot(self) -> dict[TaskCategory, dict[str, float]]:
        return {
            category: {"completed": count, "experience": self._experience.get(category, 0.0)}
            for category, count in self._completed.items()
        }
