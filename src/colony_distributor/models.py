from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import uuid4

if TYPE_CHECKING:
    from colony_distributor.contracts import Colonist

Position = tuple[float, float]


class TaskCategory(str, Enum):
    MINING = "mining"
    BUILDING = "building"
    MAINTENANCE = "maintenance"
    RESEARCH = "research"


@dataclass(slots=True)
class Task:
    """A unit of work offered by a category provider for one cycle."""

    category: TaskCategory
    position: Position
    target: Position
    estimated_duration: float
    experience_gain: float
    available: bool = True
    attributes: dict[str, Any] = field(default_factory=dict)
    required_experience: float = 0.0
    task_id: str = field(default_factory=lambda: uuid4().hex)

    @property
    def distance(self) -> float:
        return math.dist(self.position, self.target)


@dataclass(slots=True)
class ScoredTask:
    task: Task
    priority: float


@dataclass(slots=True, frozen=True)
class CategoryPriority:
    base: float
    modifiers: Mapping[str, float] = field(default_factory=dict)


class PriorityMatrix:
    """Static base score and modifier weights per task category."""

    def __init__(self, entries: Mapping[TaskCategory, CategoryPriority]) -> None:
        self._entries = dict(entries)

    @classmethod
    def from_mapping(cls, raw: Mapping[Any, Any]) -> PriorityMatrix:
        entries: dict[TaskCategory, CategoryPriority] = {}
        for category, config in raw.items():
            base = getattr(config, "base", None)
            modifiers = getattr(config, "modifiers", None)
            if isinstance(config, Mapping):
                base = config.get("base", 0.0)
                modifiers = config.get("modifiers", {})
            entries[TaskCategory(category)] = CategoryPriority(
                base=float(base or 0.0),
                modifiers={str(name): float(weight) for name, weight in (modifiers or {}).items()},
            )
        return cls(entries)

    def get(self, category: TaskCategory) -> CategoryPriority | None:
        return self._entries.get(category)

    def categories(self) -> list[TaskCategory]:
        return list(self._entries)


@dataclass(slots=True)
class Match:
    colonist: Colonist
    scored: ScoredTask

    @property
    def task(self) -> Task:
        return self.scored.task


@dataclass(slots=True)
class AssignmentResult:
    colonist_id: str
    task_id: str
    category: TaskCategory
    ok: bool
    assignment_id: str | None = None
    error: str | None = None


@dataclass(slots=True, frozen=True)
class TaskCompleted:
    """Completion signal queued by a colonist's ``on_complete`` callback."""

    colonist_id: str
    category: TaskCategory
    experience_gain: float
    assignment_id: str
    task_id: str


class AggregationStatus(str, Enum):
    OK = "ok"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(slots=True)
class AggregationResult:
    tasks: dict[TaskCategory, list[Task]] = field(default_factory=dict)
    failed_categories: list[TaskCategory] = field(default_factory=list)

    @property
    def status(self) -> AggregationStatus:
        if not self.failed_categories:
            return AggregationStatus.OK
        if self.tasks:
            return AggregationStatus.PARTIAL
        return AggregationStatus.FAILED

    def task_count(self) -> int:
        return sum(len(tasks) for tasks in self.tasks.values())


class BalancingKind(str, Enum):
    DEFICIT = "deficit"
    SURPLUS = "surplus"


@dataclass(slots=True, frozen=True)
class BalancingAction:
    """Advisory correction: favor (deficit) or hold back (surplus) a category."""

    category: TaskCategory
    kind: BalancingKind
    amount: float
    current_share: float
    ideal_share: float


@dataclass(slots=True)
class DistributionCycle:
    cycle_id: str
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None
    free_colonists: int = 0
    task_count: int = 0
    aggregation_status: AggregationStatus = AggregationStatus.OK
    failed_categories: list[TaskCategory] = field(default_factory=list)
    assignments: list[tuple[str, TaskCategory, str]] = field(default_factory=list)
    unassigned: list[str] = field(default_factory=list)
    failed_assignments: int = 0
    aborted: bool = False
