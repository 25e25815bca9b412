"""Runtime configuration for the colony distributor."""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from colony_distributor.models import PriorityMatrix, TaskCategory


class CategoryPriorityConfig(BaseModel):
    """Base score and linear modifier weights for one task category."""

    base: float
    modifiers: dict[str, float] = Field(default_factory=dict)


def _default_priority_matrix() -> dict[TaskCategory, CategoryPriorityConfig]:
    return {
        TaskCategory.MINING: CategoryPriorityConfig(
            base=10,
            modifiers={"resource_scarcity": 2, "distance": -0.1, "difficulty": -0.5},
        ),
        TaskCategory.BUILDING: CategoryPriorityConfig(
            base=8,
            modifiers={"urgency": 1.5, "complexity": -0.3},
        ),
        TaskCategory.MAINTENANCE: CategoryPriorityConfig(
            base=5,
            modifiers={"critical_level": 2, "efficiency": 1},
        ),
        TaskCategory.RESEARCH: CategoryPriorityConfig(
            base=6,
            modifiers={"novelty": 1.5, "complexity": -0.2},
        ),
    }


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="COLONY_DISTRIBUTOR_", env_file=".env", extra="ignore")

    app_name: str = "colony-distributor"
    log_level: str = "INFO"
    priority_matrix: dict[TaskCategory, CategoryPriorityConfig] = Field(default_factory=_default_priority_matrix)
    ideal_distribution: dict[TaskCategory, float] = Field(
        default_factory=lambda: {
            TaskCategory.MINING: 0.35,
            TaskCategory.BUILDING: 0.3,
            TaskCategory.MAINTENANCE: 0.2,
            TaskCategory.RESEARCH: 0.15,
        },
        description="Target share of assignments per category; weights are normalized.",
    )
    category_resources: dict[TaskCategory, list[str]] = Field(
        default_factory=lambda: {
            TaskCategory.MINING: ["ore", "minerals"],
            TaskCategory.BUILDING: ["materials"],
            TaskCategory.MAINTENANCE: ["power", "oxygen"],
            TaskCategory.RESEARCH: [],
        },
        description="Resources whose shortfall raises the priority of a category.",
    )
    max_assignment_distance: float | None = None
    reassign_on_complete: bool = True
    strict_aggregation: bool = Field(
        default=False,
        description="Abort a cycle instead of degrading when a task provider fails.",
    )
    balance_tolerance: float = 1e-9
    history_path: str | None = None
    history_max_records: int = 1_000
    scenario_path: str | None = None

    def build_priority_matrix(self) -> PriorityMatrix:
        return PriorityMatrix.from_mapping(self.priority_matrix)


settings = Settings()
