"""Colonist-to-task distribution and workload balancing for simulated colonies."""

from .distributor import ColonistDistributor
from .models import BalancingAction, PriorityMatrix, Task, TaskCategory

__all__ = ["BalancingAction", "ColonistDistributor", "PriorityMatrix", "Task", "TaskCategory"]
