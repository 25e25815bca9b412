"""Simulated colony collaborators (colonists, providers, pathfinding, resources)."""

from .simulated import SimulatedColonist, StaticResourceTracker, StaticTaskProvider, StraightLinePathfinder

__all__ = [
    "SimulatedColonist",
    "StaticResourceTracker",
    "StaticTaskProvider",
    "StraightLinePathfinder",
]
