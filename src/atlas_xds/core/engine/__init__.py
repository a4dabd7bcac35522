"""Engine do pipeline: planner determinístico e executor de Steps."""

from .engine import Engine, RunResult
from .planner import CycleDetectedError, UnknownDependencyError, plan_execution

__all__ = [
    "Engine",
    "RunResult",
    "CycleDetectedError",
    "UnknownDependencyError",
    "plan_execution",
]
