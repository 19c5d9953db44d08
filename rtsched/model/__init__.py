"""Model package exports."""

from .result import IDLE, DeadlineMiss, ScheduleResult
from .runtime import TaskRuntime
from .spec import BatchSpec, ModelSpec, SchedulerSpec, SimSpec, TaskOverride, TaskSpec
from .task import InvalidParameterError, Task, TaskSet

__all__ = [
    "BatchSpec",
    "DeadlineMiss",
    "IDLE",
    "InvalidParameterError",
    "ModelSpec",
    "ScheduleResult",
    "SchedulerSpec",
    "SimSpec",
    "Task",
    "TaskOverride",
    "TaskRuntime",
    "TaskSet",
    "TaskSpec",
]
