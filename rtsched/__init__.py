"""Discrete-time simulator for rate-monotonic and EDF scheduling of periodic tasks."""

from .model import IDLE, DeadlineMiss, InvalidParameterError, ScheduleResult, Task, TaskSet
from .schedulers import EDFScheduler, RMScheduler, create_scheduler

__all__ = [
    "DeadlineMiss",
    "EDFScheduler",
    "IDLE",
    "InvalidParameterError",
    "RMScheduler",
    "ScheduleResult",
    "Task",
    "TaskSet",
    "create_scheduler",
]

__version__ = "0.2.0"
