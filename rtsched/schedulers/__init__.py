"""Schedulers package exports."""

from .base import IScheduler, PriorityScheduler
from .edf import EDFScheduler
from .registry import available_schedulers, create_scheduler, register_scheduler
from .rm import RMScheduler

__all__ = [
    "EDFScheduler",
    "IScheduler",
    "PriorityScheduler",
    "RMScheduler",
    "available_schedulers",
    "create_scheduler",
    "register_scheduler",
]
