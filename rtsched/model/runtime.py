"""Runtime types shared across the simulation engine and schedulers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .task import Task


@dataclass(slots=True)
class TaskRuntime:
    """Engine-internal mutable state for one task during a single run."""

    task_id: str
    execution_time: int
    period: int
    deadline: int
    position: int
    remaining: int
    next_release: int = 0
    release_time: Optional[int] = None
    absolute_deadline: Optional[int] = None
    job_index: int = 0
    missed: bool = False

    @classmethod
    def from_task(cls, task: Task, position: int) -> "TaskRuntime":
        deadline = task.deadline if task.deadline is not None else task.period
        return cls(
            task_id=task.id,
            execution_time=task.execution_time,
            period=task.period,
            deadline=deadline,
            position=position,
            remaining=task.execution_time,
            absolute_deadline=deadline,
        )

    @property
    def job_id(self) -> str:
        return f"{self.task_id}@{self.job_index}"

    @property
    def ready(self) -> bool:
        return self.remaining > 0

    def release(self, now: int) -> None:
        if self.release_time is not None:
            self.job_index += 1
        self.remaining = self.execution_time
        self.release_time = now
        self.absolute_deadline = now + self.deadline
        self.next_release = now + self.period
        self.missed = False
