"""Periodic task definitions and ordered task collections."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional


class InvalidParameterError(ValueError):
    """Raised when a task or task set receives an invalid parameter."""


@dataclass(slots=True)
class Task:
    """Periodic task with static timing parameters and per-instance state.

    ``deadline`` defaults to ``period`` when omitted. ``remaining`` and
    ``next_release`` are runtime fields and take no part in equality.
    """

    id: str
    execution_time: int
    period: int
    deadline: Optional[int] = None
    remaining: int = field(default=0, init=False, compare=False)
    next_release: int = field(default=0, init=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise InvalidParameterError("task id must be a non-empty string")
        if self.deadline is None:
            self.deadline = self.period
        for name in ("execution_time", "period", "deadline"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidParameterError(f"task '{self.id}' {name} must be an integer, got {value!r}")
            if value <= 0:
                raise InvalidParameterError(f"task '{self.id}' {name} must be > 0, got {value}")
        self.reset()

    def reset(self) -> None:
        self.remaining = self.execution_time
        self.next_release = 0

    def utilization(self) -> float:
        return self.execution_time / self.period


class TaskSet:
    """Insertion-ordered task collection keyed by task id."""

    def __init__(self, tasks: Iterable[Task] | None = None) -> None:
        self._tasks: list[Task] = []
        for task in tasks or ():
            self.add(task)

    def add(self, task: Task) -> None:
        if self.get_by_id(task.id) is not None:
            raise InvalidParameterError(f"duplicate task id '{task.id}'")
        self._tasks.append(task)

    def remove(self, task: Task) -> None:
        for idx, candidate in enumerate(self._tasks):
            if candidate == task:
                del self._tasks[idx]
                return

    def get_by_id(self, task_id: str) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def get(self, index: int) -> Task | None:
        if 0 <= index < len(self._tasks):
            return self._tasks[index]
        return None

    def size(self) -> int:
        return len(self._tasks)

    def clear(self) -> None:
        self._tasks.clear()

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks))

    def __repr__(self) -> str:
        return f"TaskSet({self._tasks!r})"
