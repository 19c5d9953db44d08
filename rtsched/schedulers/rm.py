"""Rate-monotonic scheduler."""

from __future__ import annotations

from rtsched.model import Task, TaskRuntime

from .base import PriorityScheduler


class RMScheduler(PriorityScheduler):
    """Fixed-priority scheduler: the shorter the period, the higher the priority."""

    name = "rm"
    display_name = "Rate Monotonic Scheduling (RMS)"

    def __init__(self, params: dict | None = None) -> None:
        super().__init__(params=params)

    def order(self, tasks: list[Task]) -> list[Task]:
        # sorted() is stable, equal periods keep insertion order.
        return sorted(tasks, key=lambda task: task.period)

    def priority_key(self, state: TaskRuntime, now: int) -> tuple:  # noqa: ARG002
        return (state.period, *self.tie_break_key(state))
