"""Earliest deadline first scheduler."""

from __future__ import annotations

from rtsched.model import TaskRuntime

from .base import PriorityScheduler


class EDFScheduler(PriorityScheduler):
    """Dynamic-priority scheduler on absolute deadlines of current instances."""

    name = "edf"
    display_name = "Earliest Deadline First (EDF)"

    def __init__(self, params: dict | None = None) -> None:
        super().__init__(params=params)

    def priority_key(self, state: TaskRuntime, now: int) -> tuple:  # noqa: ARG002
        deadline = state.absolute_deadline if state.absolute_deadline is not None else float("inf")
        return (deadline, *self.tie_break_key(state))
