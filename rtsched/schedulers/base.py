"""Scheduler interfaces and base classes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable

from rtsched.core import SimEngine
from rtsched.model import ScheduleResult, Task, TaskRuntime


class IScheduler(ABC):
    """Dispatch policy driven by the simulation engine."""

    name: str = ""
    display_name: str = ""

    @property
    @abstractmethod
    def params(self) -> dict[str, Any]:
        """Return the resolved scheduler parameters."""

    @property
    def miss_policy(self) -> str:
        return str(self.params.get("miss_policy", "deadline"))

    @property
    def abort_on_miss(self) -> bool:
        return bool(self.params.get("abort_on_miss", False))

    def order(self, tasks: list[Task]) -> list[Task]:
        """Return the working task order used for releases and tie-breaks."""
        return list(tasks)

    @abstractmethod
    def priority_key(self, state: TaskRuntime, now: int) -> tuple:
        """Return a sortable key. Lower tuple = higher priority."""

    @abstractmethod
    def schedule(self, tasks: Iterable[Task], horizon: int) -> ScheduleResult:
        """Simulate ``tasks`` for ``horizon`` units and return the result."""


class PriorityScheduler(IScheduler, ABC):
    """Preemptive single-processor scheduler with a per-instant priority key."""

    MISS_POLICIES = frozenset({"deadline", "next_release"})
    DEFAULT_MISS_POLICY = "deadline"

    def __init__(self, params: dict | None = None) -> None:
        raw = dict(params or {})
        miss_policy = str(raw.get("miss_policy", self.DEFAULT_MISS_POLICY)).strip().lower()
        if miss_policy not in self.MISS_POLICIES:
            allowed = ", ".join(sorted(self.MISS_POLICIES))
            raise ValueError(f"invalid miss_policy '{miss_policy}', expected one of: {allowed}")
        abort_on_miss = raw.get("abort_on_miss", False)
        if not isinstance(abort_on_miss, bool):
            raise ValueError("abort_on_miss must be boolean")
        raw["miss_policy"] = miss_policy
        raw["abort_on_miss"] = abort_on_miss
        self._params = raw

    @property
    def params(self) -> dict[str, Any]:
        return dict(self._params)

    @staticmethod
    def tie_break_key(state: TaskRuntime) -> tuple:
        return (state.position,)

    def schedule(self, tasks: Iterable[Task], horizon: int) -> ScheduleResult:
        engine = SimEngine(self)
        engine.build(list(tasks), horizon)
        engine.run()
        return engine.result()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(params={self._params!r})"
