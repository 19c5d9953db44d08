"""Simulation engine interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from rtsched.events import SimEvent
from rtsched.model import ScheduleResult, Task


class ISimEngine(ABC):
    """Simulation engine contract."""

    @abstractmethod
    def build(self, tasks: list[Task], horizon: int) -> None:
        """Build per-run state for ``tasks`` over ``horizon`` units."""

    @abstractmethod
    def run(self, until: int | None = None) -> None:
        """Run simulation until horizon."""

    @abstractmethod
    def step(self) -> None:
        """Simulate exactly one time unit."""

    @abstractmethod
    def pause(self) -> None:
        """Pause simulation loop (for incremental hosts)."""

    @abstractmethod
    def resume(self) -> None:
        """Resume a paused simulation loop."""

    @abstractmethod
    def stop(self) -> None:
        """Stop simulation loop permanently."""

    @abstractmethod
    def reset(self) -> None:
        """Reset engine state."""

    @abstractmethod
    def subscribe(self, handler: Callable[[SimEvent], None]) -> None:
        """Subscribe event handler."""

    @abstractmethod
    def result(self) -> ScheduleResult:
        """Return the schedule produced so far."""
