"""Immutable simulation output."""

from __future__ import annotations

import json
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


IDLE = "IDLE"


class DeadlineMiss(BaseModel):
    """One detected deadline miss."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    task_id: str
    time: int = Field(ge=0)
    job_index: int = Field(default=0, ge=0)
    absolute_deadline: Optional[int] = None

    def message(self) -> str:
        return f"Task {self.task_id} missed deadline at time {self.time}"


class ScheduleResult(BaseModel):
    """Per-unit timeline plus the deadline misses of one scheduling run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    scheduler: str
    horizon: int = Field(ge=0)
    timeline: tuple[str, ...] = ()
    missed_deadlines: tuple[DeadlineMiss, ...] = ()

    @property
    def miss_count(self) -> int:
        return len(self.missed_deadlines)

    @property
    def is_feasible(self) -> bool:
        return not self.missed_deadlines

    @property
    def idle_units(self) -> int:
        return sum(1 for slot in self.timeline if slot == IDLE)

    @property
    def busy_ratio(self) -> float:
        if not self.timeline:
            return 0.0
        return (len(self.timeline) - self.idle_units) / len(self.timeline)

    def task_units(self, task_id: str) -> int:
        return sum(1 for slot in self.timeline if slot == task_id)

    def miss_messages(self) -> list[str]:
        return [miss.message() for miss in self.missed_deadlines]

    def to_json(self) -> str:
        return json.dumps(self.model_dump(mode="json"), ensure_ascii=False)
