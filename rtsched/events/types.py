"""Simulation event definitions."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventType(str, Enum):
    JOB_RELEASED = "JobReleased"
    JOB_EXECUTE = "JobExecute"
    PREEMPT = "Preempt"
    JOB_COMPLETE = "JobComplete"
    DEADLINE_MISS = "DeadlineMiss"
    IDLE = "Idle"


class SimEvent(BaseModel):
    """Normalized event envelope for tracing and metrics."""

    model_config = ConfigDict(extra="forbid")

    event_id: str
    seq: int = Field(ge=0)
    correlation_id: str
    time: int = Field(ge=0)
    type: EventType
    task_id: Optional[str] = None
    job_id: Optional[str] = None
    payload: dict[str, Any] = Field(default_factory=dict)

    def to_json(self) -> str:
        return json.dumps(self.model_dump(mode="json"), ensure_ascii=False)
