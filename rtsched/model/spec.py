"""Configuration domain models and semantic validation."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator

from .task import Task, TaskSet


class TaskSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1)
    execution_time: int = Field(gt=0)
    period: int = Field(gt=0)
    deadline: Optional[int] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def validate_timing_fields(self) -> "TaskSpec":
        if self.deadline is None:
            self.deadline = self.period
        if self.execution_time > self.period:
            raise ValueError(
                f"task '{self.id}' execution_time {self.execution_time} exceeds period {self.period}"
            )
        if self.deadline > self.period:
            raise ValueError(f"task '{self.id}' deadline {self.deadline} exceeds period {self.period}")
        return self

    def to_task(self) -> Task:
        return Task(self.id, self.execution_time, self.period, self.deadline)


class SchedulerSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    params: dict = Field(default_factory=dict)


class SimSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    horizon: Optional[int] = Field(default=None, gt=0)
    seed: int = 42


class ModelSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: str
    tasks: list[TaskSpec] = Field(min_length=1)
    scheduler: SchedulerSpec
    sim: SimSpec = Field(default_factory=SimSpec)

    @model_validator(mode="after")
    def validate_semantics(self) -> "ModelSpec":
        task_ids = [task.id for task in self.tasks]
        if len(task_ids) != len(set(task_ids)):
            duplicates = sorted({task_id for task_id in task_ids if task_ids.count(task_id) > 1})
            raise ValueError(f"duplicate tasks.id: {', '.join(duplicates)}")
        return self

    def build_task_set(self) -> TaskSet:
        return TaskSet(task.to_task() for task in self.tasks)


class TaskOverride(BaseModel):
    """Timing changes applied to one task of a batch variant."""

    model_config = ConfigDict(extra="forbid")

    execution_time: Optional[int] = Field(default=None, gt=0)
    period: Optional[int] = Field(default=None, gt=0)
    deadline: Optional[int] = Field(default=None, gt=0)


class BatchSpec(BaseModel):
    """Scheduler comparison matrix over one base config.

    Every empty axis falls back to the value of the base config.
    """

    model_config = ConfigDict(extra="forbid")

    version: str = "0.2"
    base_config: str = Field(min_length=1)
    output_dir: Optional[str] = None
    schedulers: list[str] = Field(default_factory=list)
    miss_policies: list[Literal["deadline", "next_release"]] = Field(default_factory=list)
    abort_on_miss: list[bool] = Field(default_factory=list)
    horizons: list[PositiveInt] = Field(default_factory=list)
    task_variants: list[dict[str, TaskOverride]] = Field(default_factory=list)
