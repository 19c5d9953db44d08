"""Parsing of free-form task fields as entered in a form or on the command line."""

from __future__ import annotations

from rtsched.model import InvalidParameterError, Task

from .loader import ConfigError


def _parse_int(name: str, raw: str | int) -> int:
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    text = str(raw).strip()
    try:
        return int(text)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def parse_task_input(
    task_id: str | None,
    execution_time: str | int,
    period: str | int,
    deadline: str | int | None = None,
) -> Task:
    """Build a Task from user-supplied fields.

    An empty deadline falls back to the period. Beyond positivity, the
    execution time and deadline must not exceed the period.
    """
    if task_id is None or not str(task_id).strip():
        raise ConfigError("task id must not be empty")
    task_id = str(task_id).strip()
    exec_value = _parse_int("execution_time", execution_time)
    period_value = _parse_int("period", period)
    if deadline is None or (isinstance(deadline, str) and not deadline.strip()):
        deadline_value = period_value
    else:
        deadline_value = _parse_int("deadline", deadline)

    try:
        task = Task(task_id, exec_value, period_value, deadline_value)
    except InvalidParameterError as exc:
        raise ConfigError(str(exc)) from exc
    if exec_value > period_value:
        raise ConfigError(f"task '{task_id}' execution_time {exec_value} exceeds period {period_value}")
    if deadline_value > period_value:
        raise ConfigError(f"task '{task_id}' deadline {deadline_value} exceeds period {period_value}")
    return task


def parse_task_spec(text: str) -> Task:
    """Parse ``ID:C:T[:D]`` shorthand, e.g. ``A:1:4`` or ``B:2:5:4``."""
    parts = [part.strip() for part in text.split(":")]
    if len(parts) not in (3, 4):
        raise ConfigError(f"task shorthand must be ID:C:T[:D], got {text!r}")
    return parse_task_input(*parts)
