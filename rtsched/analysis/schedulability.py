"""Utilization-based schedulability checks.

These are admission heuristics, not guarantees. The Liu-Layland bound used by
:func:`is_schedulable_rms` is sufficient but not necessary: a task set above
the bound may still meet every deadline under rate-monotonic scheduling, and
a set whose utilization is at most 1.0 can still miss deadlines under RM.
Run a simulation over the hyperperiod for a definitive answer.
"""

from __future__ import annotations

from functools import reduce
from math import gcd
from typing import Any, Iterable

from rtsched.model import Task


BOUND_EPSILON = 1e-12


def total_utilization(tasks: Iterable[Task]) -> float:
    return sum(task.execution_time / task.period for task in tasks)


def total_density(tasks: Iterable[Task]) -> float:
    return sum(task.execution_time / min(task.deadline or task.period, task.period) for task in tasks)


def rms_utilization_bound(task_count: int) -> float:
    """Return the Liu-Layland bound ``n * (2^(1/n) - 1)``."""
    if task_count <= 0:
        raise ValueError("task_count must be > 0")
    return task_count * (2 ** (1.0 / task_count) - 1)


def passes_rms_bound(utilization: float, task_count: int) -> bool:
    if task_count == 0:
        return True
    return utilization <= rms_utilization_bound(task_count) + BOUND_EPSILON


def is_schedulable_rms(tasks: Iterable[Task]) -> bool:
    """Advisory RM admission test against the Liu-Layland bound."""
    task_list = list(tasks)
    return passes_rms_bound(total_utilization(task_list), len(task_list))


def is_schedulable_edf(tasks: Iterable[Task]) -> bool:
    """EDF test: exact for implicit deadlines, sufficient (density) otherwise."""
    task_list = list(tasks)
    if all((task.deadline or task.period) >= task.period for task in task_list):
        return total_utilization(task_list) <= 1.0 + BOUND_EPSILON
    return total_density(task_list) <= 1.0 + BOUND_EPSILON


def hyperperiod(tasks: Iterable[Task]) -> int:
    periods = [task.period for task in tasks]
    if not periods:
        raise ValueError("hyperperiod requires at least one task")
    return reduce(lambda lhs, rhs: lhs * rhs // gcd(lhs, rhs), periods)


def analyze_task_set(tasks: Iterable[Task]) -> dict[str, Any]:
    task_list = list(tasks)
    count = len(task_list)
    utilization = total_utilization(task_list)
    return {
        "task_count": count,
        "total_utilization": utilization,
        "total_density": total_density(task_list),
        "rms_bound": rms_utilization_bound(count) if count else None,
        "rms_schedulable": passes_rms_bound(utilization, count),
        "edf_schedulable": is_schedulable_edf(task_list),
        "hyperperiod": hyperperiod(task_list) if count else None,
        "tasks": [
            {
                "id": task.id,
                "execution_time": task.execution_time,
                "period": task.period,
                "deadline": task.deadline,
                "utilization": task.utilization(),
            }
            for task in task_list
        ],
    }
