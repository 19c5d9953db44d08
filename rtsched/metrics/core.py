"""Default metrics implementation."""

from __future__ import annotations

from collections import defaultdict

from rtsched.events import EventType, SimEvent

from .base import IMetric


def _task_bucket() -> dict[str, float]:
    return {
        "released": 0,
        "completed": 0,
        "missed": 0,
        "executed": 0,
        "preempted": 0,
        "max_response_time": 0.0,
    }


class CoreMetrics(IMetric):
    """Aggregate key simulation metrics from the event stream."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self._released = 0
        self._response_times: list[float] = []
        self._miss_count = 0
        self._preempt_count = 0
        self._busy_time = 0
        self._idle_time = 0
        self._event_count = 0
        self._max_time = 0
        self._per_task: dict[str, dict[str, float]] = defaultdict(_task_bucket)

    def consume(self, event: SimEvent) -> None:
        self._event_count += 1
        self._max_time = max(self._max_time, event.time)
        bucket = self._per_task[event.task_id] if event.task_id else None

        if event.type == EventType.JOB_RELEASED:
            self._released += 1
            if bucket is not None:
                bucket["released"] += 1

        elif event.type == EventType.JOB_EXECUTE:
            self._busy_time += 1
            if bucket is not None:
                bucket["executed"] += 1

        elif event.type == EventType.IDLE:
            self._idle_time += 1

        elif event.type == EventType.PREEMPT:
            self._preempt_count += 1
            if bucket is not None:
                bucket["preempted"] += 1

        elif event.type == EventType.DEADLINE_MISS:
            self._miss_count += 1
            if bucket is not None:
                bucket["missed"] += 1

        elif event.type == EventType.JOB_COMPLETE:
            response_time = event.payload.get("response_time")
            if isinstance(response_time, (int, float)):
                self._response_times.append(float(response_time))
                if bucket is not None:
                    bucket["max_response_time"] = max(bucket["max_response_time"], float(response_time))
            if bucket is not None:
                bucket["completed"] += 1

    def report(self) -> dict:
        completed = len(self._response_times)
        avg_response = sum(self._response_times) / completed if completed else 0.0
        max_response = max(self._response_times) if self._response_times else 0.0
        elapsed = self._busy_time + self._idle_time

        return {
            "jobs_released": self._released,
            "jobs_completed": completed,
            "deadline_miss_count": self._miss_count,
            "deadline_miss_ratio": self._miss_count / max(1, self._released),
            "avg_response_time": avg_response,
            "max_response_time": max_response,
            "preempt_count": self._preempt_count,
            "busy_time": self._busy_time,
            "idle_time": self._idle_time,
            "cpu_utilization": self._busy_time / elapsed if elapsed > 0 else 0.0,
            "event_count": self._event_count,
            "max_time": self._max_time,
            "per_task": {task_id: dict(bucket) for task_id, bucket in sorted(self._per_task.items())},
        }
