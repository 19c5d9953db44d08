"""SimPy-backed unit-step simulation engine."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Any, Callable, Iterator

import simpy

from rtsched.events import EventBus, EventType, SimEvent
from rtsched.metrics import CoreMetrics, IMetric
from rtsched.model import IDLE, DeadlineMiss, ScheduleResult, Task, TaskRuntime

from .interfaces import ISimEngine

if TYPE_CHECKING:
    from rtsched.schedulers import IScheduler


class SimEngine(ISimEngine):
    """Discrete-time engine advancing a SimPy clock one unit per step.

    Each unit runs three phases in order: deadline check, periodic releases,
    then dispatch of the highest-priority ready task as ranked by the
    scheduler's ``priority_key``. Runtime state is kept in ``TaskRuntime``
    records, so the caller's ``Task`` objects are never modified.
    """

    DEFAULT_EVENT_ID_MODE = "deterministic"
    VALID_EVENT_ID_MODES = EventBus.VALID_EVENT_ID_MODES

    def __init__(
        self,
        scheduler: IScheduler,
        metrics: list[IMetric] | None = None,
        *,
        seed: int | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._metrics = metrics or [CoreMetrics()]
        self._subscribers: list[Callable[[SimEvent], None]] = []
        self._event_id_mode = self._resolve_event_id_mode(scheduler.params)
        self._event_id_seed = seed

        self._env = simpy.Environment()
        self._event_bus = self._create_event_bus()
        self._events: list[SimEvent] = []
        self._setup_event_pipeline()

        self._horizon: int | None = None
        self._states: list[TaskRuntime] = []
        self._timeline: list[str] = []
        self._misses: list[DeadlineMiss] = []
        self._running: TaskRuntime | None = None
        self._paused = False
        self._stopped = False

    @property
    def scheduler(self) -> IScheduler:
        return self._scheduler

    def subscribe(self, handler: Callable[[SimEvent], None]) -> None:
        if handler in self._subscribers:
            return
        self._subscribers.append(handler)
        self._event_bus.subscribe(handler)

    def build(self, tasks: list[Task], horizon: int) -> None:
        if isinstance(horizon, bool) or not isinstance(horizon, int) or horizon <= 0:
            raise ValueError(f"horizon must be a positive integer, got {horizon!r}")
        self.reset()
        self._horizon = horizon
        ordered = self._scheduler.order(list(tasks))
        self._states = [TaskRuntime.from_task(task, position) for position, task in enumerate(ordered)]
        self._env.process(self._clock())

    def run(self, until: int | None = None) -> None:
        if self._horizon is None:
            raise RuntimeError("build() must be called before run()")
        target = self._horizon if until is None else min(until, self._horizon)

        while self._env.now < target and not self._stopped:
            if self._paused:
                break
            self._advance_once()

    def step(self) -> None:
        if self._horizon is None:
            raise RuntimeError("build() must be called before step()")
        if self._env.now < self._horizon and not self._stopped:
            self._advance_once()

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def stop(self) -> None:
        self._stopped = True

    def reset(self) -> None:
        self._env = simpy.Environment()
        for metric in self._metrics:
            metric.reset()
        self._event_bus = self._create_event_bus()
        self._events = []
        self._setup_event_pipeline()

        self._horizon = None
        self._states = []
        self._timeline = []
        self._misses = []
        self._running = None
        self._paused = False
        self._stopped = False

    @property
    def events(self) -> list[SimEvent]:
        return list(self._events)

    @property
    def now(self) -> int:
        return int(self._env.now)

    @property
    def horizon(self) -> int | None:
        return self._horizon

    @property
    def finished(self) -> bool:
        return self._horizon is not None and self._env.now >= self._horizon

    def task_states(self) -> list[TaskRuntime]:
        return [replace(state) for state in self._states]

    def result(self) -> ScheduleResult:
        if self._horizon is None:
            raise RuntimeError("build() must be called before result()")
        return ScheduleResult(
            scheduler=self._scheduler.name,
            horizon=len(self._timeline),
            timeline=tuple(self._timeline),
            missed_deadlines=tuple(self._misses),
        )

    def metric_report(self) -> dict:
        merged: dict = {}
        for metric in self._metrics:
            merged.update(metric.report())
        return merged

    def _setup_event_pipeline(self) -> None:
        self._event_bus.subscribe(self._events.append)
        for metric in self._metrics:
            self._event_bus.subscribe(metric.consume)
        for handler in self._subscribers:
            self._event_bus.subscribe(handler)

    def _create_event_bus(self) -> EventBus:
        return EventBus(
            event_id_mode=self._event_id_mode,
            event_id_seed=self._event_id_seed,
        )

    def _resolve_event_id_mode(self, params: dict[str, Any]) -> str:
        raw_mode = params.get("event_id_mode", self.DEFAULT_EVENT_ID_MODE)
        mode = str(raw_mode).strip().lower()
        if mode not in self.VALID_EVENT_ID_MODES:
            allowed = ", ".join(sorted(self.VALID_EVENT_ID_MODES))
            raise ValueError(f"invalid event_id_mode '{raw_mode}', expected one of: {allowed}")
        return mode

    def _advance_once(self) -> None:
        self._env.run(until=self._env.now + 1)

    def _clock(self) -> Iterator[simpy.Event]:
        assert self._horizon is not None
        while self._env.now < self._horizon:
            self._tick(int(self._env.now))
            yield self._env.timeout(1)

    def _tick(self, now: int) -> None:
        if self._scheduler.miss_policy == "deadline":
            self._check_deadline_miss(now)
        self._process_releases(now)
        self._dispatch(now)

    def _check_deadline_miss(self, now: int) -> None:
        for state in self._states:
            if state.release_time is None or state.missed or not state.ready:
                continue
            if state.absolute_deadline is not None and state.absolute_deadline <= now:
                self._record_miss(state, now)

    def _process_releases(self, now: int) -> None:
        for state in self._states:
            if now % state.period != 0:
                continue
            # Work left at a re-release means the previous instance overran.
            if now > 0 and state.ready and not state.missed:
                self._record_miss(state, now)
            state.release(now)
            self._event_bus.publish(
                event_type=EventType.JOB_RELEASED,
                time=now,
                correlation_id=state.job_id,
                task_id=state.task_id,
                job_id=state.job_id,
                payload={
                    "release_time": now,
                    "absolute_deadline": state.absolute_deadline,
                    "execution_time": state.execution_time,
                },
            )

    def _record_miss(self, state: TaskRuntime, now: int) -> None:
        self._misses.append(
            DeadlineMiss(
                task_id=state.task_id,
                time=now,
                job_index=state.job_index,
                absolute_deadline=state.absolute_deadline,
            )
        )
        state.missed = True
        self._event_bus.publish(
            event_type=EventType.DEADLINE_MISS,
            time=now,
            correlation_id=state.job_id,
            task_id=state.task_id,
            job_id=state.job_id,
            payload={
                "absolute_deadline": state.absolute_deadline,
                "remaining": state.remaining,
                "miss_policy": self._scheduler.miss_policy,
                "abort_on_miss": self._scheduler.abort_on_miss,
            },
        )
        if self._scheduler.abort_on_miss:
            state.remaining = 0

    def _dispatch(self, now: int) -> None:
        ready = [state for state in self._states if state.ready]
        previous = self._running
        if not ready:
            self._running = None
            self._timeline.append(IDLE)
            self._event_bus.publish(
                event_type=EventType.IDLE,
                time=now,
                correlation_id=f"tick-{now}",
                payload={"reason": "no ready task"},
            )
            return

        chosen = min(ready, key=lambda state: self._scheduler.priority_key(state, now))
        if previous is not None and previous is not chosen and previous.ready:
            self._event_bus.publish(
                event_type=EventType.PREEMPT,
                time=now,
                correlation_id=previous.job_id,
                task_id=previous.task_id,
                job_id=previous.job_id,
                payload={"by": chosen.task_id, "remaining": previous.remaining},
            )

        chosen.remaining -= 1
        self._timeline.append(chosen.task_id)
        self._event_bus.publish(
            event_type=EventType.JOB_EXECUTE,
            time=now,
            correlation_id=chosen.job_id,
            task_id=chosen.task_id,
            job_id=chosen.job_id,
            payload={"remaining": chosen.remaining, "execution_time": chosen.execution_time},
        )

        if chosen.ready:
            self._running = chosen
            return

        self._running = None
        finish = now + 1
        assert chosen.release_time is not None
        deadline = chosen.absolute_deadline if chosen.absolute_deadline is not None else finish
        self._event_bus.publish(
            event_type=EventType.JOB_COMPLETE,
            time=finish,
            correlation_id=chosen.job_id,
            task_id=chosen.task_id,
            job_id=chosen.job_id,
            payload={
                "release_time": chosen.release_time,
                "response_time": finish - chosen.release_time,
                "absolute_deadline": chosen.absolute_deadline,
                "lateness": max(0, finish - deadline),
            },
        )
