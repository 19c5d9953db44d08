from __future__ import annotations

import pytest

from rtsched.core import SimEngine
from rtsched.events import EventBus, EventType, SimEvent
from rtsched.model import Task
from rtsched.schedulers import EDFScheduler


def test_event_bus_stamps_sequence_and_deterministic_ids() -> None:
    bus = EventBus()
    seen: list[SimEvent] = []
    bus.subscribe(seen.append)
    first = bus.publish(event_type=EventType.IDLE, time=0, correlation_id="tick-0")
    second = bus.publish(event_type=EventType.JOB_RELEASED, time=1, correlation_id="A@0", task_id="A", job_id="A@0")
    assert [event.seq for event in seen] == [0, 1]
    assert first.event_id == "evt-00000000"
    assert second.event_id == "evt-00000001"
    assert second.payload == {}


def test_event_bus_rejects_unknown_mode() -> None:
    with pytest.raises(ValueError, match="event_id_mode"):
        EventBus(event_id_mode="sequential")


def test_seeded_random_ids_are_reproducible() -> None:
    def ids(seed: int) -> list[str]:
        bus = EventBus(event_id_mode="seeded_random", event_id_seed=seed)
        return [bus.publish(event_type=EventType.IDLE, time=t, correlation_id=f"tick-{t}").event_id for t in range(3)]

    assert ids(7) == ids(7)
    assert ids(7) != ids(8)


def test_engine_rejects_invalid_event_id_mode() -> None:
    with pytest.raises(ValueError, match="invalid event_id_mode"):
        SimEngine(EDFScheduler({"event_id_mode": "sequential"}))


def test_engine_event_ids_follow_scheduler_params() -> None:
    engine = SimEngine(EDFScheduler({"event_id_mode": "seeded_random"}), seed=3)
    engine.build([Task("A", 1, 2)], 4)
    engine.run()
    event_ids = [event.event_id for event in engine.events]
    assert len(set(event_ids)) == len(event_ids)
    assert not any(event_id.startswith("evt-") for event_id in event_ids)
    assert engine.events[0].to_json().startswith("{")
