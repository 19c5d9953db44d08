"""Event bus with sequence assignment."""

from __future__ import annotations

import random
import uuid
from typing import Callable

from .types import EventType, SimEvent


EventHandler = Callable[[SimEvent], None]


class EventBus:
    """In-process pub/sub bus that stamps ids and sequence numbers."""

    VALID_EVENT_ID_MODES = frozenset({"deterministic", "random", "seeded_random"})

    def __init__(
        self,
        *,
        event_id_mode: str = "deterministic",
        event_id_seed: int | None = None,
    ) -> None:
        mode = event_id_mode.lower().strip()
        if mode not in self.VALID_EVENT_ID_MODES:
            raise ValueError(f"unknown event_id_mode '{event_id_mode}'")
        self._handlers: list[EventHandler] = []
        self._seq = 0
        self._event_id_mode = mode
        self._rng = random.Random(event_id_seed)

    def subscribe(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    def _next_event_id(self) -> str:
        if self._event_id_mode == "random":
            return str(uuid.uuid4())
        if self._event_id_mode == "seeded_random":
            # Stable across runs with the same seed.
            return f"{self._rng.getrandbits(128):032x}"
        return f"evt-{self._seq:08d}"

    def publish(
        self,
        *,
        event_type: EventType,
        time: int,
        correlation_id: str,
        task_id: str | None = None,
        job_id: str | None = None,
        payload: dict | None = None,
    ) -> SimEvent:
        event = SimEvent(
            event_id=self._next_event_id(),
            seq=self._seq,
            correlation_id=correlation_id,
            time=time,
            type=event_type,
            task_id=task_id,
            job_id=job_id,
            payload=payload or {},
        )
        self._seq += 1
        for handler in list(self._handlers):
            handler(event)
        return event
