"""Progress reporting and stage timing."""

from __future__ import annotations

import time
from collections.abc import Callable

from rfp_responder.types import ProcessingProgress, ProcessingStatus

ProgressSink = Callable[[ProcessingProgress], None]


def report(
    sink: ProgressSink | None,
    stage: str,
    current: int,
    total: int,
    message: str = "",
    status: ProcessingStatus = ProcessingStatus.IN_PROGRESS,
) -> None:
    """Invoke `sink` synchronously if the caller supplied one."""
    if sink is None:
        return
    sink(
        ProcessingProgress(
            stage=stage,
            current=current,
            total=total,
            message=message,
            status=status,
        )
    )


class ProgressRecorder:
    """Sink that keeps every event, used by the API and tests."""

    def __init__(self) -> None:
        self.events: list[ProcessingProgress] = []

    def __call__(self, event: ProcessingProgress) -> None:
        self.events.append(event)

    @property
    def latest(self) -> ProcessingProgress | None:
        return self.events[-1] if self.events else None

    def stages(self) -> list[str]:
        deduped: list[str] = []
        for event in self.events:
            if not deduped or deduped[-1] != event.stage:
                deduped.append(event.stage)
        return deduped


class Timer:
    """Simple context timer used to log stage latencies."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0
