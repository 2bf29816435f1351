"""NoteEventTracker: lifetime and fade-out of the markers drawn for tapped notes."""

from __future__ import annotations

import time
from typing import Callable

from staffpitch.staff_models import NoteEvent, ResolvedNote


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class NoteEventTracker:
    """
    Keeps the markers that are still visible and computes their opacity.

    A renderer calls ``prune`` once per frame, draws the returned events with
    ``opacity``, and schedules another frame only while ``needs_redraw`` is
    true.
    """

    VISIBLE_MS = 2000.0

    def __init__(self, clock: Callable[[], float] = _monotonic_ms) -> None:
        """
        Args:
            clock: Zero-argument callable returning the current time in ms.
        """
        self._clock = clock
        self._events: list[NoteEvent] = []

    def _now(self, now: float | None) -> float:
        return self._clock() if now is None else now

    def add(self, note: ResolvedNote, x: float, now: float | None = None) -> NoteEvent:
        """Record a marker for ``note`` at horizontal position ``x``."""
        event = NoteEvent(note=note, x=x, created_ms=self._now(now))
        self._events.append(event)
        return event

    def age(self, event: NoteEvent, now: float | None = None) -> float:
        return self._now(now) - event.created_ms

    def opacity(self, event: NoteEvent, now: float | None = None) -> float:
        """Linear fade from 1.0 at creation to 0.0 after ``VISIBLE_MS``."""
        remaining = 1.0 - self.age(event, now) / self.VISIBLE_MS
        return min(1.0, max(0.0, remaining))

    def prune(self, now: float | None = None) -> list[NoteEvent]:
        """Drop expired events and return the visible ones, oldest first."""
        current = self._now(now)
        self._events = [e for e in self._events if current - e.created_ms < self.VISIBLE_MS]
        return list(self._events)

    @property
    def events(self) -> list[NoteEvent]:
        """Every recorded event that has not been pruned yet."""
        return list(self._events)

    @property
    def needs_redraw(self) -> bool:
        return bool(self._events)
