"""Onset and beat events."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Event:
    """An onset or beat at `time` seconds.

    `beat` is an optional label (beat number); `salience` is the event's
    strength and must be non-negative for agent scoring to be meaningful.
    """

    time: float
    beat: float = 0.0
    salience: float = 0.0


def new_beat(time: float, beat_num: int = 0) -> Event:
    """Create a synthetic beat event (salience 0)."""
    return Event(time=float(time), beat=float(beat_num), salience=0.0)


def events_from_arrays(times, saliences=None) -> list[Event]:
    """Build a time-ordered event list from parallel arrays.

    Args:
        times: Event times in seconds.
        saliences: Per-event salience; defaults to 1.0 for every event.

    Returns:
        Events sorted by time (stable for equal times).
    """
    t = np.asarray(times, dtype=np.float64).ravel()
    if saliences is None:
        s = np.ones_like(t)
    else:
        s = np.asarray(saliences, dtype=np.float64).ravel()
        if s.shape != t.shape:
            raise ValueError(f"times and saliences differ in shape: {t.shape} vs {s.shape}")
    order = np.argsort(t, kind="stable")
    return [Event(time=float(t[i]), salience=float(s[i])) for i in order]


def event_times(events: Iterable[Event]) -> np.ndarray:
    """Return event times as a float64 array."""
    return np.array([e.time for e in events], dtype=np.float64)


def beats_from_times(times: Sequence[float]) -> list[Event]:
    """Turn known beat times into numbered beat events (for seeding the tracker)."""
    return [new_beat(t, i) for i, t in enumerate(times)]
