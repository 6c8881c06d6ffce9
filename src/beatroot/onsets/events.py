"""Onset events from a precomputed novelty (onset strength) curve."""

from __future__ import annotations

import numpy as np

from ..tracking.events import Event
from .peaks import find_peaks, normalise

# Peak picking defaults for spectral-flux style novelty
PEAK_WINDOW_SEC = 0.06
PEAK_THRESHOLD = 0.35
PEAK_DECAY_RATE = 0.84


def onset_events_from_novelty(
    novelty,
    fs: float,
    peak_window: float = PEAK_WINDOW_SEC,
    threshold: float = PEAK_THRESHOLD,
    decay_rate: float = PEAK_DECAY_RATE,
) -> list[Event]:
    """Peak-pick a novelty curve into onset events.

    The curve is z-score normalised, peaks are picked with a relative
    threshold, and each peak's salience is its normalised value minus the
    curve minimum, so saliences are never negative.

    Args:
        novelty: 1-D novelty curve, one value per feature frame.
        fs: Feature sample rate in Hz.
        peak_window: Minimum spacing between onsets in seconds.
        threshold: Margin above the local mean a peak must clear.
        decay_rate: Decay of the adaptive threshold per frame.

    Returns:
        Onset events in time order.

    Raises:
        ValueError: If `novelty` is not 1-D or `fs` is not positive.
    """
    x = np.asarray(novelty, dtype=np.float64)
    if x.ndim != 1:
        raise ValueError(f"Expected 1D novelty, got shape {x.shape}")
    if fs <= 0:
        raise ValueError(f"Feature sample rate must be positive, got {fs}")
    if x.size == 0:
        return []
    x = normalise(x)
    width = max(1, int(round(peak_window * fs)))
    min_salience = float(np.min(x))
    return [
        Event(time=idx / fs, beat=0.0, salience=float(x[idx]) - min_salience)
        for idx in find_peaks(x, width, threshold, decay_rate, is_relative=True)
    ]
