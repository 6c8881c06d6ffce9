"""Onset event extraction package."""

from .events import onset_events_from_novelty
from .peaks import find_peaks, normalise, over_threshold

__all__ = [
    "find_peaks",
    "normalise",
    "onset_events_from_novelty",
    "over_threshold",
]
