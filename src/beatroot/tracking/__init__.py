"""Multi-agent beat tracking package."""

from .agent import Agent
from .config import DEFAULT_CONFIG, TrackingConfig
from .events import Event, beats_from_times, event_times, events_from_arrays, new_beat
from .induction import induce_tempo
from .roster import AgentRoster
from .tracker import BeatTrackResult, beat_track, seed_roster

__all__ = [
    "Agent",
    "AgentRoster",
    "BeatTrackResult",
    "DEFAULT_CONFIG",
    "Event",
    "TrackingConfig",
    "beat_track",
    "beats_from_times",
    "event_times",
    "events_from_arrays",
    "induce_tempo",
    "new_beat",
    "seed_roster",
]
