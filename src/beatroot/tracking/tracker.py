"""Beat tracking entry point: seed agents, track, pick the winner, fill gaps."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from .agent import Agent
from .config import DEFAULT_CONFIG, TrackingConfig
from .events import Event
from .induction import induce_tempo
from .roster import AgentRoster

logger = logging.getLogger(__name__)


@dataclass
class BeatTrackResult:
    """Outcome of a beat tracking run.

    `beats` is empty and `agent` is None when tracking failed. `unfilled`
    holds the winning agent's beats before interpolation. `completed` is
    False if tracking was interrupted before all events were consumed.
    """

    beats: list[Event] = field(default_factory=list)
    unfilled: list[Event] = field(default_factory=list)
    agent: Agent | None = None
    completed: bool = True

    @property
    def found(self) -> bool:
        return self.agent is not None


def seed_roster(
    events: Sequence[Event],
    beats: Sequence[Event] = (),
    config: TrackingConfig = DEFAULT_CONFIG,
) -> AgentRoster:
    """Build the initial roster, from given beats if there are at least two, else by induction.

    Any given beats are copied into every agent as its history, with the last
    one as the current beat time.
    """
    beats = list(beats)
    count = len(beats) - 1
    if count > 0:
        ibi = (beats[-1].time - beats[0].time) / count
        roster = AgentRoster([Agent(ibi, config=config)], config=config)
        logger.debug("Tempo given by %d initial beats: %.3fs", len(beats), ibi)
    else:
        roster = induce_tempo(events, config)
    if beats:
        for agent in roster:
            agent.beat_time = beats[-1].time
            agent.beat_count = count
            agent.events = list(beats)
    return roster


def beat_track(
    events: Sequence[Event],
    config: TrackingConfig | None = None,
    beats: Sequence[Event] = (),
    stop: float | None = None,
    should_stop: Callable[[], bool] | None = None,
) -> BeatTrackResult:
    """Track beats through a list of onset events.

    Args:
        events: Onset events in time order; saliences must be non-negative.
        config: Tracking parameters; defaults apply when None.
        beats: Known initial beats. Two or more bypass tempo induction.
        stop: Do not look for beats after this time (seconds).
        should_stop: Cooperative abort check, polled once per event. When it
            fires, the best result found so far is returned.

    Returns:
        BeatTrackResult; `beats` is empty if no agent survived.
    """
    config = config or DEFAULT_CONFIG
    beats = list(beats)
    roster = seed_roster(events, beats, config)
    completed = roster.beat_track(events, stop=stop, should_stop=should_stop)
    best = roster.best_agent()
    if best is None:
        logger.info("No beats found in %d onset(s)", len(events))
        return BeatTrackResult(completed=completed)

    unfilled = list(best.events)
    start = beats[-1].time if beats else -1.0
    inserted = best.fill_beats(start)
    logger.debug(
        "Best agent %d: %d beat(s), %d interpolated, interval %.3fs",
        best.id_number,
        len(best.events),
        inserted,
        best.beat_interval,
    )
    return BeatTrackResult(beats=list(best.events), unfilled=unfilled, agent=best, completed=completed)
