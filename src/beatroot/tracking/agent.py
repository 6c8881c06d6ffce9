"""Beat tracking agent: one tempo and phase hypothesis.

An agent predicts the next beat from its current beat period and the time of
its last accepted beat. Each incoming onset is either accepted as a beat
(possibly forking a sibling that skips it), ignored, or causes the agent to
expire when nothing has matched for too long.
"""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING

from .config import DEFAULT_CONFIG, TrackingConfig
from .events import Event, new_beat

if TYPE_CHECKING:
    from .roster import AgentRoster

_id_counter = itertools.count()

# Phase score marking an agent for removal
TOMBSTONE = -1.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class Agent:
    """A single tempo/phase hypothesis with its beat history and score.

    Attributes:
        beat_interval: Current beat period in seconds.
        initial_beat_interval: Beat period at creation; bounds tempo drift.
        beat_time: Time of the most recent accepted beat, or -1 if none yet.
        beat_count: Number of beats found, including skipped and interpolated ones.
        phase_score: Salience of accepted beats weighted by timing accuracy.
            A negative value marks the agent for removal.
        tempo_score: Reserved for a real-time mode; always 0 in batch tracking.
        top_score_time: Bookkeeping carried across duplicate pruning.
        pre_margin: Outer window before the predicted beat (seconds).
        post_margin: Outer window after the predicted beat (seconds).
        events: Accepted beats in time order, plus any interpolated beats.
        id_number: Monotonic identity, for logging and tie-break only.
    """

    def __init__(self, beat_interval: float, config: TrackingConfig = DEFAULT_CONFIG) -> None:
        self.config = config
        self.id_number = next(_id_counter)
        self.beat_interval = float(beat_interval)
        self.initial_beat_interval = float(beat_interval)
        self.post_margin = self.beat_interval * config.post_margin_factor
        self.pre_margin = self.beat_interval * config.pre_margin_factor
        self.phase_score = 0.0
        self.tempo_score = 0.0
        self.top_score_time = 0.0
        self.beat_count = 0
        self.beat_time = -1.0
        self.events: list[Event] = []

    def __repr__(self) -> str:
        return (
            f"Agent(id={self.id_number}, beat_interval={self.beat_interval:.4f}, "
            f"beat_time={self.beat_time:.3f}, beat_count={self.beat_count}, "
            f"phase_score={self.phase_score:.3f})"
        )

    @property
    def expired(self) -> bool:
        return self.phase_score < 0.0

    def clone(self) -> Agent:
        """Return an independent copy with a fresh identity number."""
        twin = Agent.__new__(Agent)
        twin.config = self.config
        twin.id_number = next(_id_counter)
        twin.beat_interval = self.beat_interval
        twin.initial_beat_interval = self.initial_beat_interval
        twin.post_margin = self.post_margin
        twin.pre_margin = self.pre_margin
        twin.phase_score = self.phase_score
        twin.tempo_score = self.tempo_score
        twin.top_score_time = self.top_score_time
        twin.beat_count = self.beat_count
        twin.beat_time = self.beat_time
        # Events are frozen, so a new list is a fully independent history.
        twin.events = list(self.events)
        return twin

    def accept(self, event: Event, err: float, beats: int) -> None:
        """Take `event` as a beat and update tempo, count and score.

        Args:
            event: The onset accepted as being on the beat.
            err: Actual minus predicted beat time (seconds).
            beats: Beat periods elapsed since the previous accepted beat.
        """
        cfg = self.config
        self.beat_time = event.time
        self.events.append(event)
        correction = err / cfg.correction_factor
        if abs(self.initial_beat_interval - self.beat_interval - correction) < (
            cfg.max_change * self.initial_beat_interval
        ):
            self.beat_interval += correction
        self.beat_count += beats
        if err == 0:
            con_factor = 1.0
        else:
            con_factor = 1.0 - cfg.conf_factor * err / (self.post_margin if err > 0 else -self.pre_margin)
        if cfg.decay_factor > 0:
            mem_factor = 1.0 - 1.0 / _clamp(float(self.beat_count), 1.0, cfg.decay_factor)
            self.phase_score = mem_factor * self.phase_score + (1.0 - mem_factor) * con_factor * event.salience
        else:
            self.phase_score += con_factor * event.salience

    def consider_as_beat(self, event: Event, roster: AgentRoster) -> bool:
        """Test `event` against this agent's beat prediction.

        Outcomes:
            1. No beats yet: the event becomes the first beat.
            2. More than `expiry_time` since the last beat: the agent is
               tombstoned and the event rejected.
            3. Within `inner_margin` of the prediction: accepted.
            4. Within the outer margins: accepted, and a copy of the agent
               that skips this event is added to `roster`.
            5. Outside the windows: rejected.

        Returns:
            True if the event was accepted as a beat.
        """
        if self.expired:
            return False
        if self.beat_time < 0:
            self.accept(event, 0.0, 1)
            return True
        if event.time - self.events[-1].time > self.config.expiry_time:
            self.phase_score = TOMBSTONE
            return False
        beats = round((event.time - self.beat_time) / self.beat_interval)
        err = event.time - self.beat_time - beats * self.beat_interval
        if beats > 0 and -self.pre_margin <= err <= self.post_margin:
            if abs(err) > self.config.inner_margin:
                # The sibling keeps the hypothesis without a phase jump.
                roster.add(self.clone())
            self.accept(event, err, beats)
            return True
        return False

    def fill_beats(self, start: float = -1.0) -> int:
        """Interpolate missing beats between accepted beats, in place.

        Gaps are divided into a whole number of beat periods, rounding
        slightly down so ambiguous gaps get fewer beats. Gaps ending at or
        before `start` are left alone.

        Args:
            start: Ignore gaps whose later beat is not after this time.

        Returns:
            Number of beats inserted.
        """
        if len(self.events) < 2:
            return 0
        filled: list[Event] = [self.events[0]]
        inserted = 0
        prev_beat = self.events[0].time
        for event in self.events[1:]:
            next_beat = event.time
            beats = round((next_beat - prev_beat) / self.beat_interval - 0.01)
            if next_beat > start and beats > 1:
                current_interval = (next_beat - prev_beat) / beats
                for k in range(1, beats):
                    filled.append(new_beat(prev_beat + k * current_interval, 0))
                    inserted += 1
            filled.append(event)
            prev_beat = next_beat
        self.events = filled
        return inserted
