"""The population of beat tracking agents and the event-by-event tracking loop."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from operator import attrgetter

from .agent import TOMBSTONE, Agent
from .config import DEFAULT_CONFIG, TrackingConfig
from .events import Event

logger = logging.getLogger(__name__)

_by_interval = attrgetter("beat_interval")


class AgentRoster:
    """Owns the set of live agents and drives them through an event stream.

    Agents are kept in ascending order of beat interval whenever the roster
    is sorted; that order decides which tempo counts as "previous" when
    new-phase agents are injected during tracking.
    """

    def __init__(self, agents: Iterable[Agent] = (), config: TrackingConfig = DEFAULT_CONFIG) -> None:
        self.config = config
        self._agents: list[Agent] = list(agents)

    def __len__(self) -> int:
        return len(self._agents)

    def __iter__(self) -> Iterator[Agent]:
        return iter(self._agents)

    def __bool__(self) -> bool:
        return bool(self._agents)

    def __repr__(self) -> str:
        return f"AgentRoster({len(self._agents)} agents)"

    @property
    def agents(self) -> list[Agent]:
        """Snapshot of the current agents, in stored order."""
        return list(self._agents)

    def add(self, agent: Agent, sort: bool = True) -> None:
        """Add an agent; keep the roster ordered by beat interval unless `sort` is False."""
        self._agents.append(agent)
        if sort:
            self.sort()

    def sort(self) -> None:
        """Stable sort by increasing beat interval."""
        self._agents.sort(key=_by_interval)

    def remove(self, agent: Agent) -> None:
        """Remove `agent` (by identity) from the roster."""
        for i, candidate in enumerate(self._agents):
            if candidate is agent:
                del self._agents[i]
                return
        raise ValueError(f"{agent!r} is not in the roster")

    def remove_duplicates(self) -> int:
        """Tombstone and drop agents that duplicate a better-scoring neighbour.

        Two agents are duplicates when their beat intervals differ by at most
        `dup_beat_interval` and their last beat times by at most
        `dup_beat_time`. The lower phase score loses; on equal scores the
        earlier agent (in interval order) survives. Agents already
        tombstoned (expired) are removed as well.

        Returns:
            Number of agents removed.
        """
        cfg = self.config
        self.sort()
        agents = self._agents
        for i, agent in enumerate(agents):
            if agent.phase_score < 0.0:
                continue
            for other in agents[i + 1 :]:
                if other.beat_interval - agent.beat_interval > cfg.dup_beat_interval:
                    break
                if abs(agent.beat_time - other.beat_time) > cfg.dup_beat_time:
                    continue
                if agent.phase_score < other.phase_score:
                    agent.phase_score = TOMBSTONE
                    other.top_score_time = max(other.top_score_time, agent.top_score_time)
                    break
                other.phase_score = TOMBSTONE
                agent.top_score_time = max(agent.top_score_time, other.top_score_time)
        before = len(agents)
        self._agents = [a for a in agents if a.phase_score >= 0.0]
        removed = before - len(self._agents)
        if removed:
            logger.debug("remove_duplicates: removed %d, %d agent(s) remaining", removed, len(self._agents))
        return removed

    def beat_track(
        self,
        events: Iterable[Event],
        stop: float | None = None,
        should_stop: Callable[[], bool] | None = None,
    ) -> bool:
        """Run every agent over `events` in time order.

        For each event the current agents are snapshotted and the live list is
        rebuilt from the snapshot, so agents forked during the step are not
        visited until the next event. Early in the piece, a tempo group in
        which no agent accepted the event gets a fresh agent at that tempo
        whose first beat is the event.

        Args:
            events: Onset events in non-decreasing time order.
            stop: Ignore events after this time (seconds); None or <= 0 disables.
            should_stop: Polled once per event; returning True aborts tracking.

        Returns:
            True if all events were consumed, False if interrupted.
        """
        cfg = self.config
        # If a phase was given for one agent, assume it was given for all.
        phase_given = bool(self._agents) and self._agents[0].beat_time >= 0
        for event in events:
            if stop is not None and stop > 0 and event.time > stop:
                break
            if should_stop is not None and should_stop():
                logger.info("Beat tracking interrupted at %.3fs", event.time)
                return False
            created = phase_given
            prev_interval = -1.0
            snapshot = sorted(self._agents, key=_by_interval)
            self._agents = []
            for agent in snapshot:
                if agent.beat_interval != prev_interval:
                    if prev_interval >= 0 and not created and event.time < cfg.phase_diversify_window:
                        fresh = Agent(prev_interval, config=agent.config)
                        fresh.consider_as_beat(event, self)
                        self.add(fresh, sort=False)
                    prev_interval = agent.beat_interval
                    created = phase_given
                if agent.consider_as_beat(event, self):
                    created = True
                self.add(agent, sort=False)
            self.remove_duplicates()
        return True

    def best_agent(self) -> Agent | None:
        """Return the highest-scoring agent with at least one beat, or None on failure."""
        use_average = self.config.use_average_salience
        best = -1.0
        best_agent: Agent | None = None
        for agent in self._agents:
            if not agent.events:
                continue
            conf = agent.phase_score + agent.tempo_score
            if use_average:
                conf /= agent.beat_count or 1
            if conf > best:
                best_agent = agent
                best = conf
        if best_agent is None:
            logger.debug("No surviving agent; beat tracking failed")
        else:
            logger.debug("Best agent: %r (score %.3f)", best_agent, best)
        return best_agent
