"""Tempo induction from clustered inter-onset intervals (Dixon, JNMR 2001).

Intervals between all pairs of onsets up to `max_ioi` apart are grouped into
clusters of similar length. Clusters are ranked by size, rewarded for being
harmonically related to other clusters, refined using those relations and
octave-corrected into the allowed beat-period range. Each surviving estimate
seeds one beat tracking agent.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from .agent import Agent
from .config import DEFAULT_CONFIG, TrackingConfig
from .events import Event
from .roster import AgentRoster

logger = logging.getLogger(__name__)

MAX_DEGREE = 8


@dataclass
class IntervalCluster:
    """A group of similar inter-onset intervals."""

    mean: float
    size: int = 1
    score: int = 0

    def add(self, ioi: float) -> None:
        self.mean = (self.mean * self.size + ioi) / (self.size + 1)
        self.size += 1

    def absorb(self, other: IntervalCluster) -> None:
        total = self.size + other.size
        self.mean = (self.mean * self.size + other.mean * other.size) / total
        self.size = total


def _relation(base: float, other: float) -> tuple[int, bool]:
    """Return (degree, other_is_multiple) for the nearest integer ratio between two means."""
    ratio = base / other
    if ratio < 1:
        return round(1 / ratio), True
    return round(ratio), False


def cluster_intervals(events: Sequence[Event], config: TrackingConfig = DEFAULT_CONFIG) -> list[IntervalCluster]:
    """Cluster inter-onset intervals and merge clusters that end up too close.

    Returns:
        Clusters sorted by mean interval; empty if no interval was in range.
    """
    width = config.cluster_width
    capacity = math.ceil((config.max_ioi - config.min_ioi) / width)
    clusters: list[IntervalCluster] = []
    dropped = 0
    for i, e1 in enumerate(events):
        for e2 in events[i + 1 :]:
            ioi = e2.time - e1.time
            if ioi < config.min_ioi:
                continue
            if ioi > config.max_ioi:
                break
            for b, cluster in enumerate(clusters):
                if abs(cluster.mean - ioi) < width:
                    if b < len(clusters) - 1 and abs(clusters[b + 1].mean - ioi) < abs(cluster.mean - ioi):
                        cluster = clusters[b + 1]
                    cluster.add(ioi)
                    break
            else:
                if len(clusters) == capacity:
                    dropped += 1
                    continue
                pos = len(clusters)
                while pos > 0 and clusters[pos - 1].mean > ioi:
                    pos -= 1
                clusters.insert(pos, IntervalCluster(mean=ioi))
    if dropped:
        logger.debug("Cluster table full; dropped %d interval(s)", dropped)

    merged = True
    while merged:
        merged = False
        b = 0
        while b < len(clusters):
            i = b + 1
            while i < len(clusters):
                if abs(clusters[b].mean - clusters[i].mean) < width:
                    clusters[b].absorb(clusters.pop(i))
                    merged = True
                else:
                    i += 1
            b += 1
    clusters.sort(key=lambda c: c.mean)
    return clusters


def score_clusters(clusters: list[IntervalCluster], config: TrackingConfig = DEFAULT_CONFIG) -> list[int]:
    """Score clusters in place and return the indices of the top-ranked ones.

    The ranking uses the size-based score only; harmonic bonuses are added
    afterwards and weight the refinement step.
    """
    for cluster in clusters:
        cluster.score = 10 * cluster.size
    # Rank before harmonic bonuses; the bonuses only weight refinement.
    ranked = sorted(range(len(clusters)), key=lambda k: -clusters[k].score)[: config.top_n]

    width = config.cluster_width
    for b, cb in enumerate(clusters):
        for ci in clusters[b + 1 :]:
            degree, submult = _relation(cb.mean, ci.mean)
            if not 2 <= degree <= MAX_DEGREE:
                continue
            if submult:
                err = abs(cb.mean * degree - ci.mean)
                tolerance = width
            else:
                err = abs(cb.mean - ci.mean * degree)
                tolerance = width * degree
            if err < tolerance:
                weight = 1 if degree >= 5 else 6 - degree
                cb.score += weight * ci.size
                ci.score += weight * cb.size
    return ranked


def refine_interval(clusters: Sequence[IntervalCluster], index: int, config: TrackingConfig = DEFAULT_CONFIG) -> float:
    """Adjust a cluster's mean using harmonically related clusters, weighted by score."""
    width = config.cluster_width
    base = clusters[index]
    new_sum = base.mean * base.score
    new_weight = base.score
    for i, other in enumerate(clusters):
        if i == index:
            continue
        degree, submult = _relation(base.mean, other.mean)
        if not 2 <= degree <= MAX_DEGREE:
            continue
        if submult:
            if abs(base.mean * degree - other.mean) < width:
                new_sum += other.mean / degree * other.score
                new_weight += other.score
        elif abs(base.mean - degree * other.mean) < width * degree:
            new_sum += other.mean * degree * other.score
            new_weight += other.score
    return new_sum / new_weight


def octave_correct(beat: float, config: TrackingConfig = DEFAULT_CONFIG) -> float:
    """Double or halve `beat` until it lies within [min_ibi, max_ibi]."""
    while beat < config.min_ibi:
        beat *= 2.0
    while beat > config.max_ibi:
        beat /= 2.0
    return beat


def induce_tempo(events: Sequence[Event], config: TrackingConfig = DEFAULT_CONFIG) -> AgentRoster:
    """Perform tempo induction and seed one agent per tempo hypothesis.

    Args:
        events: Onset events in time order.
        config: Tracking parameters.

    Returns:
        Roster of agents with no beats yet, in ranking order. Empty when no
        inter-onset interval fell within range.
    """
    events = list(events)
    clusters = cluster_intervals(events, config)
    roster = AgentRoster(config=config)
    if not clusters:
        logger.debug("Induction found no interval clusters")
        return roster
    for index in score_clusters(clusters, config):
        beat = octave_correct(refine_interval(clusters, index, config), config)
        if beat >= config.min_ibi:
            roster.add(Agent(beat, config=config), sort=False)
    logger.debug(
        "Induction complete: %d cluster(s), %d agent(s): %s",
        len(clusters),
        len(roster),
        ", ".join(f"{a.beat_interval:.3f}" for a in roster),
    )
    return roster
