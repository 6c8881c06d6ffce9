"""Tests for tempo induction."""

from __future__ import annotations

import numpy as np
import pytest

from beatroot.tracking import Event, TrackingConfig, events_from_arrays, induce_tempo
from beatroot.tracking.induction import (
    IntervalCluster,
    cluster_intervals,
    octave_correct,
    refine_interval,
    score_clusters,
)


def _interval_pairs(intervals: list[float]) -> list[Event]:
    """One onset pair per interval, pairs 10 s apart, in the given order."""
    events = []
    for k, ioi in enumerate(intervals):
        start = 10.0 * k
        events.append(Event(start, salience=1.0))
        events.append(Event(start + ioi, salience=1.0))
    return events


class TestClusterIntervals:
    def test_periodic_train_clusters_at_multiples(self, click_train) -> None:
        clusters = cluster_intervals(click_train)
        assert [c.mean for c in clusters] == pytest.approx([0.5, 1.0, 1.5, 2.0, 2.5])
        assert [c.size for c in clusters] == [19, 18, 17, 16, 15]

    def test_out_of_range_intervals_are_ignored(self) -> None:
        events = [Event(t, salience=1.0) for t in (0.0, 0.05, 3.0, 6.0)]
        assert cluster_intervals(events) == []

    def test_full_cluster_table_drops_new_intervals(self) -> None:
        config = TrackingConfig(min_ioi=0.125, max_ioi=0.25, cluster_width=0.0625)
        events = [Event(t, salience=1.0) for t in (0.0, 0.125, 0.3125, 0.5625)]
        clusters = cluster_intervals(events, config)
        assert [c.mean for c in clusters] == [0.125, 0.1875]

    def test_absorb_weights_by_size(self) -> None:
        a = IntervalCluster(mean=0.5, size=3)
        a.absorb(IntervalCluster(mean=0.6, size=1))
        assert a.mean == pytest.approx(0.525)
        assert a.size == 4

    def test_interval_joins_closer_neighbour(self) -> None:
        # Pairs far apart so each contributes exactly one interval: 1.0, 1.375, 1.21875
        config = TrackingConfig(min_ioi=0.5, max_ioi=1.5, cluster_width=0.25)
        events = _interval_pairs([1.0, 1.375, 1.21875])
        clusters = cluster_intervals(events, config)
        assert [c.mean for c in clusters] == [1.0, pytest.approx(1.296875)]
        assert [c.size for c in clusters] == [1, 2]

    def test_drifting_clusters_merge(self) -> None:
        # The lower cluster's mean drifts up to 1.15625, within width of 1.375
        config = TrackingConfig(min_ioi=0.5, max_ioi=1.5, cluster_width=0.25)
        events = _interval_pairs([1.0, 1.375, 1.1875, 1.1875, 1.25])
        clusters = cluster_intervals(events, config)
        assert len(clusters) == 1
        assert clusters[0].size == 5
        assert clusters[0].mean == pytest.approx(1.2)

    def test_clusters_end_sorted_and_separated(self) -> None:
        rng = np.random.default_rng(3)
        config = TrackingConfig()
        for _ in range(50):
            times = np.sort(rng.uniform(0.0, 8.0, size=25))
            events = events_from_arrays(times)
            clusters = cluster_intervals(events, config)
            means = [c.mean for c in clusters]
            assert means == sorted(means)
            assert all(b - a >= config.cluster_width for a, b in zip(means, means[1:]))
            diffs = times[None, :] - times[:, None]
            in_range = int(np.count_nonzero((diffs >= config.min_ioi) & (diffs <= config.max_ioi)))
            assert sum(c.size for c in clusters) <= in_range


class TestScoring:
    def test_harmonic_relations_add_to_scores(self, click_train) -> None:
        clusters = cluster_intervals(click_train)
        ranked = score_clusters(clusters)
        assert ranked == [0, 1, 2, 3, 4]
        # 10 * 19 plus 4*18 (x2), 3*17 (x3), 2*16 (x4), 1*15 (x5)
        assert clusters[0].score == 360

    def test_top_n_limits_hypotheses(self, click_train) -> None:
        clusters = cluster_intervals(click_train)
        assert score_clusters(clusters, TrackingConfig(top_n=2)) == [0, 1]

    def test_refine_uses_related_clusters(self, click_train) -> None:
        clusters = cluster_intervals(click_train)
        score_clusters(clusters)
        assert refine_interval(clusters, 2) == pytest.approx(1.5)

    @pytest.mark.parametrize(("beat", "expected"), [(0.2, 0.4), (1.6, 0.8), (2.5, 0.625), (0.5, 0.5)])
    def test_octave_correction(self, beat: float, expected: float) -> None:
        assert octave_correct(beat) == pytest.approx(expected)


class TestInduceTempo:
    def test_empty_input_gives_empty_roster(self) -> None:
        assert len(induce_tempo([])) == 0

    def test_single_event_gives_empty_roster(self) -> None:
        assert len(induce_tempo([Event(1.0, salience=1.0)])) == 0

    def test_periodic_train_surfaces_its_period(self, click_train) -> None:
        config = TrackingConfig()
        roster = induce_tempo(click_train, config)
        intervals = [a.beat_interval for a in roster]
        assert intervals[0] == pytest.approx(0.5, abs=config.cluster_width)
        assert all(config.min_ibi <= ibi <= config.max_ibi for ibi in intervals)
        assert all(a.beat_time < 0 and not a.events for a in roster)

    def test_interleaved_trains_give_both_tempi(self, make_train) -> None:
        config = TrackingConfig()
        times = sorted({e.time for e in make_train(0.5, 24) + make_train(0.75, 16)})
        roster = induce_tempo(events_from_arrays(times), config)
        intervals = [a.beat_interval for a in roster]
        assert any(abs(ibi - 0.5) < config.cluster_width for ibi in intervals)
        assert any(abs(ibi - 0.75) < config.cluster_width for ibi in intervals)

    def test_agents_share_config(self, click_train) -> None:
        config = TrackingConfig(post_margin_factor=0.25)
        roster = induce_tempo(click_train, config)
        assert roster.config is config
        assert all(a.config is config for a in roster)
