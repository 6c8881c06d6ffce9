"""End-to-end beat tracking tests on synthetic onset trains."""

from __future__ import annotations

import pytest

from beatroot.tracking import (
    Event,
    TrackingConfig,
    beat_track,
    beats_from_times,
    events_from_arrays,
    seed_roster,
)


def _two_train_union() -> list[Event]:
    """0.5 s train (salience 1) merged with a 0.75 s train (salience 3)."""
    salience: dict[float, float] = {}
    for i in range(24):
        salience[i * 0.5] = 1.0
    for j in range(16):
        salience[j * 0.75] = 3.0
    times = sorted(salience)
    return events_from_arrays(times, [salience[t] for t in times])


class TestRegularTrain:
    def test_every_onset_is_a_beat(self, click_train) -> None:
        result = beat_track(click_train)
        assert result.found
        assert result.completed
        assert result.agent.beat_interval == pytest.approx(0.5)
        assert result.agent.beat_count == 20
        assert result.agent.phase_score == pytest.approx(20.0)
        assert [e.time for e in result.beats] == pytest.approx([i * 0.5 for i in range(20)])
        assert len(result.unfilled) == len(result.beats)

    def test_beats_strictly_increase(self, click_train) -> None:
        times = [e.time for e in beat_track(click_train).beats]
        assert all(b > a for a, b in zip(times, times[1:]))


class TestMissingOnsets:
    def test_gaps_are_interpolated(self, gapped_train) -> None:
        result = beat_track(gapped_train)
        assert result.found
        assert len(result.unfilled) == 20
        assert [e.time for e in result.beats] == pytest.approx([i * 0.5 for i in range(29)])
        interpolated = [e for e in result.beats if e.salience == 0.0]
        assert len(interpolated) == 9


class TestCompetingTempi:
    def test_stronger_train_wins(self) -> None:
        result = beat_track(_two_train_union())
        assert result.found
        assert result.agent.beat_interval == pytest.approx(0.75)
        assert result.agent.phase_score == pytest.approx(48.0)
        assert [e.time for e in result.beats] == pytest.approx([j * 0.75 for j in range(16)])


class TestDegenerateInput:
    def test_empty_input(self) -> None:
        result = beat_track([])
        assert not result.found
        assert result.beats == []
        assert result.unfilled == []
        assert result.agent is None

    def test_single_onset(self) -> None:
        assert not beat_track([Event(2.0, salience=1.0)]).found


class TestSeededBeats:
    def test_two_or_more_beats_bypass_induction(self, click_train) -> None:
        seed = beats_from_times([0.0, 0.5, 1.0])
        roster = seed_roster(click_train, seed)
        assert len(roster) == 1
        agent = next(iter(roster))
        assert agent.beat_interval == pytest.approx(0.5)
        assert agent.beat_time == 1.0
        assert agent.beat_count == 2
        assert [e.time for e in agent.events] == [0.0, 0.5, 1.0]

    def test_seeded_tracking_continues_after_seed(self, click_train) -> None:
        seed = beats_from_times([0.0, 0.5, 1.0])
        result = beat_track(click_train, beats=seed)
        assert result.found
        assert [e.time for e in result.beats] == pytest.approx([i * 0.5 for i in range(20)])
        # Seed beats carry no salience; the 17 later onsets score 1 each
        assert result.agent.phase_score == pytest.approx(17.0)

    def test_single_beat_sets_phase_for_induced_agents(self, click_train) -> None:
        seed = beats_from_times([0.0])
        roster = seed_roster(click_train, seed)
        assert len(roster) > 0
        assert all(a.beat_time == 0.0 and len(a.events) == 1 for a in roster)

    def test_seeded_gaps_before_last_seed_are_kept(self, click_train) -> None:
        seed = beats_from_times([0.0, 1.0])
        result = beat_track(click_train, config=TrackingConfig(), beats=seed)
        times = [e.time for e in result.beats]
        # Interval is taken as 1.0 s; nothing is inserted between the seeds
        assert times[:2] == [0.0, 1.0]


class TestStopping:
    def test_stop_time_limits_beats(self, click_train) -> None:
        result = beat_track(click_train, stop=4.0)
        assert result.completed
        assert max(e.time for e in result.beats) <= 4.0

    def test_should_stop_returns_partial_result(self, click_train) -> None:
        calls: list[int] = []

        def should_stop() -> bool:
            calls.append(1)
            return len(calls) > 6

        result = beat_track(click_train, should_stop=should_stop)
        assert not result.completed
        assert result.found
        assert max(e.time for e in result.beats) <= 2.5
