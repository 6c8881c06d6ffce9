from __future__ import annotations

from pathlib import Path

import pytest

from beatroot.tracking import Event, events_from_arrays


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """
    Run every test from a temp directory with CLI output and log folders under it.
    Keeps CLI runs from writing into the repo's data/ tree.
    """
    derived = tmp_path / "derived"
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("beatroot.cli.base.DERIVED_LOGS_DIR", tmp_path / "logs")
    monkeypatch.setattr("beatroot.cli.commands.beats.NOVELTY_DIR", derived / "novelty")
    monkeypatch.setattr("beatroot.cli.commands.beats.BEATS_OUTPUT_DIR", derived / "beats")
    return tmp_path


def periodic_events(period: float, count: int, salience: float = 1.0, start: float = 0.0) -> list[Event]:
    """Onset train with exact spacing (binary-exact for periods like 0.5 or 0.75)."""
    return [Event(time=start + i * period, salience=salience) for i in range(count)]


@pytest.fixture
def make_train():
    """Factory for exact periodic onset trains."""
    return periodic_events


@pytest.fixture
def click_train() -> list[Event]:
    """Twenty onsets, 0.5 s apart, salience 1."""
    return periodic_events(0.5, 20)


@pytest.fixture
def gapped_train() -> list[Event]:
    """Thirty-onset 0.5 s train with every third onset missing."""
    times = [i * 0.5 for i in range(30) if i % 3 != 2]
    return events_from_arrays(times)
