from __future__ import annotations

import pytest

from blitz.benchmark import run_simulation


def test_run_simulation_returns_report() -> None:
    report = run_simulation(games=3, num_players=3, seed=7)

    assert report.games == 3
    assert report.unfinished == 0
    assert sum(report.wins) == 3
    assert len(report.rounds) == 3
    assert len(report.histories) == 3
    assert report.knocks + report.blitzes == sum(len(history.rounds) for history in report.histories)
    assert report.mean_rounds >= 1.0
    assert sum(report.win_rates) == pytest.approx(1.0)


def test_run_simulation_is_seeded() -> None:
    first = run_simulation(games=2, num_players=2, seed=11)
    second = run_simulation(games=2, num_players=2, seed=11)
    assert first.wins == second.wins
    assert first.rounds == second.rounds


def test_run_simulation_requires_games() -> None:
    with pytest.raises(ValueError):
        run_simulation(games=0)
