from __future__ import annotations

import pytest

from blitz import scoreboard
from blitz.state import RoundResult


def _result(
    round_number: int,
    kind: str,
    changes: tuple[int, ...],
    *,
    eliminated: tuple[int, ...] = (),
    knocker: int | None = None,
    blitz_player: int | None = None,
    succeeded: bool | None = None,
) -> RoundResult:
    return RoundResult(
        round_number=round_number,
        kind=kind,
        coin_changes=changes,
        eliminated=eliminated,
        message="",
        revealed_hands=tuple(() for _ in changes),
        best_scores=tuple(0 for _ in changes),
        knocker=knocker,
        blitz_player=blitz_player,
        knock_succeeded=succeeded,
    )


def test_match_history_accumulates_totals() -> None:
    history = scoreboard.MatchHistory(num_players=3)
    history.record(_result(1, "knock", (1, -1, 0), knocker=0, succeeded=True))
    history.record(_result(2, "knock", (2, 0, -2), knocker=2, succeeded=False))
    history.record(_result(3, "blitz", (-1, 2, -1), blitz_player=1, knocker=0))
    history.record(_result(4, "knock", (1, 0, -1), knocker=0, succeeded=True, eliminated=(2,)))

    totals = history.totals()
    assert len(history.rounds) == 4
    assert history.knock_count == 3
    assert history.blitz_count == 1
    assert totals[0].knocks == 2
    assert totals[0].successful_knocks == 2
    assert totals[2].knocks == 1
    assert totals[2].successful_knocks == 0
    assert totals[1].blitzes == 1
    assert totals[0].coins_won == 4
    assert totals[0].coins_lost == 1
    assert totals[2].coins_lost == 4
    assert totals[2].eliminated_in_round == 4
    assert totals[1].eliminated_in_round is None


def test_match_history_validates_player_count() -> None:
    history = scoreboard.MatchHistory(num_players=2)
    with pytest.raises(ValueError):
        history.record(_result(1, "knock", (1,), knocker=0, succeeded=True))


def test_match_history_validates_eliminated_index() -> None:
    history = scoreboard.MatchHistory(num_players=2)
    with pytest.raises(ValueError):
        history.record(_result(1, "blitz", (1, -1), blitz_player=0, eliminated=(5,)))


def test_match_history_requires_players() -> None:
    with pytest.raises(ValueError):
        scoreboard.MatchHistory(num_players=0)
