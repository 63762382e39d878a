"""Helpers for tracking multi-round Blitz match results."""

from __future__ import annotations

from dataclasses import dataclass, field

from .state import RoundResult

__all__ = ["PlayerMatchTotal", "MatchHistory"]


@dataclass(frozen=True, slots=True)
class PlayerMatchTotal:
    """Aggregate totals accumulated across all recorded rounds."""

    player_index: int
    knocks: int
    successful_knocks: int
    blitzes: int
    coins_won: int
    coins_lost: int
    eliminated_in_round: int | None


@dataclass(slots=True)
class MatchHistory:
    """Mutable tracker that accumulates round results for a match."""

    num_players: int
    rounds: list[RoundResult] = field(default_factory=list)
    _knocks: list[int] = field(init=False, repr=False)
    _successful: list[int] = field(init=False, repr=False)
    _blitzes: list[int] = field(init=False, repr=False)
    _won: list[int] = field(init=False, repr=False)
    _lost: list[int] = field(init=False, repr=False)
    _eliminated: list[int | None] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.num_players <= 0:
            raise ValueError("num_players must be positive")
        self._knocks = [0 for _ in range(self.num_players)]
        self._successful = [0 for _ in range(self.num_players)]
        self._blitzes = [0 for _ in range(self.num_players)]
        self._won = [0 for _ in range(self.num_players)]
        self._lost = [0 for _ in range(self.num_players)]
        self._eliminated = [None for _ in range(self.num_players)]

    def record(self, result: RoundResult) -> None:
        """Record ``result`` and update cumulative totals."""

        if len(result.coin_changes) != self.num_players:
            raise ValueError("coin change count does not match number of players")
        self.rounds.append(result)
        if result.knocker is not None and result.kind == "knock":
            self._knocks[result.knocker] += 1
            if result.knock_succeeded:
                self._successful[result.knocker] += 1
        if result.blitz_player is not None:
            self._blitzes[result.blitz_player] += 1
        for idx, change in enumerate(result.coin_changes):
            if change > 0:
                self._won[idx] += change
            elif change < 0:
                self._lost[idx] -= change
        for idx in result.eliminated:
            if idx < 0 or idx >= self.num_players:
                raise ValueError("player index out of range")
            self._eliminated[idx] = result.round_number

    @property
    def blitz_count(self) -> int:
        return sum(self._blitzes)

    @property
    def knock_count(self) -> int:
        return sum(self._knocks)

    def totals(self) -> list[PlayerMatchTotal]:
        """Return the cumulative totals for each player in seating order."""

        return [
            PlayerMatchTotal(
                player_index=idx,
                knocks=self._knocks[idx],
                successful_knocks=self._successful[idx],
                blitzes=self._blitzes[idx],
                coins_won=self._won[idx],
                coins_lost=self._lost[idx],
                eliminated_in_round=self._eliminated[idx],
            )
            for idx in range(self.num_players)
        ]
