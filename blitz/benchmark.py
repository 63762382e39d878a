"""Simulation harness pitting computer Blitz players against each other."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

import numpy as np

from . import scoreboard
from .deck import LocalDeckGateway
from .session import GameSession
from .state import BlitzConfig

__all__ = ["SimulationReport", "run_simulation"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SimulationReport:
    """Summary of a batch of all-computer games."""

    games: int
    unfinished: int
    wins: tuple[int, ...]
    rounds: tuple[int, ...]
    blitzes: int
    knocks: int
    histories: tuple[scoreboard.MatchHistory, ...]

    @property
    def mean_rounds(self) -> float:
        if not self.rounds:
            return 0.0
        return float(np.mean(self.rounds))

    @property
    def win_rates(self) -> tuple[float, ...]:
        finished = self.games - self.unfinished
        if finished <= 0:
            return tuple(0.0 for _ in self.wins)
        return tuple(float(rate) for rate in np.asarray(self.wins, dtype=float) / finished)


def run_simulation(
    games: int,
    *,
    num_players: int = 4,
    seed: int = 123,
    max_turns: int = 10_000,
) -> SimulationReport:
    """Play ``games`` complete games with seeded decks and opponents."""

    if games <= 0:
        raise ValueError("games must be positive")

    rng = random.Random(seed)
    config = BlitzConfig.for_players(num_players, humans=0)
    wins = np.zeros(num_players, dtype=np.int64)
    rounds: list[int] = []
    histories: list[scoreboard.MatchHistory] = []
    unfinished = 0

    for game_number in range(1, games + 1):
        gateway = LocalDeckGateway(random.Random(rng.getrandbits(32)))
        session = GameSession(config, gateway, random.Random(rng.getrandbits(32)))
        final_state = session.run_to_completion(max_turns=max_turns)
        histories.append(session.history)
        rounds.append(final_state.round_number)
        if final_state.winner_index is None:
            unfinished += 1
            logger.warning("game %d did not finish within %d turns", game_number, max_turns)
            continue
        wins[final_state.winner_index] += 1

    return SimulationReport(
        games=games,
        unfinished=unfinished,
        wins=tuple(int(count) for count in wins),
        rounds=tuple(rounds),
        blitzes=sum(history.blitz_count for history in histories),
        knocks=sum(history.knock_count for history in histories),
        histories=tuple(histories),
    )
