"""Game session wiring human input and computer opponents to the rules engine."""

from __future__ import annotations

import logging
import random

from . import rules
from .actions import Action, DiscardAction, DrawAction
from .deck import DeckGateway
from .opponent import OpponentDecision, OpponentProfile, decide_for, profile_for_seat, resolve_draw
from .scoreboard import MatchHistory
from .state import BlitzConfig, GameState

__all__ = ["GameSession"]

logger = logging.getLogger(__name__)


class GameSession:
    """Owns the current :class:`GameState` and swaps it after each transition.

    Opponent profiles are built once per seat when the session is created.
    """

    def __init__(
        self,
        config: BlitzConfig,
        gateway: DeckGateway,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config
        self.gateway = gateway
        self.rng = rng or random.Random()
        self.profiles: dict[int, OpponentProfile] = {
            seat: profile_for_seat(seat)
            for seat in range(config.num_players)
            if seat not in config.human_seats
        }
        self.history = MatchHistory(num_players=config.num_players)
        self._state: GameState | None = None

    @property
    def state(self) -> GameState:
        if self._state is None:
            raise RuntimeError("session has not been started")
        return self._state

    @property
    def started(self) -> bool:
        return self._state is not None

    @property
    def awaiting_human(self) -> bool:
        state = self.state
        return not state.is_over and state.current_player.is_human

    def start(self) -> GameState:
        """Deal the first round. Gateway errors leave the session unstarted."""

        self._state = rules.start_game(self.config, self.gateway)
        logger.info("started game with %d player(s)", self.config.num_players)
        return self._state

    def submit(self, action: Action) -> bool:
        """Apply a human action; returns ``False`` when it was not accepted."""

        state = self.state
        if not state.current_player.is_human:
            logger.debug("ignoring human action on seat %d", state.current_player_index)
            return False
        next_state = rules.apply_action(state, action, self.gateway)
        if next_state is state:
            return False
        self._commit(next_state)
        return True

    def play_opponent_turn(self) -> OpponentDecision:
        """Decide and execute the current computer player's whole turn.

        A draw and its discard are committed together, so a gateway failure in
        either step leaves the session at the start of the turn.
        """

        state = self.state
        seat = state.current_player_index
        if state.is_over or state.current_player.is_human:
            raise RuntimeError(f"seat {seat} is not a computer player awaiting a turn")
        profile = self.profiles[seat]
        decision = decide_for(state, profile, self.rng)
        next_state = rules.apply_action(state, decision.action, self.gateway)
        if isinstance(decision.action, DrawAction) and next_state.pending_card is not None:
            player = next_state.current_player
            index = resolve_draw(player.hand, player.score, next_state.pending_card, profile)
            next_state = rules.apply_action(next_state, DiscardAction(index), self.gateway)
        logger.debug("seat %d played %r", seat, decision)
        self._commit(next_state)
        return decision

    def advance_until_human(self, max_turns: int = 1000) -> int:
        """Play computer turns until a human must act or the game ends."""

        played = 0
        while not self.state.is_over and not self.state.current_player.is_human:
            if played >= max_turns:
                raise RuntimeError(f"no human turn reached after {max_turns} computer turns")
            self.play_opponent_turn()
            played += 1
        return played

    def run_to_completion(self, max_turns: int = 10_000) -> GameState:
        """Play an all-computer game until a winner is decided or ``max_turns`` elapse."""

        if self.config.human_seats:
            raise RuntimeError("run_to_completion requires every seat to be a computer player")
        if not self.started:
            self.start()
        for _ in range(max_turns):
            if self.state.is_over:
                break
            self.play_opponent_turn()
        return self.state

    def _commit(self, next_state: GameState) -> None:
        previous = self._state.last_result if self._state is not None else None
        if next_state.last_result is not None and next_state.last_result is not previous:
            self.history.record(next_state.last_result)
        self._state = next_state
