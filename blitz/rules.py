"""Turn state machine for Blitz.

Every public transition takes a :class:`GameState`, works on a clone and
returns the clone. The caller's state is never mutated, so a failed deck
service call leaves it exactly as it was.
"""

from __future__ import annotations

import logging

from . import settlement
from .actions import Action, DiscardAction, DrawAction, KnockAction, StandAction, is_legal
from .cards import Card
from .deck import DeckGateway, GatewayError, draw_with_reshuffle
from .scoring import has_blitz
from .state import (
    BlitzConfig,
    DiscardLogEntry,
    GamePhase,
    GameState,
    RoundResult,
    RoundState,
    TurnPhase,
    new_game_state,
)

__all__ = [
    "TurnOrderError",
    "start_game",
    "apply_action",
    "next_eligible_player",
    "deal_round",
]

logger = logging.getLogger(__name__)


class TurnOrderError(RuntimeError):
    """Raised when no eligible player can take the next turn."""


def start_game(config: BlitzConfig, gateway: DeckGateway) -> GameState:
    """Create a game and deal the first round."""

    state = new_game_state(config)
    deal_round(state, gateway)
    return state


def deal_round(state: GameState, gateway: DeckGateway) -> None:
    """Deal three cards to every surviving seat from a fresh deck.

    The cards are drawn in one batch and split contiguously in seat order.
    ``state`` is only mutated once the deck service has answered.
    """

    survivors = state.active_players()
    hand_size = state.config.hand_size
    needed = hand_size * len(survivors)
    handle = gateway.create_deck()
    result = gateway.draw(handle.deck_id, needed)
    if len(result.cards) < needed:
        raise GatewayError(f"deal needed {needed} cards but the deck returned {len(result.cards)}")

    for player in state.players:
        player.reset_hand()
    for offset, player in enumerate(survivors):
        player.hand = list(result.cards[offset * hand_size : (offset + 1) * hand_size])
        player.rescore()

    state.deck_id = handle.deck_id
    state.deck_remaining = result.remaining
    state.discard_pile = []
    state.pending_card = None
    state.round = RoundState()
    state.current_player_index = survivors[0].seat
    state.phase = GamePhase.PLAYING
    state.turn_phase = TurnPhase.DECISION
    state.message = f"{survivors[0].name}'s turn - Knock or Continue?"
    logger.debug("dealt round %d to %d player(s)", state.round_number, len(survivors))


def apply_action(state: GameState, action: Action, gateway: DeckGateway) -> GameState:
    """Apply ``action`` for the current player and return the next state.

    Actions that are illegal in the current phase are ignored and ``state``
    itself is returned. :class:`GatewayError` propagates with ``state``
    untouched.
    """

    if not is_legal(state, action):
        logger.debug(
            "ignoring %r from seat %d during %s/%s",
            action,
            state.current_player_index,
            state.phase.value,
            state.turn_phase.value,
        )
        return state

    next_state = state.clone()
    if isinstance(action, KnockAction):
        _knock(next_state)
    elif isinstance(action, StandAction):
        _stand(next_state, gateway)
    elif isinstance(action, DrawAction):
        if action.source == "deck":
            _draw_from_deck(next_state, gateway)
        else:
            _draw_from_discard(next_state)
    elif isinstance(action, DiscardAction):
        _discard(next_state, action.hand_index, gateway)
    else:  # pragma: no cover - is_legal rejects unknown actions
        raise TypeError(f"unknown action {action!r}")
    return next_state


def next_eligible_player(state: GameState) -> int:
    """Return the next seat after the current one that may take a turn.

    Eliminated seats are skipped, and so is the knocker during the final
    round.
    """

    count = len(state.players)
    seat = state.current_player_index
    for _ in range(count):
        seat = (seat + 1) % count
        player = state.players[seat]
        if player.is_eliminated:
            continue
        if state.phase is GamePhase.FINAL_ROUND and seat == state.round.knocker:
            continue
        return seat
    raise TurnOrderError(
        f"no eligible player after seat {state.current_player_index} in round {state.round_number}"
    )


def _knock(state: GameState) -> None:
    knocker = state.current_player
    state.round.knocker = knocker.seat
    state.round.final_turns_remaining = len(state.active_players()) - 1
    state.phase = GamePhase.FINAL_ROUND
    logger.info("%s knocked with %d", knocker.name, knocker.score.best_score)
    _advance(state)
    state.message = f"{knocker.name} knocked! Final round begins. {state.current_player.name}'s final turn"


def _stand(state: GameState, gateway: DeckGateway) -> None:
    player = state.current_player
    logger.debug("%s stands on %d", player.name, player.score.best_score)
    _finish_final_turn(state, gateway)


def _draw_from_deck(state: GameState, gateway: DeckGateway) -> None:
    card = draw_with_reshuffle(state, gateway)
    _hold(state, card, "drew a card")


def _draw_from_discard(state: GameState) -> None:
    card = state.discard_pile.pop()
    _hold(state, card, "drew from discard")


def _hold(state: GameState, card: Card, verb: str) -> None:
    state.pending_card = card
    state.turn_phase = TurnPhase.DISCARD
    state.message = f"{state.current_player.name} {verb}. Select a card to discard."


def _discard(state: GameState, hand_index: int | None, gateway: DeckGateway) -> None:
    player = state.current_player
    pending = state.pending_card
    if pending is None:  # pragma: no cover - guarded by is_legal
        raise RuntimeError("no pending card to resolve")

    if hand_index is None:
        discarded = pending
    else:
        discarded = player.hand[hand_index]
        player.hand[hand_index] = pending
    state.pending_card = None
    state.discard_pile.append(discarded)
    state.discard_log.append(DiscardLogEntry(player.name, discarded, state.round_number))
    player.rescore()
    state.turn_phase = TurnPhase.DECISION

    if has_blitz(player.score, state.config.blitz_score):
        _settle(state, gateway, blitz_player=player.seat)
        return
    if state.phase is GamePhase.FINAL_ROUND:
        _finish_final_turn(state, gateway)
        return
    _advance(state)
    state.message = f"{state.current_player.name}'s turn - Knock or Continue?"


def _finish_final_turn(state: GameState, gateway: DeckGateway) -> None:
    state.round.final_turns_remaining -= 1
    if state.round.final_turns_remaining <= 0:
        _settle(state, gateway)
        return
    _advance(state)
    state.message = f"{state.current_player.name}'s final turn"


def _advance(state: GameState) -> None:
    if _check_for_winner(state):
        return
    state.current_player_index = next_eligible_player(state)
    state.turn_phase = TurnPhase.DECISION


def _check_for_winner(state: GameState) -> bool:
    settlement.refresh_eliminations(state)
    survivors = state.active_players()
    if len(survivors) != 1:
        return False
    state.winner_index = survivors[0].seat
    state.current_player_index = survivors[0].seat
    state.phase = GamePhase.GAME_END
    state.pending_card = None
    state.message = f"{survivors[0].name} wins the game!"
    logger.info("game over after round %d: %s wins", state.round_number, survivors[0].name)
    return True


def _settle(state: GameState, gateway: DeckGateway, blitz_player: int | None = None) -> None:
    if not settlement.begin_settlement(state):
        return
    result: RoundResult
    if blitz_player is not None:
        result = settlement.settle_blitz(state, blitz_player)
    else:
        result = settlement.settle_knock(state)
    state.last_result = result

    if _check_for_winner(state):
        state.message = f"{result.message} {state.message}"
        return

    state.round_number += 1
    state.phase = GamePhase.SETUP
    deal_round(state, gateway)
    state.message = f"{result.message} {state.message}"
