"""Round settlement: coin transfers, eliminations and the hand reveal."""

from __future__ import annotations

import logging
from typing import Sequence

from .state import GamePhase, GameState, RoundResult, best_scores

__all__ = [
    "begin_settlement",
    "knock_transfers",
    "blitz_transfers",
    "apply_coins",
    "refresh_eliminations",
    "settle_knock",
    "settle_blitz",
]

logger = logging.getLogger(__name__)


def begin_settlement(state: GameState) -> bool:
    """Claim the round for settlement.

    Only one claim per round succeeds: the phase moves to ``ROUND_END`` and
    stays there until the next round is dealt or the game ends.
    """

    if state.phase not in (GamePhase.PLAYING, GamePhase.FINAL_ROUND):
        logger.debug("settlement already claimed for round %d", state.round_number)
        return False
    state.phase = GamePhase.ROUND_END
    return True


def knock_transfers(
    knocker: int,
    scores: Sequence[int],
    active: Sequence[int],
    *,
    win_amount: int = 1,
    fail_amount: int = 2,
) -> tuple[dict[int, int], int, bool]:
    """Return ``(signed coin deltas, penalised or rewarded seat, knock succeeded)``.

    ``active`` lists the non-eliminated seats in seat order. Ties for the
    lowest or highest other score go to the first seat.
    """

    others = [seat for seat in active if seat != knocker]
    if not others:
        raise ValueError("knock settlement needs at least one other active player")
    knock_score = scores[knocker]
    lowest = min(scores[seat] for seat in others)
    if knock_score > lowest:
        loser = next(seat for seat in others if scores[seat] == lowest)
        return {loser: -win_amount, knocker: win_amount}, loser, True
    highest = max(scores[seat] for seat in others)
    gainer = next(seat for seat in others if scores[seat] == highest)
    return {knocker: -fail_amount, gainer: fail_amount}, gainer, False


def blitz_transfers(achiever: int, active: Sequence[int], *, amount: int = 1) -> dict[int, int]:
    """Every other active seat pays ``amount``; the achiever collects all of it."""

    payers = [seat for seat in active if seat != achiever]
    deltas = {seat: -amount for seat in payers}
    deltas[achiever] = amount * len(payers)
    return deltas


def apply_coins(state: GameState, deltas: dict[int, int]) -> tuple[int, ...]:
    """Apply signed deltas, flooring balances at zero; returns the realised changes.

    Gains are credited in full even when the paying side was floored.
    """

    before = [player.coins for player in state.players]
    for seat, delta in deltas.items():
        player = state.players[seat]
        player.coins = max(0, player.coins + delta)
    return tuple(player.coins - previous for player, previous in zip(state.players, before))


def refresh_eliminations(state: GameState) -> tuple[int, ...]:
    """Mark zero-coin players eliminated; returns the newly eliminated seats."""

    return tuple(player.seat for player in state.players if player.refresh_elimination())


def _elimination_note(state: GameState, eliminated: Sequence[int]) -> str:
    if not eliminated:
        return ""
    names = ", ".join(state.players[seat].name for seat in eliminated)
    return f" {names} eliminated."


def _reveal(state: GameState) -> tuple[tuple, tuple[int, ...]]:
    hands = tuple(tuple(player.hand) for player in state.players)
    return hands, best_scores(state.players)


def settle_knock(state: GameState) -> RoundResult:
    """Resolve a round that ended with the final-round countdown."""

    knocker_seat = state.round.knocker
    if knocker_seat is None:
        raise ValueError("cannot settle a knock without a knocker")
    hands, scores = _reveal(state)
    active = [player.seat for player in state.active_players()]
    deltas, other_seat, succeeded = knock_transfers(
        knocker_seat,
        scores,
        active,
        win_amount=state.config.knock_win_coins,
        fail_amount=state.config.failed_knock_coins,
    )
    changes = apply_coins(state, deltas)
    eliminated = refresh_eliminations(state)

    knocker = state.players[knocker_seat]
    other = state.players[other_seat]
    if succeeded:
        message = f"{knocker.name} won! {other.name} loses {state.config.knock_win_coins} coin."
    else:
        message = (
            f"{knocker.name}'s knock failed! Loses {state.config.failed_knock_coins} coins "
            f"to {other.name}."
        )
    message += _elimination_note(state, eliminated)
    logger.info("round %d settled by knock: %s", state.round_number, message)
    return RoundResult(
        round_number=state.round_number,
        kind="knock",
        coin_changes=changes,
        eliminated=eliminated,
        message=message,
        revealed_hands=hands,
        best_scores=scores,
        knocker=knocker_seat,
        knock_succeeded=succeeded,
    )


def settle_blitz(state: GameState, achiever: int) -> RoundResult:
    """Resolve a round ended early by a hand worth exactly the blitz score."""

    hands, scores = _reveal(state)
    active = [player.seat for player in state.active_players()]
    changes = apply_coins(state, blitz_transfers(achiever, active, amount=state.config.blitz_coins))
    eliminated = refresh_eliminations(state)
    message = f"BLITZ! {state.players[achiever].name} hit {state.config.blitz_score}!"
    message += _elimination_note(state, eliminated)
    logger.info("round %d settled by blitz: %s", state.round_number, message)
    return RoundResult(
        round_number=state.round_number,
        kind="blitz",
        coin_changes=changes,
        eliminated=eliminated,
        message=message,
        revealed_hands=hands,
        best_scores=scores,
        knocker=state.round.knocker,
        blitz_player=achiever,
    )
