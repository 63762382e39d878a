"""Rule-based decision procedure for computer-controlled Blitz players."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Sequence

from .actions import Action, DrawAction, KnockAction, StandAction
from .cards import Card
from .scoring import ScoreSnapshot, hypothetical_best, score_hand
from .state import GameState

__all__ = [
    "OpponentProfile",
    "OpponentDecision",
    "profile_for_seat",
    "choose_discard",
    "swapped_best",
    "resolve_draw",
    "decide",
    "decide_for",
]


@dataclass(frozen=True, slots=True)
class OpponentProfile:
    """Personality parameters for one computer seat."""

    risk_tolerance: float
    aggressiveness: float
    knock_threshold: int
    conservative_threshold: int
    final_round_stand_score: int = 18
    discard_take_improvement: int = 3
    best_suit_discard_penalty: int = 5
    max_knock_chance: float = 0.8
    knock_confidence_floor: int = 15


def profile_for_seat(seat: int) -> OpponentProfile:
    """Derive a stable profile from the seat index.

    Knock thresholds land in the 20s and conservative thresholds in the high
    teens to low 20s, rising with the seat number.
    """

    risk_tenths = 7 + seat
    aggression_hundredths = 60 + seat * 8
    return OpponentProfile(
        risk_tolerance=risk_tenths / 10,
        aggressiveness=aggression_hundredths / 100,
        knock_threshold=20 + (risk_tenths * 8) // 10,
        conservative_threshold=15 + aggression_hundredths // 10,
    )


@dataclass(frozen=True, slots=True)
class OpponentDecision:
    """Action chosen at decision time plus the planned hand discard for a draw."""

    action: Action
    discard_index: int | None = None


def choose_discard(hand: Sequence[Card], score: ScoreSnapshot, profile: OpponentProfile) -> int:
    """Return the index of the cheapest hand card to give up.

    Cost is the card value, plus a penalty for cards of the leading suit.
    The first index wins ties.
    """

    def cost(index: int) -> int:
        card = hand[index]
        penalty = profile.best_suit_discard_penalty if card.suit is score.best_suit else 0
        return card.value + penalty

    return min(range(len(hand)), key=cost)


def swapped_best(hand: Sequence[Card], index: int, card: Card) -> int:
    """Best score of ``hand`` with ``card`` replacing the card at ``index``."""

    swapped = list(hand)
    swapped[index] = card
    return score_hand(swapped).best_score


def resolve_draw(hand: Sequence[Card], score: ScoreSnapshot, drawn: Card, profile: OpponentProfile) -> int | None:
    """Pick the discard once the drawn card is known.

    The drawn card replaces the :func:`choose_discard` card only when that
    raises the best score; otherwise the drawn card itself is discarded.
    """

    index = choose_discard(hand, score, profile)
    if swapped_best(hand, index, drawn) > score.best_score:
        return index
    return None


def decide(
    hand: Sequence[Card],
    score: ScoreSnapshot,
    top_discard: Card | None,
    other_active: int,
    has_knocked: bool,
    profile: OpponentProfile,
    rng: random.Random,
) -> OpponentDecision:
    """Choose the next action for a computer player.

    ``rng`` is only consulted for the knock gamble, so a seeded generator
    makes every branch reproducible.
    """

    if other_active < 1:
        raise ValueError("decision requires at least one other active player")
    current = score.best_score
    improvement = hypothetical_best(score, top_discard) - current if top_discard is not None else 0
    discard_index = choose_discard(hand, score, profile)
    # The additive estimate ignores the card given up; the swap must pay off.
    swap_pays = top_discard is not None and swapped_best(hand, discard_index, top_discard) > current

    def draw(source: str) -> OpponentDecision:
        return OpponentDecision(DrawAction(source=source), discard_index)

    if has_knocked:
        if current >= profile.final_round_stand_score:
            return OpponentDecision(StandAction())
        # Final turn: any gain from the discard is taken.
        if improvement >= 1 and swap_pays:
            return draw("discard")
        return draw("deck")

    if current >= profile.knock_threshold:
        knock_chance = min(
            profile.max_knock_chance,
            (current - profile.knock_confidence_floor) / profile.knock_confidence_floor,
        )
        if rng.random() < knock_chance:
            return OpponentDecision(KnockAction())

    if swap_pays:
        if improvement >= profile.discard_take_improvement or (
            improvement >= 1 and current < profile.conservative_threshold
        ):
            return draw("discard")

    return draw("deck")


def decide_for(state: GameState, profile: OpponentProfile, rng: random.Random) -> OpponentDecision:
    """Run :func:`decide` for the current player of ``state`` without mutating it."""

    player = state.current_player
    return decide(
        hand=player.hand,
        score=player.score,
        top_discard=state.top_discard,
        other_active=sum(1 for _ in state.iter_opponents(player.seat)),
        has_knocked=state.round.has_knocked,
        profile=profile,
        rng=rng,
    )
