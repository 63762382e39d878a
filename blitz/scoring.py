"""Hand scoring for Blitz: per-suit sums, best score and best suit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, Iterable, Sequence

import numpy as np

from .cards import Card, Suit

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from numpy.typing import NDArray

HAND_SIZE: Final[int] = 3
BLITZ_SCORE: Final[int] = 31
SUIT_ORDER: Final[tuple[Suit, ...]] = (Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS, Suit.SPADES)
SUIT_INDEX: Final[dict[Suit, int]] = {suit: idx for idx, suit in enumerate(SUIT_ORDER)}

__all__ = [
    "HAND_SIZE",
    "BLITZ_SCORE",
    "SUIT_ORDER",
    "ScoreSnapshot",
    "suit_buckets",
    "score_hand",
    "has_blitz",
    "hypothetical_best",
]


@dataclass(frozen=True, slots=True)
class ScoreSnapshot:
    """Cached scoring summary for a player's hand."""

    suit_scores: tuple[int, int, int, int]
    best_score: int
    best_suit: Suit

    @classmethod
    def empty(cls) -> "ScoreSnapshot":
        return cls(suit_scores=(0, 0, 0, 0), best_score=0, best_suit=Suit.HEARTS)

    def for_suit(self, suit: Suit) -> int:
        """Return the bucket total for ``suit``."""

        return self.suit_scores[SUIT_INDEX[suit]]

    def as_dict(self) -> dict[str, int]:
        return {suit.value.lower(): score for suit, score in zip(SUIT_ORDER, self.suit_scores)}


def suit_buckets(cards: Iterable[Card]) -> "NDArray[np.int64]":
    """Return the four suit totals; each bucket only sums cards of its own suit."""

    indices = []
    values = []
    for card in cards:
        indices.append(SUIT_INDEX[card.suit])
        values.append(card.value)
    if not indices:
        return np.zeros(len(SUIT_ORDER), dtype=np.int64)
    return np.bincount(
        np.asarray(indices, dtype=np.int64),
        weights=np.asarray(values, dtype=np.int64),
        minlength=len(SUIT_ORDER),
    ).astype(np.int64)


def score_hand(hand: Sequence[Card]) -> ScoreSnapshot:
    """Score a three card hand.

    The best suit is the first suit in hearts, diamonds, clubs, spades
    order whose bucket equals the best score.
    """

    if len(hand) != HAND_SIZE:
        raise ValueError(f"a hand must contain exactly {HAND_SIZE} cards, got {len(hand)}")
    buckets = suit_buckets(hand)
    # argmax returns the first occurrence, which is the enumeration tie-break.
    best_index = int(np.argmax(buckets))
    suit_scores = tuple(int(value) for value in buckets)
    return ScoreSnapshot(
        suit_scores=(suit_scores[0], suit_scores[1], suit_scores[2], suit_scores[3]),
        best_score=int(buckets[best_index]),
        best_suit=SUIT_ORDER[best_index],
    )


def has_blitz(snapshot: ScoreSnapshot, blitz_score: int = BLITZ_SCORE) -> bool:
    """Return ``True`` only for a best score of exactly ``blitz_score``."""

    return snapshot.best_score == blitz_score


def hypothetical_best(snapshot: ScoreSnapshot, card: Card) -> int:
    """Best score if ``card`` were added to its suit bucket without removing anything."""

    return max(snapshot.best_score, snapshot.for_suit(card.suit) + card.value)
