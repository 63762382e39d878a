"""Card abstractions and valuation helpers for Blitz."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Final, Iterable, Mapping


class Suit(str, Enum):
    """Enumeration of the four suits, in scoring tie-break order."""

    HEARTS = "HEARTS"
    DIAMONDS = "DIAMONDS"
    CLUBS = "CLUBS"
    SPADES = "SPADES"

    @property
    def symbol(self) -> str:
        return _SUIT_SYMBOLS[self]


class Rank(str, Enum):
    """Enumeration of ranks using the deck service value tokens."""

    ACE = "ACE"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "JACK"
    QUEEN = "QUEEN"
    KING = "KING"

    @property
    def short(self) -> str:
        """Return the one or two character label used in card codes."""

        if self in _FACE_SHORT:
            return _FACE_SHORT[self]
        return self.value


_SUIT_SYMBOLS: Final[dict[Suit, str]] = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
}
_FACE_SHORT: Final[dict[Rank, str]] = {
    Rank.ACE: "A",
    Rank.JACK: "J",
    Rank.QUEEN: "Q",
    Rank.KING: "K",
}
_SHORT_TO_RANK: Final[dict[str, Rank]] = {rank.short: rank for rank in Rank}
_SHORT_TO_RANK["0"] = Rank.TEN
_LETTER_TO_SUIT: Final[dict[str, Suit]] = {suit.value[0]: suit for suit in Suit}

RANK_VALUES: Final[dict[Rank, int]] = {
    Rank.ACE: 11,
    Rank.TWO: 2,
    Rank.THREE: 3,
    Rank.FOUR: 4,
    Rank.FIVE: 5,
    Rank.SIX: 6,
    Rank.SEVEN: 7,
    Rank.EIGHT: 8,
    Rank.NINE: 9,
    Rank.TEN: 10,
    Rank.JACK: 10,
    Rank.QUEEN: 10,
    Rank.KING: 10,
}


@dataclass(frozen=True, slots=True)
class Card:
    """Value object describing a single playing card."""

    rank: Rank
    suit: Suit
    image: str | None = field(default=None, compare=False, repr=False)

    @property
    def value(self) -> int:
        return RANK_VALUES[self.rank]

    @property
    def code(self) -> str:
        """Return the deck service short code, e.g. ``"AH"`` or ``"0S"``."""

        rank = "0" if self.rank is Rank.TEN else self.rank.short
        return f"{rank}{self.suit.value[0]}"

    def label(self) -> str:
        """Create a display label suitable for terminal output."""

        return f"{self.rank.short}{self.suit.symbol}"

    @classmethod
    def from_code(cls, code: str) -> "Card":
        """Parse a short code such as ``"KH"``, ``"0D"`` or ``"10D"``."""

        text = code.strip().upper()
        if len(text) < 2:
            raise ValueError(f"invalid card code '{code}'")
        rank_part, suit_part = text[:-1], text[-1]
        try:
            return cls(rank=_SHORT_TO_RANK[rank_part], suit=_LETTER_TO_SUIT[suit_part])
        except KeyError as exc:
            raise ValueError(f"invalid card code '{code}'") from exc

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Card":
        """Build a card from a deck service JSON object.

        Raises ``ValueError`` when the payload lacks a known rank or suit.
        """

        try:
            rank = Rank(str(payload["value"]).upper())
            suit = Suit(str(payload["suit"]).upper())
        except (KeyError, ValueError) as exc:
            raise ValueError(f"malformed card payload: {payload!r}") from exc
        image = payload.get("image")
        return cls(rank=rank, suit=suit, image=str(image) if image else None)

    def to_api(self) -> dict[str, str]:
        payload = {"code": self.code, "value": self.rank.value, "suit": self.suit.value}
        if self.image:
            payload["image"] = self.image
        return payload


def card_value(card: Card) -> int:
    """Return the point value of ``card``: Ace 11, faces 10, numerals face value."""

    return RANK_VALUES[card.rank]


def iter_full_deck() -> Iterable[Card]:
    """Yield all 52 cards of a fresh deck in suit then rank order."""

    for suit in Suit:
        for rank in Rank:
            yield Card(rank=rank, suit=suit)


def cards_from_codes(codes: Iterable[str]) -> list[Card]:
    return [Card.from_code(code) for code in codes]


def format_cards(cards: Iterable[Card]) -> str:
    return " ".join(card.label() for card in cards)
