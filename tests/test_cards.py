from __future__ import annotations

import pytest

from blitz.cards import Card, Rank, Suit, card_value, cards_from_codes, format_cards, iter_full_deck


@pytest.mark.parametrize("suit", list(Suit))
@pytest.mark.parametrize(
    ("rank", "expected"),
    [
        (Rank.ACE, 11),
        (Rank.KING, 10),
        (Rank.QUEEN, 10),
        (Rank.JACK, 10),
        (Rank.TEN, 10),
        (Rank.NINE, 9),
        (Rank.FIVE, 5),
        (Rank.TWO, 2),
    ],
)
def test_rank_values(rank: Rank, suit: Suit, expected: int) -> None:
    card = Card(rank=rank, suit=suit)
    assert card_value(card) == expected
    assert card.value == expected


def test_full_deck_has_52_unique_cards() -> None:
    deck = list(iter_full_deck())
    assert len(deck) == 52
    assert len(set(deck)) == 52
    assert sum(card.value for card in deck) == 4 * (11 + 2 + 3 + 4 + 5 + 6 + 7 + 8 + 9 + 10 * 4)


@pytest.mark.parametrize(
    ("code", "rank", "suit"),
    [
        ("AH", Rank.ACE, Suit.HEARTS),
        ("0S", Rank.TEN, Suit.SPADES),
        ("10s", Rank.TEN, Suit.SPADES),
        ("KD", Rank.KING, Suit.DIAMONDS),
        ("7C", Rank.SEVEN, Suit.CLUBS),
    ],
)
def test_from_code(code: str, rank: Rank, suit: Suit) -> None:
    card = Card.from_code(code)
    assert card.rank is rank
    assert card.suit is suit


@pytest.mark.parametrize("code", ["", "Z", "1H", "AX", "QQ"])
def test_from_code_rejects_garbage(code: str) -> None:
    with pytest.raises(ValueError):
        Card.from_code(code)


def test_code_round_trips_for_every_card() -> None:
    for card in iter_full_deck():
        assert Card.from_code(card.code) == card


def test_from_api_parses_service_payload() -> None:
    payload = {
        "code": "0D",
        "image": "https://deckofcardsapi.com/static/img/0D.png",
        "value": "10",
        "suit": "DIAMONDS",
    }
    card = Card.from_api(payload)
    assert card == Card(Rank.TEN, Suit.DIAMONDS)
    assert card.image == payload["image"]
    assert card.to_api()["code"] == "0D"


def test_image_is_ignored_for_equality() -> None:
    assert Card(Rank.ACE, Suit.SPADES, image="a.png") == Card(Rank.ACE, Suit.SPADES)


@pytest.mark.parametrize(
    "payload",
    [
        {"value": "ACE"},
        {"suit": "HEARTS"},
        {"value": "ONE", "suit": "HEARTS"},
        {"value": "ACE", "suit": "STARS"},
    ],
)
def test_from_api_rejects_malformed_payload(payload: dict[str, str]) -> None:
    with pytest.raises(ValueError):
        Card.from_api(payload)


def test_format_cards_uses_suit_symbols() -> None:
    assert format_cards(cards_from_codes(["AH", "0S", "QC"])) == "A♥ 10♠ Q♣"
