"""Deck gateway: the boundary to the external shuffling and dealing service."""

from __future__ import annotations

import logging
import os
import random
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final, Iterable, Protocol, Sequence

import requests

from .cards import Card, iter_full_deck

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .state import GameState

__all__ = [
    "DEFAULT_BASE_URL",
    "GatewayError",
    "DeckHandle",
    "DrawResult",
    "DeckGateway",
    "HttpDeckGateway",
    "LocalDeckGateway",
    "draw_with_reshuffle",
]

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL: Final[str] = "https://deckofcardsapi.com/api/deck"
BASE_URL_ENV: Final[str] = "BLITZ_DECK_API_URL"


class GatewayError(RuntimeError):
    """Raised when the deck service is unreachable or returns malformed data."""


@dataclass(frozen=True, slots=True)
class DeckHandle:
    """Identifier and size of a freshly shuffled deck."""

    deck_id: str
    remaining: int


@dataclass(frozen=True, slots=True)
class DrawResult:
    """Cards returned by a draw, possibly fewer than requested."""

    cards: tuple[Card, ...]
    remaining: int

    @property
    def exhausted(self) -> bool:
        return not self.cards or self.remaining == 0


class DeckGateway(Protocol):
    def create_deck(self) -> DeckHandle:
        ...

    def draw(self, deck_id: str, count: int) -> DrawResult:
        ...

    def close(self) -> None:
        ...


def _require(payload: Any, key: str) -> Any:
    if not isinstance(payload, dict) or key not in payload:
        raise GatewayError(f"deck service response missing '{key}'")
    return payload[key]


class HttpDeckGateway:
    """Client for a deckofcardsapi.com compatible service."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float = 5.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = (base_url or os.environ.get(BASE_URL_ENV) or DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def _get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        allow_short_draw: bool = False,
    ) -> dict[str, Any]:
        url = f"{self.base_url}/{path}"
        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            logger.warning("deck service request failed: %s", exc)
            raise GatewayError(f"deck service request to {url} failed") from exc
        except ValueError as exc:
            raise GatewayError(f"deck service returned invalid JSON from {url}") from exc
        if not isinstance(payload, dict):
            raise GatewayError("deck service response is not an object")
        if payload.get("success") is False:
            # An exhausted deck answers a draw with success false plus the short hand.
            if allow_short_draw and isinstance(payload.get("cards"), list) and "remaining" in payload:
                logger.debug("short draw from %s: %s", url, payload.get("error"))
                return payload
            raise GatewayError(payload.get("error") or "deck service reported failure")
        return payload

    def create_deck(self) -> DeckHandle:
        payload = self._get("new/shuffle/", params={"deck_count": 1})
        deck_id = _require(payload, "deck_id")
        remaining = _require(payload, "remaining")
        logger.debug("created deck %s (%s cards)", deck_id, remaining)
        try:
            return DeckHandle(deck_id=str(deck_id), remaining=int(remaining))
        except (TypeError, ValueError) as exc:
            raise GatewayError("deck service returned a non-numeric remaining count") from exc

    def draw(self, deck_id: str, count: int) -> DrawResult:
        if count <= 0:
            raise ValueError("count must be positive")
        payload = self._get(f"{deck_id}/draw/", params={"count": count}, allow_short_draw=True)
        raw_cards = _require(payload, "cards")
        remaining = _require(payload, "remaining")
        if not isinstance(raw_cards, list):
            raise GatewayError("deck service 'cards' is not a list")
        try:
            cards = tuple(Card.from_api(raw) for raw in raw_cards)
            remaining_count = int(remaining)
        except (TypeError, ValueError) as exc:
            raise GatewayError("deck service returned malformed cards") from exc
        logger.debug("drew %d card(s) from %s, %d remaining", len(cards), deck_id, remaining_count)
        return DrawResult(cards=cards, remaining=remaining_count)

    def close(self) -> None:
        self._session.close()


class LocalDeckGateway:
    """In-memory deck service for a single table.

    Decks are shuffled with the injected ``rng``. Any ``stacked`` decks are
    served first, in order, with cards drawn front to back; this makes games
    replayable. Creating a deck retires the previous one, so at most one deck
    is held at a time.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        *,
        stacked: Iterable[Sequence[Card]] = (),
    ) -> None:
        self.rng = rng or random.Random()
        self._stacked: deque[list[Card]] = deque(list(deck) for deck in stacked)
        self._decks: dict[str, list[Card]] = {}
        self.created = 0

    def create_deck(self) -> DeckHandle:
        if self._stacked:
            cards = self._stacked.popleft()
        else:
            cards = list(iter_full_deck())
            self.rng.shuffle(cards)
        self.created += 1
        deck_id = f"local-{self.created}"
        self._decks.clear()
        self._decks[deck_id] = cards
        return DeckHandle(deck_id=deck_id, remaining=len(cards))

    def draw(self, deck_id: str, count: int) -> DrawResult:
        if count <= 0:
            raise ValueError("count must be positive")
        try:
            cards = self._decks[deck_id]
        except KeyError as exc:
            raise GatewayError(f"unknown deck '{deck_id}'") from exc
        drawn = tuple(cards[:count])
        del cards[:count]
        return DrawResult(cards=drawn, remaining=len(cards))

    def close(self) -> None:
        self._decks.clear()


def draw_with_reshuffle(state: "GameState", gateway: DeckGateway) -> Card:
    """Draw one card for the current turn, recovering from deck exhaustion.

    When the deck is exhausted the discard pile keeps only its top card and a
    brand-new shuffled deck replaces the old one. With one discard or fewer the
    pile is left alone. Mutates ``state`` only after every gateway call has
    succeeded.
    """

    card: Card | None = None
    if state.deck_id is not None:
        result = gateway.draw(state.deck_id, 1)
        if not result.exhausted:
            state.deck_remaining = result.remaining
            return result.cards[0]
        if result.cards:
            card = result.cards[0]

    handle = gateway.create_deck()
    deck_id, remaining = handle.deck_id, handle.remaining
    if card is None:
        fresh = gateway.draw(deck_id, 1)
        if not fresh.cards:
            raise GatewayError("new deck returned no cards")
        card = fresh.cards[0]
        remaining = fresh.remaining

    logger.info("deck exhausted; reshuffled into new deck %s", deck_id)
    if len(state.discard_pile) > 1:
        state.discard_pile[:] = state.discard_pile[-1:]
    state.deck_id = deck_id
    state.deck_remaining = remaining
    return card
