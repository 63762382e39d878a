from __future__ import annotations

import random
from typing import Any

import pytest
import requests

from blitz.cards import Card, cards_from_codes
from blitz.deck import GatewayError, HttpDeckGateway, LocalDeckGateway, draw_with_reshuffle
from blitz.state import BlitzConfig, GamePhase, new_game_state


class FakeResponse:
    def __init__(self, payload: Any, status: int = 200) -> None:
        self._payload = payload
        self.status_code = status

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, responses: list[Any]) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, dict[str, Any] | None]] = []

    def get(self, url: str, params: dict[str, Any] | None = None, timeout: float | None = None) -> FakeResponse:
        self.calls.append((url, params))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        pass


def _card_json(code: str) -> dict[str, str]:
    return Card.from_code(code).to_api()


def test_http_gateway_creates_and_draws() -> None:
    session = FakeSession(
        [
            FakeResponse({"success": True, "deck_id": "abc123", "shuffled": True, "remaining": 52}),
            FakeResponse(
                {
                    "success": True,
                    "deck_id": "abc123",
                    "cards": [_card_json("AS"), _card_json("0H")],
                    "remaining": 50,
                }
            ),
        ]
    )
    gateway = HttpDeckGateway("https://example.test/api/deck/", session=session)  # type: ignore[arg-type]

    handle = gateway.create_deck()
    result = gateway.draw(handle.deck_id, 2)

    assert handle.deck_id == "abc123"
    assert handle.remaining == 52
    assert result.cards == tuple(cards_from_codes(["AS", "0H"]))
    assert result.remaining == 50
    assert session.calls[0][0] == "https://example.test/api/deck/new/shuffle/"
    assert session.calls[1] == ("https://example.test/api/deck/abc123/draw/", {"count": 2})


def test_http_gateway_reads_base_url_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BLITZ_DECK_API_URL", "http://localhost:8000/api/deck")
    gateway = HttpDeckGateway(session=FakeSession([]))  # type: ignore[arg-type]
    assert gateway.base_url == "http://localhost:8000/api/deck"


@pytest.mark.parametrize(
    "response",
    [
        requests.ConnectionError("offline"),
        FakeResponse({"success": True}, status=503),
        FakeResponse(ValueError("not json")),
        FakeResponse({"success": False, "error": "Deck ID does not exist."}),
        FakeResponse({"success": True, "remaining": 52}),
        FakeResponse(["not", "an", "object"]),
    ],
)
def test_http_gateway_create_failures_raise_gateway_error(response: Any) -> None:
    gateway = HttpDeckGateway(session=FakeSession([response]))  # type: ignore[arg-type]
    with pytest.raises(GatewayError):
        gateway.create_deck()


@pytest.mark.parametrize(
    "payload",
    [
        {"success": True, "remaining": 10},
        {"success": True, "cards": "AS", "remaining": 10},
        {"success": True, "cards": [{"value": "ONE", "suit": "HEARTS"}], "remaining": 10},
        {"success": True, "cards": [], "remaining": "many"},
    ],
)
def test_http_gateway_draw_rejects_malformed_payload(payload: dict[str, Any]) -> None:
    gateway = HttpDeckGateway(session=FakeSession([FakeResponse(payload)]))  # type: ignore[arg-type]
    with pytest.raises(GatewayError):
        gateway.draw("abc123", 1)


def test_local_gateway_serves_stacked_decks_first() -> None:
    stacked = cards_from_codes(["AS", "KS", "QS"])
    gateway = LocalDeckGateway(random.Random(1), stacked=[stacked])

    first = gateway.create_deck()
    drawn = gateway.draw(first.deck_id, 2)
    rest = gateway.draw(first.deck_id, 5)
    second = gateway.create_deck()

    assert first.remaining == 3
    assert drawn.cards == tuple(stacked[:2])
    assert drawn.remaining == 1
    assert rest.cards == (stacked[2],)
    assert rest.exhausted
    assert second.remaining == 52
    assert second.deck_id != first.deck_id


def test_local_gateway_shuffle_is_seeded() -> None:
    one = LocalDeckGateway(random.Random(42))
    two = LocalDeckGateway(random.Random(42))
    deck_one = one.draw(one.create_deck().deck_id, 52).cards
    deck_two = two.draw(two.create_deck().deck_id, 52).cards
    assert deck_one == deck_two
    assert len(set(deck_one)) == 52


def test_local_gateway_unknown_deck() -> None:
    with pytest.raises(GatewayError):
        LocalDeckGateway().draw("missing", 1)


def _state_with_deck(deck: list[str], discard: list[str], *later_decks: list[str]):
    gateway = LocalDeckGateway(
        random.Random(3),
        stacked=[cards_from_codes(deck), *(cards_from_codes(codes) for codes in later_decks)],
    )
    state = new_game_state(BlitzConfig.for_players(2, humans=0))
    handle = gateway.create_deck()
    state.deck_id = handle.deck_id
    state.deck_remaining = handle.remaining
    state.discard_pile = cards_from_codes(discard)
    state.phase = GamePhase.PLAYING
    return state, gateway


def test_draw_without_exhaustion_keeps_discards() -> None:
    state, gateway = _state_with_deck(["9C", "8C"], ["2H", "3H"])
    card = draw_with_reshuffle(state, gateway)
    assert card == Card.from_code("9C")
    assert state.deck_remaining == 1
    assert state.discard_pile == cards_from_codes(["2H", "3H"])
    assert gateway.created == 1


def test_reshuffle_keeps_only_top_discard() -> None:
    state, gateway = _state_with_deck([], ["2H", "3H", "4H"], ["9C", "8C"])
    old_deck = state.deck_id

    card = draw_with_reshuffle(state, gateway)

    assert card == Card.from_code("9C")
    assert state.discard_pile == cards_from_codes(["4H"])
    assert state.deck_id != old_deck
    assert state.deck_remaining == 1


def test_reshuffle_leaves_single_discard_untouched() -> None:
    state, gateway = _state_with_deck([], ["4H"], ["9C"])
    card = draw_with_reshuffle(state, gateway)
    assert card == Card.from_code("9C")
    assert state.discard_pile == cards_from_codes(["4H"])


def test_last_card_is_kept_and_deck_replaced() -> None:
    state, gateway = _state_with_deck(["5C"], ["2H", "3H"], ["9C"])
    card = draw_with_reshuffle(state, gateway)
    assert card == Card.from_code("5C")
    assert state.discard_pile == cards_from_codes(["3H"])
    assert gateway.created == 2
    assert state.deck_remaining == 1


def test_failed_reshuffle_does_not_touch_state() -> None:
    class NoNewDecks(LocalDeckGateway):
        def create_deck(self):
            raise GatewayError("offline")

    gateway = NoNewDecks(random.Random(1))
    state = new_game_state(BlitzConfig.for_players(2, humans=0))
    gateway._decks["empty"] = []
    state.deck_id = "empty"
    state.discard_pile = cards_from_codes(["2H", "3H"])

    with pytest.raises(GatewayError):
        draw_with_reshuffle(state, gateway)
    assert state.deck_id == "empty"
    assert state.discard_pile == cards_from_codes(["2H", "3H"])


EXHAUSTED_DRAW = {
    "success": False,
    "deck_id": "abc123",
    "cards": [],
    "remaining": 0,
    "error": "Not enough cards remaining to draw 1 additional",
}


def test_http_gateway_treats_exhausted_deck_as_short_draw() -> None:
    gateway = HttpDeckGateway(session=FakeSession([FakeResponse(EXHAUSTED_DRAW)]))  # type: ignore[arg-type]
    result = gateway.draw("abc123", 1)
    assert result.cards == ()
    assert result.exhausted


def test_http_gateway_unknown_deck_on_draw_is_an_error() -> None:
    payload = {"success": False, "error": "Deck ID does not exist."}
    gateway = HttpDeckGateway(session=FakeSession([FakeResponse(payload)]))  # type: ignore[arg-type]
    with pytest.raises(GatewayError):
        gateway.draw("missing", 1)


def test_http_exhausted_deck_is_reshuffled() -> None:
    session = FakeSession(
        [
            FakeResponse(EXHAUSTED_DRAW),
            FakeResponse({"success": True, "deck_id": "fresh", "shuffled": True, "remaining": 52}),
            FakeResponse({"success": True, "deck_id": "fresh", "cards": [_card_json("9C")], "remaining": 51}),
        ]
    )
    gateway = HttpDeckGateway("https://example.test/api/deck", session=session)  # type: ignore[arg-type]
    state = new_game_state(BlitzConfig.for_players(2, humans=0))
    state.deck_id = "abc123"
    state.discard_pile = cards_from_codes(["2H", "3H", "4H"])

    card = draw_with_reshuffle(state, gateway)

    assert card == Card.from_code("9C")
    assert state.discard_pile == cards_from_codes(["4H"])
    assert state.deck_id == "fresh"
    assert state.deck_remaining == 51
    assert session.calls[2][0] == "https://example.test/api/deck/fresh/draw/"


def test_local_gateway_retires_replaced_decks() -> None:
    gateway = LocalDeckGateway(random.Random(5))
    first = gateway.create_deck()
    second = gateway.create_deck()

    with pytest.raises(GatewayError):
        gateway.draw(first.deck_id, 1)
    assert len(gateway.draw(second.deck_id, 1).cards) == 1

    gateway.close()
    with pytest.raises(GatewayError):
        gateway.draw(second.deck_id, 1)
