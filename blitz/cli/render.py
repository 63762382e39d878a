"""Rendering helpers dedicated to the CLI experience."""

from __future__ import annotations

from typing import Iterable

from rich.console import RenderableType
from rich.panel import Panel

from ..cards import Card, Suit
from ..state import GameState, RoundResult
from .views import RoundRevealView, StateSummaryView

_SUIT_COLORS = {
    Suit.SPADES: "cyan",
    Suit.HEARTS: "red",
    Suit.DIAMONDS: "magenta",
    Suit.CLUBS: "green",
}


def format_card(card: Card) -> str:
    """Return a Rich-rendered label for ``card``."""

    color = _SUIT_COLORS.get(card.suit, "white")
    return f"[{color}]{card.label()}[/{color}]"


def render_state(
    state: GameState,
    *,
    reveal_players: Iterable[int] | None = None,
    title: str = "Blitz",
) -> RenderableType:
    """Return a Rich panel describing the current table state."""

    view = StateSummaryView(
        state=state,
        reveal_players=set(reveal_players or set()),
        card_formatter=format_card,
    )
    header = f"{title} • {state.message}" if state.message else title
    return Panel(view.render(), title=header, padding=(0, 1), border_style="cyan")


def render_round_result(state: GameState, result: RoundResult) -> RenderableType:
    return RoundRevealView(state=state, result=result, card_formatter=format_card).render()
