"""Composable view primitives for the Blitz CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence, Set

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table

from ..cards import Card
from ..state import GamePhase, GameState, RoundResult


@dataclass(slots=True)
class StateSummaryView:
    """Renderable summarising the current table state."""

    state: GameState
    reveal_players: Set[int]
    card_formatter: Callable[[Card], str]

    def _hand_markup(self, cards: Sequence[Card], visible: bool) -> str:
        if not cards:
            return "—"
        if not visible:
            return f"{len(cards)} cards"
        return " ".join(self.card_formatter(card) for card in cards)

    def _metadata_panel(self) -> Panel:
        state = self.state
        grid = Table.grid(expand=True)
        grid.add_column(justify="left")
        grid.add_row(f"[cyan]Round[/cyan]: {state.round_number}")
        grid.add_row(f"[cyan]Deck[/cyan]: {state.deck_remaining} card(s)")
        if state.top_discard is not None:
            top_card = self.card_formatter(state.top_discard)
            grid.add_row(f"[cyan]Discard[/cyan]: {top_card} ({len(state.discard_pile)} card(s))")
        else:
            grid.add_row("[cyan]Discard[/cyan]: —")
        if state.round.knocker is not None:
            knocker = state.players[state.round.knocker].name
            grid.add_row(
                f"[cyan]Knocked[/cyan]: {knocker} ({state.round.final_turns_remaining} final turn(s) left)"
            )
        if state.pending_card is not None and state.current_player_index in self.reveal_players:
            grid.add_row(f"[cyan]Drawn[/cyan]: {self.card_formatter(state.pending_card)}")
        return Panel(grid, title="Table State", box=box.SQUARE, border_style="blue")

    def render(self) -> RenderableType:
        state = self.state
        table = Table(box=box.ROUNDED, expand=True)
        table.add_column("Player", justify="left", style="bold")
        table.add_column("Role", justify="left")
        table.add_column("Hand", justify="left")
        table.add_column("Score", justify="right")
        table.add_column("Coins", justify="right")
        table.add_column("Status", justify="left")

        for player in state.players:
            visible = player.seat in self.reveal_players
            score = f"{player.score.best_score} {player.score.best_suit.symbol}" if visible and player.hand else "?"
            status_text = "In"
            if player.is_eliminated:
                status_text = "[dim]Out[/dim]"
            elif state.winner_index == player.seat:
                status_text = "[bold green]Winner[/bold green]"
            elif state.round.knocker == player.seat:
                status_text = "[magenta]Knocked[/magenta]"

            name = player.name
            if player.seat == state.current_player_index and state.phase is not GamePhase.GAME_END:
                name = f"[bold yellow]{name}[/bold yellow]"
            role = "Human" if player.is_human else "AI"
            table.add_row(
                name,
                role,
                self._hand_markup(player.hand, visible),
                score,
                "●" * player.coins or "0",
                status_text,
            )

        return Group(table, self._metadata_panel())


@dataclass(slots=True)
class RoundRevealView:
    """Renderable showing every hand at the end of a round."""

    state: GameState
    result: RoundResult
    card_formatter: Callable[[Card], str]

    def render(self) -> RenderableType:
        table = Table(box=box.SIMPLE, expand=True, title=f"Round {self.result.round_number} hands")
        table.add_column("Player", justify="left", style="bold")
        table.add_column("Hand", justify="left")
        table.add_column("Best", justify="right")
        table.add_column("Coins", justify="right")
        for player, hand, best, change in zip(
            self.state.players,
            self.result.revealed_hands,
            self.result.best_scores,
            self.result.coin_changes,
        ):
            hand_text = " ".join(self.card_formatter(card) for card in hand) or "—"
            delta = f"{change:+d}" if change else ""
            table.add_row(player.name, hand_text, str(best) if hand else "", delta)
        return Panel(Group(table, self.result.message), title="Round Over", border_style="green")
