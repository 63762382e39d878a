"""Typer entry-point wiring for the Blitz CLI."""

from __future__ import annotations

import logging
import random
import time

import typer
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import Prompt
from rich.table import Table

from .. import benchmark
from ..actions import Action, DiscardAction, DrawAction, KnockAction, StandAction, legal_actions
from ..deck import DeckGateway, GatewayError, HttpDeckGateway, LocalDeckGateway
from ..opponent import OpponentDecision
from ..session import GameSession
from ..state import BlitzConfig, GameState, RoundResult, TurnPhase
from .render import format_card, render_round_result, render_state

app = typer.Typer(add_completion=False, rich_markup_mode="rich")
console = Console()

MAX_GATEWAY_RETRIES = 3


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _describe_action(state: GameState, action: Action) -> str:
    if isinstance(action, KnockAction):
        return "Knock"
    if isinstance(action, StandAction):
        return "Stand (keep your hand)"
    if isinstance(action, DrawAction):
        if action.source == "deck":
            return "Draw from deck"
        top = state.top_discard
        return f"Take discard ({format_card(top)})" if top is not None else "Take discard"
    if isinstance(action, DiscardAction):
        if action.hand_index is None:
            pending = state.pending_card
            return f"Discard drawn card ({format_card(pending)})" if pending is not None else "Discard drawn card"
        return f"Discard {format_card(state.current_player.hand[action.hand_index])}"
    raise TypeError(f"unknown action {action!r}")


def _describe_decision(name: str, decision: OpponentDecision, after: GameState) -> str:
    action = decision.action
    if isinstance(action, KnockAction):
        return f"[cyan]{name}[/cyan] knocks!"
    if isinstance(action, StandAction):
        return f"[cyan]{name}[/cyan] stands."
    source = "the deck" if isinstance(action, DrawAction) and action.source == "deck" else "the discard pile"
    line = f"[cyan]{name}[/cyan] draws from {source}"
    if after.discard_log and after.discard_log[-1].player_name == name:
        line += f" and discards {format_card(after.discard_log[-1].card)}"
    return line + "."


def _prompt_action(state: GameState) -> Action:
    options = legal_actions(state)
    title = "Choose a discard" if state.turn_phase is TurnPhase.DISCARD else "Your move"
    console.print(f"[bold]{title}[/bold]")
    for idx, action in enumerate(options, start=1):
        console.print(f"  [bold]{idx}[/bold] {_describe_action(state, action)}")
    choice = Prompt.ask("Select", choices=[str(idx) for idx in range(1, len(options) + 1)], console=console)
    return options[int(choice) - 1]


def _build_gateway(online: bool, rng: random.Random) -> DeckGateway:
    if online:
        return HttpDeckGateway()
    return LocalDeckGateway(random.Random(rng.getrandbits(32)))


def _report_round(state: GameState, result: RoundResult | None, previous: RoundResult | None) -> None:
    if result is not None and result is not previous:
        console.print(render_round_result(state, result))


@app.command()
def play(
    players: int = typer.Option(4, min=2, max=6, help="Number of seated players."),
    seed: int | None = typer.Option(None, help="Random seed for reproducible games (omit for randomness)."),
    online: bool = typer.Option(
        False,
        "--online/--offline",
        help="Use the deckofcardsapi.com service instead of a local deck.",
    ),
    delay: float = typer.Option(1.0, min=0.0, help="Seconds to pause before each computer turn."),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging."),
) -> None:
    """Play Blitz against computer opponents."""

    _configure_logging(verbose)
    rng = random.Random(seed)
    gateway = _build_gateway(online, rng)
    try:
        _play_session(GameSession(BlitzConfig.for_players(players, humans=1), gateway, rng), delay)
    finally:
        gateway.close()


def _play_session(session: GameSession, delay: float) -> None:
    try:
        session.start()
    except GatewayError as exc:
        console.print(f"[red]Could not start the game: {exc}[/red]")
        raise typer.Exit(code=1)

    failures = 0
    while not session.state.is_over:
        state = session.state
        previous = state.last_result
        try:
            if state.current_player.is_human:
                console.print(render_state(state, reveal_players={state.current_player_index}))
                if not session.submit(_prompt_action(state)):
                    console.print("[yellow]That move is not available right now.[/yellow]")
            else:
                time.sleep(delay)
                name = state.current_player.name
                decision = session.play_opponent_turn()
                console.print(_describe_decision(name, decision, session.state))
        except GatewayError as exc:
            failures += 1
            console.print(f"[red]Deck service unavailable ({exc}).[/red]")
            if failures >= MAX_GATEWAY_RETRIES:
                raise typer.Exit(code=1)
            continue
        failures = 0
        _report_round(session.state, session.state.last_result, previous)

    winner = session.state.winner
    console.print(f"[bold green]{winner.name if winner else 'Nobody'} wins the game![/bold green]")


@app.command("simulate")
def simulate_cli(
    games: int = typer.Option(100, min=1, help="Number of all-computer games."),
    players: int = typer.Option(4, min=2, max=6, help="Seats per game."),
    seed: int = typer.Option(123, help="Random seed for the simulation."),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging."),
) -> None:
    """Run computer-only games and summarise how each seat fared."""

    _configure_logging(verbose)
    report = benchmark.run_simulation(games, num_players=players, seed=seed)

    table = Table(title="Blitz Simulation", box=box.SIMPLE_HEAVY)
    table.add_column("Seat", justify="center")
    table.add_column("Wins", justify="right")
    table.add_column("Win rate", justify="right")
    for seat, (wins, rate) in enumerate(zip(report.wins, report.win_rates)):
        table.add_row(f"P{seat + 1}", str(wins), f"{rate:.1%}")
    console.print(table)
    console.print(
        f"[cyan]{report.games} game(s), {report.mean_rounds:.1f} round(s) on average, "
        f"{report.knocks} knock(s), {report.blitzes} blitz(es).[/cyan]"
    )
    if report.unfinished:
        console.print(f"[yellow]{report.unfinished} game(s) hit the turn limit.[/yellow]")


def main() -> None:
    """Entry-point for ``python -m blitz.cli``."""

    app()


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    main()
