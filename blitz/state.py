"""Core game state data structures for Blitz."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Sequence

from .cards import Card
from .scoring import BLITZ_SCORE, HAND_SIZE, ScoreSnapshot, score_hand

DEFAULT_PLAYER_NAMES: tuple[str, ...] = ("You", "Player 2", "Player 3", "Player 4")


class GamePhase(str, Enum):
    """Top-level phases of a Blitz game."""

    SETUP = "setup"
    PLAYING = "playing"
    FINAL_ROUND = "final_round"
    ROUND_END = "round_end"
    GAME_END = "game_end"


class TurnPhase(str, Enum):
    """Phases within the current player's turn."""

    DECISION = "decision"
    DISCARD = "discard"


@dataclass(slots=True)
class BlitzConfig:
    """Runtime configuration for a Blitz game."""

    player_names: tuple[str, ...] = DEFAULT_PLAYER_NAMES
    human_seats: frozenset[int] = frozenset({0})
    starting_coins: int = 4
    hand_size: int = HAND_SIZE
    blitz_score: int = BLITZ_SCORE
    knock_win_coins: int = 1
    failed_knock_coins: int = 2
    blitz_coins: int = 1

    def __post_init__(self) -> None:
        self.player_names = tuple(self.player_names)
        self.human_seats = frozenset(self.human_seats)
        if len(self.player_names) < 2:
            raise ValueError("Blitz needs at least two players")
        if any(seat < 0 or seat >= len(self.player_names) for seat in self.human_seats):
            raise ValueError("human seat out of range")
        if self.starting_coins <= 0:
            raise ValueError("starting_coins must be positive")
        if self.hand_size != HAND_SIZE:
            raise ValueError(f"hand_size must be {HAND_SIZE}")
        if self.knock_win_coins < 0 or self.failed_knock_coins < 0 or self.blitz_coins < 0:
            raise ValueError("coin amounts must not be negative")

    @property
    def num_players(self) -> int:
        return len(self.player_names)

    @classmethod
    def for_players(cls, num_players: int, *, humans: int = 1, **kwargs) -> "BlitzConfig":
        """Build a config with default names for ``num_players`` seats, humans first."""

        if num_players < 2:
            raise ValueError("Blitz needs at least two players")
        if humans < 0 or humans > num_players:
            raise ValueError("humans must be between 0 and the number of players")
        names = ["You" if humans == 1 and idx == 0 else f"Player {idx + 1}" for idx in range(num_players)]
        return cls(player_names=tuple(names), human_seats=frozenset(range(humans)), **kwargs)


@dataclass(slots=True)
class PlayerState:
    """State tracked for each seat at the table."""

    seat: int
    name: str
    is_human: bool = False
    coins: int = 4
    hand: List[Card] = field(default_factory=list)
    is_eliminated: bool = False
    score: ScoreSnapshot = field(default_factory=ScoreSnapshot.empty)

    def rescore(self) -> ScoreSnapshot:
        """Recompute the cached score snapshot from the current hand."""

        self.score = score_hand(self.hand) if self.hand else ScoreSnapshot.empty()
        return self.score

    def refresh_elimination(self) -> bool:
        """Mark the player eliminated once coins hit zero; returns ``True`` if newly eliminated."""

        if self.is_eliminated or self.coins > 0:
            return False
        self.is_eliminated = True
        return True

    def reset_hand(self) -> None:
        self.hand = []
        self.score = ScoreSnapshot.empty()

    def copy(self) -> "PlayerState":
        """Return a copy that shares only immutable cards."""

        return PlayerState(
            seat=self.seat,
            name=self.name,
            is_human=self.is_human,
            coins=self.coins,
            hand=list(self.hand),
            is_eliminated=self.is_eliminated,
            score=self.score,
        )


@dataclass(frozen=True, slots=True)
class DiscardLogEntry:
    """Informational record of a discarded card."""

    player_name: str
    card: Card
    round_number: int


@dataclass(slots=True)
class RoundState:
    """Knock bookkeeping for the round in progress."""

    knocker: int | None = None
    final_turns_remaining: int = 0

    @property
    def has_knocked(self) -> bool:
        return self.knocker is not None

    def copy(self) -> "RoundState":
        return RoundState(knocker=self.knocker, final_turns_remaining=self.final_turns_remaining)


@dataclass(frozen=True, slots=True)
class RoundResult:
    """Outcome of a settled round, including the hand reveal snapshot."""

    round_number: int
    kind: str  # "knock" or "blitz"
    coin_changes: tuple[int, ...]
    eliminated: tuple[int, ...]
    message: str
    revealed_hands: tuple[tuple[Card, ...], ...]
    best_scores: tuple[int, ...]
    knocker: int | None = None
    blitz_player: int | None = None
    knock_succeeded: bool | None = None


@dataclass(slots=True)
class GameState:
    """Complete state of a Blitz game, owned by the turn state machine."""

    config: BlitzConfig
    players: List[PlayerState]
    deck_id: str | None = None
    deck_remaining: int = 0
    discard_pile: List[Card] = field(default_factory=list)
    discard_log: List[DiscardLogEntry] = field(default_factory=list)
    phase: GamePhase = GamePhase.SETUP
    turn_phase: TurnPhase = TurnPhase.DECISION
    current_player_index: int = 0
    round: RoundState = field(default_factory=RoundState)
    round_number: int = 1
    winner_index: int | None = None
    message: str = ""
    pending_card: Card | None = None
    last_result: RoundResult | None = None

    @property
    def current_player(self) -> PlayerState:
        return self.players[self.current_player_index]

    @property
    def top_discard(self) -> Card | None:
        return self.discard_pile[-1] if self.discard_pile else None

    @property
    def winner(self) -> PlayerState | None:
        if self.winner_index is None:
            return None
        return self.players[self.winner_index]

    @property
    def is_over(self) -> bool:
        return self.phase is GamePhase.GAME_END

    def active_players(self) -> List[PlayerState]:
        """Return non-eliminated players in seat order."""

        return [player for player in self.players if not player.is_eliminated]

    def iter_opponents(self, seat: int) -> Iterator[PlayerState]:
        for player in self.players:
            if player.seat != seat and not player.is_eliminated:
                yield player

    def clone(self) -> "GameState":
        """Copy the mutable containers so a transition can work on the copy."""

        return GameState(
            config=self.config,
            players=[player.copy() for player in self.players],
            deck_id=self.deck_id,
            deck_remaining=self.deck_remaining,
            discard_pile=list(self.discard_pile),
            discard_log=list(self.discard_log),
            phase=self.phase,
            turn_phase=self.turn_phase,
            current_player_index=self.current_player_index,
            round=self.round.copy(),
            round_number=self.round_number,
            winner_index=self.winner_index,
            message=self.message,
            pending_card=self.pending_card,
            last_result=self.last_result,
        )


def new_game_state(config: BlitzConfig) -> GameState:
    """Return an undealt game state with every player holding the starting coins."""

    players = [
        PlayerState(
            seat=seat,
            name=name,
            is_human=seat in config.human_seats,
            coins=config.starting_coins,
        )
        for seat, name in enumerate(config.player_names)
    ]
    return GameState(config=config, players=players, message="Dealing cards...")


def best_scores(players: Sequence[PlayerState]) -> tuple[int, ...]:
    return tuple(player.score.best_score for player in players)
