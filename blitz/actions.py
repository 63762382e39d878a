"""Player actions and their legality for the current game state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .state import GamePhase, GameState, TurnPhase

__all__ = [
    "KnockAction",
    "DrawAction",
    "DiscardAction",
    "StandAction",
    "Action",
    "is_legal",
    "legal_actions",
]


@dataclass(frozen=True)
class KnockAction:
    """Declare the best hand and start the final round."""


@dataclass(frozen=True)
class DrawAction:
    """Action describing how a player draws a card."""

    source: str  # "deck" or "discard"


@dataclass(frozen=True)
class DiscardAction:
    """Resolve the pending card.

    ``hand_index`` is the hand card to replace and discard; ``None`` discards
    the pending card itself and leaves the hand unchanged.
    """

    hand_index: int | None = None


@dataclass(frozen=True)
class StandAction:
    """Spend a final-round turn without drawing."""


Action = Union[KnockAction, DrawAction, DiscardAction, StandAction]

_IN_PLAY = (GamePhase.PLAYING, GamePhase.FINAL_ROUND)


def is_legal(state: GameState, action: Action) -> bool:
    """Return ``True`` if ``action`` may be applied by the current player now."""

    if state.phase not in _IN_PLAY:
        return False
    if state.current_player.is_eliminated:
        return False

    if state.turn_phase is TurnPhase.DECISION:
        if isinstance(action, KnockAction):
            return state.phase is GamePhase.PLAYING and not state.round.has_knocked
        if isinstance(action, StandAction):
            return state.phase is GamePhase.FINAL_ROUND
        if isinstance(action, DrawAction):
            if action.source == "deck":
                return True
            if action.source == "discard":
                return bool(state.discard_pile)
        return False

    if isinstance(action, DiscardAction) and state.pending_card is not None:
        if action.hand_index is None:
            return True
        return 0 <= action.hand_index < len(state.current_player.hand)
    return False


def legal_actions(state: GameState) -> list[Action]:
    """Return every action available to the current player."""

    if state.turn_phase is TurnPhase.DISCARD:
        candidates: list[Action] = [DiscardAction(None)]
        candidates.extend(DiscardAction(idx) for idx in range(len(state.current_player.hand)))
    else:
        candidates = [
            KnockAction(),
            StandAction(),
            DrawAction(source="deck"),
            DrawAction(source="discard"),
        ]
    return [action for action in candidates if is_legal(state, action)]
