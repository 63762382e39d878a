"""Top-level package for the Blitz ("31") game engine."""

from . import actions, cards, deck, opponent, rules, scoreboard, scoring, session, settlement, state

__all__ = [
    "actions",
    "cards",
    "deck",
    "opponent",
    "rules",
    "scoreboard",
    "scoring",
    "session",
    "settlement",
    "state",
]
