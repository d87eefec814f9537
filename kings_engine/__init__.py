"""Imposter Kings rules engine."""

from kings_engine.cards import Card, CardName
from kings_engine.config import FRAGMENTS_OF_NERSETTI, FULL_COURT, GameConfig, get_variant
from kings_engine.errors import GameError, IllegalMoveError, SequenceMismatchError, ValidationError
from kings_engine.game import Game
from kings_engine.state import GamePhase, GameState, KingFacet, PlayerState
from kings_engine.actions import Action, Decline, FlipKing, PlayCard, React, Skip

__all__ = [
    "Card",
    "CardName",
    "GameConfig",
    "FRAGMENTS_OF_NERSETTI",
    "FULL_COURT",
    "get_variant",
    "GameError",
    "ValidationError",
    "IllegalMoveError",
    "SequenceMismatchError",
    "Game",
    "GameState",
    "PlayerState",
    "GamePhase",
    "KingFacet",
    "Action",
    "PlayCard",
    "FlipKing",
    "React",
    "Decline",
    "Skip",
]
