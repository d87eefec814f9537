"""Heuristic strategy for Imposter Kings.

Rules of thumb:

1. Take the throne with the cheapest card that can, keeping high cards for later
2. Use an ability when the card offers one
3. Flip the king only when nothing else is playable
4. React only with cards actually held, so a claim is never rejected
5. Give away, discard and condemn low cards; keep, recall and rally high ones
6. Disgrace the opponent's court cards before your own
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from kings_engine.abilities.registry import create_default_registry
from kings_engine.actions import (
    ChooseDungeon,
    ChooseSquire,
    ChooseSuccessor,
    ChooseWhosFirst,
    Condemn,
    Decline,
    Discard,
    Disgrace,
    EndMuster,
    Exhaust,
    FlipKing,
    MoveToAntechamber,
    PlayCard,
    Rally,
    React,
    Recall,
    Recruit,
    ReturnToArmy,
    Skip,
    SwapCard,
    TakeDungeon,
)
from strategies.base import Strategy

if TYPE_CHECKING:
    from kings_engine.abilities.registry import CardRegistry
    from kings_engine.actions import Action
    from kings_engine.cards import Card
    from kings_engine.views import BoardView, GameStatus


class HeuristicStrategy(Strategy):
    """Scores each legal action with fixed preferences and picks the best.

    Ties are broken with a seeded RNG so games stay reproducible.
    """

    def __init__(self, seed: int | None = None, registry: CardRegistry | None = None):
        self._rng = random.Random(seed)
        self._registry = registry if registry is not None else create_default_registry()

    @property
    def name(self) -> str:
        return "Heuristic"

    def select_action(
        self, board: BoardView, status: GameStatus, legal_actions: list[Action]
    ) -> Action | None:
        candidates = self.claimable_actions(board, legal_actions)
        if not candidates:
            return None

        scored = [(self._score_action(board, action), action) for action in candidates]
        best_score = max(score for score, _ in scored)
        best = [action for score, action in scored if score == best_score]
        return self._rng.choice(best)

    def _value(self, card: Card) -> int:
        return self._registry.base_value(card.name)

    def _score_action(self, board: BoardView, action: Action) -> float:
        """Score an action (higher is better)."""
        match action:
            case React():
                return 500
            case Decline():
                return 0

            case PlayCard(card=card, ability=ability):
                # Cheapest winning card first; an ability is worth a couple of points
                score = 200 - self._value(card) * 10
                if ability is not None:
                    score += 25
                return score
            case FlipKing():
                return 10

            case EndMuster():
                return 50
            case Recruit(card=card):
                # Only worth it for a card stronger than anything held
                hand = board.players[board.viewer].hand or ()
                strongest = max((self._value(c) for c in hand), default=0)
                return 60 + self._value(card) if self._value(card) > strongest else 0
            case Exhaust(card=card):
                return 100 - self._value(card)

            case ChooseWhosFirst(player=player):
                return 10 if player != board.viewer else 5

            case ChooseSuccessor(card=card) | ChooseSquire(card=card):
                return 100 + self._value(card)
            case Recall(card=card) | Rally(card=card):
                return 100 + self._value(card)
            case TakeDungeon():
                return 105
            case (
                Discard(card=card)
                | ChooseDungeon(card=card)
                | Condemn(card=card)
                | SwapCard(card=card)
                | ReturnToArmy(card=card)
            ):
                return 100 - self._value(card)
            case MoveToAntechamber(card=card):
                return 100 + self._value(card)
            case Disgrace(card=card):
                return self._score_disgrace(board, card)
            case Skip():
                return 1

        return 0

    def _score_disgrace(self, board: BoardView, card: Card) -> float:
        for entry in board.court:
            if entry.card == card:
                if entry.owner == board.viewer:
                    return -entry.value
                return 100 + entry.value
        return 0
