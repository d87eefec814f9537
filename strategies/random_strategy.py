"""Random strategy for baseline testing."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from strategies.base import Strategy

if TYPE_CHECKING:
    from kings_engine.actions import Action
    from kings_engine.views import BoardView, GameStatus


class RandomStrategy(Strategy):
    """Picks uniformly among the legal actions.

    Useful as a baseline and for driving full games in tests.
    """

    def __init__(self, seed: int | None = None):
        self._rng = random.Random(seed)
        self._seed = seed

    @property
    def name(self) -> str:
        return "Random"

    def select_action(
        self, board: BoardView, status: GameStatus, legal_actions: list[Action]
    ) -> Action | None:
        candidates = self.claimable_actions(board, legal_actions)
        if not candidates:
            return None
        return self._rng.choice(candidates)

    def reset_seed(self, seed: int | None = None) -> None:
        """Reset the random number generator with a new seed."""
        self._seed = seed
        self._rng = random.Random(seed)
