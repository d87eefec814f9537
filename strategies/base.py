"""Base strategy interface for Imposter Kings bots."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from kings_engine.actions import React

if TYPE_CHECKING:
    from kings_engine.actions import Action
    from kings_engine.views import BoardView, GameStatus


class Strategy(ABC):
    """Abstract base class for bot policies.

    A strategy only ever sees the viewer's board, never the full state, so it
    plays under the same hidden information as a human.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this strategy."""
        ...

    @abstractmethod
    def select_action(
        self, board: BoardView, status: GameStatus, legal_actions: list[Action]
    ) -> Action | None:
        """Select one of ``legal_actions``.

        Args:
            board: The bot's view of the game.
            status: What the game is waiting on.
            legal_actions: Everything the bot may submit right now.

        Returns:
            An element of ``legal_actions``, or None when there is nothing to do.
        """
        ...

    def on_game_start(self, board: BoardView, player_index: int) -> None:
        """Called when a game starts.

        Args:
            board: Initial view of the game.
            player_index: Which player this strategy controls (0 or 1).
        """
        pass

    def on_game_end(self, board: BoardView, winner: int | None) -> None:
        """Called when a game ends."""
        pass

    def claimable_actions(self, board: BoardView, legal_actions: list[Action]) -> list[Action]:
        """Legal actions minus reaction claims for cards the bot does not hold.

        The legal list offers every plausible reaction so that it reveals
        nothing; claiming one that is not in hand is rejected.
        """
        held = {card.name for card in board.players[board.viewer].hand or ()}
        return [
            action
            for action in legal_actions
            if not isinstance(action, React) or action.option.card in held
        ]
