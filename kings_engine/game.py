"""A single match with its append-only event log."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from kings_engine.abilities.registry import create_default_registry
from kings_engine.action_generator import generate_legal_actions
from kings_engine.errors import SequenceMismatchError
from kings_engine.events import Message, NewState
from kings_engine.executor import apply_action
from kings_engine.state import create_initial_state
from kings_engine.views import build_board, build_status

if TYPE_CHECKING:
    from kings_engine.abilities.registry import CardRegistry
    from kings_engine.actions import Action
    from kings_engine.config import GameConfig
    from kings_engine.events import Event
    from kings_engine.state import GameState
    from kings_engine.views import BoardView, GameStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ViewerSnapshot:
    """A NewState entry rebuilt for one viewer."""

    board: BoardView
    status: GameStatus
    actions: list[Action]


ViewerEvent = Message | ViewerSnapshot


class Game:
    """Owns the authoritative state of one match.

    Every accepted action appends its messages and then a ``NewState`` entry
    to ``events``. Callers submit with the event count they last saw, so a
    stale client is rejected instead of acting on an old board.
    """

    def __init__(
        self,
        names: tuple[str, str] = ("Player 1", "Player 2"),
        config: GameConfig | None = None,
        seed: int | None = None,
        registry: CardRegistry | None = None,
    ):
        self.registry = registry if registry is not None else create_default_registry()
        self.state: GameState = create_initial_state(names, config=config, seed=seed)
        self.events: list[Event] = [NewState(self.state)]
        logger.debug("Game created: seed=%s variant=%s", self.state.seed, self.state.config.variant)

    @property
    def event_count(self) -> int:
        return len(self.events)

    @property
    def is_game_over(self) -> bool:
        return self.state.is_game_over

    def legal_actions(self, viewer: int) -> list[Action]:
        """Legal actions for ``viewer``; empty unless they are acting."""
        return generate_legal_actions(self.state, viewer, self.registry)

    def board(self, viewer: int) -> BoardView:
        return build_board(self.state, viewer, self.registry)

    def status(self, viewer: int) -> GameStatus:
        return build_status(self.state, viewer)

    def apply(self, actor: int, expected_sequence_count: int, action: Action) -> list[Message]:
        """Apply one action submitted by ``actor``.

        Raises:
            SequenceMismatchError: If ``expected_sequence_count`` is stale.
            ValidationError: If the action is malformed.
            IllegalMoveError: If the action is not legal right now.
        """
        if expected_sequence_count != len(self.events):
            raise SequenceMismatchError(expected_sequence_count, len(self.events))

        new_state, messages = apply_action(self.state, actor, action, self.registry)
        self.state = new_state
        self.events.extend(messages)
        self.events.append(NewState(new_state))
        logger.debug("Player %d: %s (%d messages)", actor, action, len(messages))
        if new_state.is_game_over:
            logger.info("Game over: winner=%s", new_state.winner)
        return messages

    def events_since(self, viewer: int, start: int = 0) -> list[ViewerEvent]:
        """Events from ``start`` on, filtered and projected for ``viewer``."""
        result: list[ViewerEvent] = []
        for event in self.events[max(start, 0):]:
            match event:
                case Message():
                    if event.visible_for(viewer):
                        result.append(event)
                case NewState(state=state):
                    result.append(
                        ViewerSnapshot(
                            board=build_board(state, viewer, self.registry),
                            status=build_status(state, viewer),
                            actions=generate_legal_actions(state, viewer, self.registry),
                        )
                    )
        return result
