"""Event log entries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from kings_engine.state import GameState


@dataclass(frozen=True, slots=True)
class Message:
    """Human-readable record of something that happened.

    Attributes:
        text: The message.
        visible_to: Player allowed to see it, or None for both players.
    """

    text: str
    visible_to: int | None = None

    def visible_for(self, viewer: int) -> bool:
        return self.visible_to is None or self.visible_to == viewer


@dataclass(frozen=True, slots=True)
class NewState:
    """Marks a state change.

    The snapshot is kept whole; boards, actions and status are derived per
    viewer when the log is read.
    """

    state: GameState


Event = Union[Message, NewState]


class MessageLog:
    """Collects messages emitted while one action resolves."""

    def __init__(self):
        self.messages: list[Message] = []

    def public(self, text: str) -> None:
        self.messages.append(Message(text))

    def private(self, player: int, text: str) -> None:
        self.messages.append(Message(text, visible_to=player))
