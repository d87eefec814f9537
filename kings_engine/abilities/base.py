"""Building blocks for card modules."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum, auto
from typing import TYPE_CHECKING, Callable, ClassVar

from kings_engine.actions import AbilityChoice

if TYPE_CHECKING:
    from kings_engine.abilities.registry import CardRegistry
    from kings_engine.cards import Card, CardName
    from kings_engine.events import MessageLog
    from kings_engine.rules import ValueContext
    from kings_engine.state import CourtEntry, GameState, PendingTrigger, ReactionTrigger


class Keyword(IntEnum):
    """Keyword tags printed on cards."""

    ROYALTY = auto()
    STEADFAST = auto()
    IMMUNE_TO_KINGS_HAND = auto()
    REACTION = auto()


@dataclass
class EffectContext:
    """What an ability needs besides the state.

    Attributes:
        registry: Card registry in use.
        log: Sink for messages.
        card: The card whose ability is resolving, if any.
    """

    registry: CardRegistry
    log: MessageLog
    card: Card | None


class Ability(ABC):
    """An on-play ability.

    ``may`` marks abilities the player chooses to use; those can be
    prevented by a reaction. Mandatory abilities always resolve.
    """

    name: ClassVar[str] = ""
    description: ClassVar[str] = ""
    may: ClassVar[bool] = True

    def can_activate(self, state: GameState, actor: int, card: Card, registry: CardRegistry) -> bool:
        """Whether the ability has any effect right now. Must not mutate anything."""
        return True

    def choices(
        self, state: GameState, actor: int, card: Card, registry: CardRegistry
    ) -> list[AbilityChoice]:
        """Every payload the actor may pick. Defaults to a single empty choice."""
        return [AbilityChoice()]

    @abstractmethod
    def execute(
        self,
        state: GameState,
        actor: int,
        opponent: int,
        choice: AbilityChoice,
        ctx: EffectContext,
    ) -> GameState:
        """Apply the effect and return the new state."""
        ...


class Reaction(ABC):
    """An interrupt a card's holder may use on the opponent's turn."""

    trigger: ClassVar[ReactionTrigger | None] = None
    copies: ClassVar[bool] = False

    @abstractmethod
    def resolve(
        self,
        state: GameState,
        responder: int,
        used_card: Card,
        pending: PendingTrigger,
        ctx: EffectContext,
        copied: CardName | None = None,
    ) -> GameState:
        """Apply the reaction; the pending effect is dropped by the caller.

        ``copied`` names the reaction a copy-type reaction was claimed as.
        """
        ...


class CardHooks:
    """Lifecycle hooks. Each returns the (possibly) updated state."""

    def on_enter_court(self, state: GameState, entry: CourtEntry, ctx: EffectContext) -> GameState:
        return state

    def on_leave_court(self, state: GameState, entry: CourtEntry, ctx: EffectContext) -> GameState:
        return state

    def on_king_flip(self, state: GameState, player: int, ctx: EffectContext) -> GameState:
        return state


# Returns True (always playable), False (never playable) or None (value check).
PlayRule = Callable[["GameState", int, "CourtEntry | None", "CardRegistry"], "bool | None"]
# Adjusts a card's own value given its context.
ValueRule = Callable[[int, "ValueContext"], int]


@dataclass(frozen=True)
class CardModule:
    """Everything the engine knows about one card name."""

    name: CardName
    base_value: int
    keywords: frozenset[Keyword] = frozenset()
    ability: Ability | None = None
    reaction: Reaction | None = None
    hooks: CardHooks = field(default_factory=CardHooks)
    play_rule: PlayRule | None = None
    value_rule: ValueRule | None = None
    text: str = ""

    def has(self, keyword: Keyword) -> bool:
        return keyword in self.keywords
