"""Action types for Imposter Kings."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum, auto
from typing import TYPE_CHECKING

from kings_engine.state import CardSource, KingFacet

if TYPE_CHECKING:
    from kings_engine.cards import Card, CardName
    from kings_engine.state import ReactionOption


class ActionType(IntEnum):
    """Type of action."""

    CHOOSE_SIGNATURE_CARDS = auto()
    CHOOSE_WHOS_FIRST = auto()
    RECRUIT = auto()
    RECOMMISSION = auto()
    DISCARD = auto()
    EXHAUST = auto()
    CHANGE_KING_FACET = auto()
    END_MUSTER = auto()
    CHOOSE_SUCCESSOR = auto()
    CHOOSE_DUNGEON = auto()
    CHOOSE_SQUIRE = auto()
    PLAY_CARD = auto()
    FLIP_KING = auto()
    REACT = auto()
    DECLINE = auto()
    MOVE_TO_ANTECHAMBER = auto()
    DISGRACE = auto()
    SWAP_CARD = auto()
    CARD_IN_HAND_GUESS = auto()
    CONDEMN_OPPONENT_CARD = auto()
    CONDEMN = auto()
    RECALL = auto()
    RALLY = auto()
    RETURN_TO_ARMY = auto()
    TAKE_DUNGEON = auto()
    SKIP = auto()
    START_NEW_ROUND = auto()


@dataclass(frozen=True, slots=True)
class AbilityChoice:
    """Payload for a card ability chosen at play time.

    Attributes:
        named: A card name (Inquisitor, Judge, Soldier, Nakturn, Informant).
        number: A number (Mystic, Executioner).
        target: A court card (Fool, Sentry, Aegis).
        hand_card: A card from the actor's hand (Warden, Sentry, Princess).
        copy: Court card whose ability a Stranger copies; the other fields
            then feed the copied ability.
    """

    named: CardName | None = None
    number: int | None = None
    target: Card | None = None
    hand_card: Card | None = None
    copy: Card | None = None

    def __str__(self) -> str:
        parts = []
        if self.copy is not None:
            parts.append(f"copy {self.copy}")
        if self.named is not None:
            parts.append(f"name {self.named}")
        if self.number is not None:
            parts.append(f"number {self.number}")
        if self.target is not None:
            parts.append(f"target {self.target}")
        if self.hand_card is not None:
            parts.append(f"with {self.hand_card}")
        return ", ".join(parts) or "use ability"


@dataclass(frozen=True, slots=True)
class Action(ABC):
    """Base class for all actions."""

    @property
    @abstractmethod
    def action_type(self) -> ActionType:
        """The type of this action."""
        ...

    @abstractmethod
    def __str__(self) -> str:
        """Human-readable action description."""
        ...


@dataclass(frozen=True, slots=True)
class ChooseSignatureCards(Action):
    """Pick signature cards from the pool."""

    cards: tuple[CardName, ...]

    @property
    def action_type(self) -> ActionType:
        return ActionType.CHOOSE_SIGNATURE_CARDS

    def __str__(self) -> str:
        return "Choose signature cards: " + ", ".join(str(c) for c in self.cards)


@dataclass(frozen=True, slots=True)
class ChooseWhosFirst(Action):
    """Decide which player goes first this round."""

    player: int

    @property
    def action_type(self) -> ActionType:
        return ActionType.CHOOSE_WHOS_FIRST

    def __str__(self) -> str:
        return f"Player {self.player + 1} goes first"


@dataclass(frozen=True, slots=True)
class Recruit(Action):
    """Start recruiting an army card into hand."""

    card: Card

    @property
    def action_type(self) -> ActionType:
        return ActionType.RECRUIT

    def __str__(self) -> str:
        return f"Recruit {self.card}"


@dataclass(frozen=True, slots=True)
class Recommission(Action):
    """Start returning an exhausted army card to the army."""

    card: Card

    @property
    def action_type(self) -> ActionType:
        return ActionType.RECOMMISSION

    def __str__(self) -> str:
        return f"Recommission {self.card}"


@dataclass(frozen=True, slots=True)
class Discard(Action):
    """Discard a hand card (to pay for a recruit)."""

    card: Card

    @property
    def action_type(self) -> ActionType:
        return ActionType.DISCARD

    def __str__(self) -> str:
        return f"Discard {self.card}"


@dataclass(frozen=True, slots=True)
class Exhaust(Action):
    """Exhaust an army card."""

    card: Card

    @property
    def action_type(self) -> ActionType:
        return ActionType.EXHAUST

    def __str__(self) -> str:
        return f"Exhaust {self.card}"


@dataclass(frozen=True, slots=True)
class ChangeKingFacet(Action):
    """Switch king facet during mustering."""

    facet: KingFacet

    @property
    def action_type(self) -> ActionType:
        return ActionType.CHANGE_KING_FACET

    def __str__(self) -> str:
        return f"Change king facet to {self.facet.key}"


@dataclass(frozen=True, slots=True)
class EndMuster(Action):
    """Finish mustering."""

    @property
    def action_type(self) -> ActionType:
        return ActionType.END_MUSTER

    def __str__(self) -> str:
        return "End muster"


@dataclass(frozen=True, slots=True)
class ChooseSuccessor(Action):
    """Set a hand card aside as successor."""

    card: Card

    @property
    def action_type(self) -> ActionType:
        return ActionType.CHOOSE_SUCCESSOR

    def __str__(self) -> str:
        return f"Choose {self.card} as successor"


@dataclass(frozen=True, slots=True)
class ChooseDungeon(Action):
    """Set a hand card aside face down in the dungeon."""

    card: Card

    @property
    def action_type(self) -> ActionType:
        return ActionType.CHOOSE_DUNGEON

    def __str__(self) -> str:
        return f"Put {self.card} in the dungeon"


@dataclass(frozen=True, slots=True)
class ChooseSquire(Action):
    """Set a hand card aside as squire (Master Tactician)."""

    card: Card

    @property
    def action_type(self) -> ActionType:
        return ActionType.CHOOSE_SQUIRE

    def __str__(self) -> str:
        return f"Choose {self.card} as squire"


@dataclass(frozen=True, slots=True)
class PlayCard(Action):
    """Play a card to the court, optionally using its ability."""

    card: Card
    source: CardSource = CardSource.HAND
    ability: AbilityChoice | None = None

    @property
    def action_type(self) -> ActionType:
        return ActionType.PLAY_CARD

    def __str__(self) -> str:
        where = " from antechamber" if self.source == CardSource.ANTECHAMBER else ""
        if self.ability is None:
            return f"Play {self.card}{where}"
        return f"Play {self.card}{where} ({self.ability})"


@dataclass(frozen=True, slots=True)
class FlipKing(Action):
    """Flip the king and take the successor."""

    @property
    def action_type(self) -> ActionType:
        return ActionType.FLIP_KING

    def __str__(self) -> str:
        return "Flip king"


@dataclass(frozen=True, slots=True)
class React(Action):
    """Claim a reaction card to prevent the pending effect."""

    option: ReactionOption

    @property
    def action_type(self) -> ActionType:
        return ActionType.REACT

    def __str__(self) -> str:
        return f"React with {self.option}"


@dataclass(frozen=True, slots=True)
class Decline(Action):
    """Decline the reaction currently offered."""

    @property
    def action_type(self) -> ActionType:
        return ActionType.DECLINE

    def __str__(self) -> str:
        return "No reaction"


@dataclass(frozen=True, slots=True)
class MoveToAntechamber(Action):
    """Move an own hand card to the antechamber (Judge)."""

    card: Card

    @property
    def action_type(self) -> ActionType:
        return ActionType.MOVE_TO_ANTECHAMBER

    def __str__(self) -> str:
        return f"Move {self.card} to antechamber"


@dataclass(frozen=True, slots=True)
class Disgrace(Action):
    """Disgrace a court card (Soldier)."""

    card: Card

    @property
    def action_type(self) -> ActionType:
        return ActionType.DISGRACE

    def __str__(self) -> str:
        return f"Disgrace {self.card}"


@dataclass(frozen=True, slots=True)
class SwapCard(Action):
    """Give a hand card in an exchange (Princess)."""

    card: Card

    @property
    def action_type(self) -> ActionType:
        return ActionType.SWAP_CARD

    def __str__(self) -> str:
        return f"Give {self.card}"


@dataclass(frozen=True, slots=True)
class CardInHandGuess(Action):
    """Guess whether the opponent holds the named card (Nakturn)."""

    present: bool

    @property
    def action_type(self) -> ActionType:
        return ActionType.CARD_IN_HAND_GUESS

    def __str__(self) -> str:
        return "Guess: they have it" if self.present else "Guess: they don't have it"


@dataclass(frozen=True, slots=True)
class CondemnOpponentCard(Action):
    """Condemn a card from the opponent's hand by position (Nakturn)."""

    index: int

    @property
    def action_type(self) -> ActionType:
        return ActionType.CONDEMN_OPPONENT_CARD

    def __str__(self) -> str:
        return f"Condemn opponent's card #{self.index + 1}"


@dataclass(frozen=True, slots=True)
class Condemn(Action):
    """Reveal and remove an own hand card (Ancestor)."""

    card: Card

    @property
    def action_type(self) -> ActionType:
        return ActionType.CONDEMN

    def __str__(self) -> str:
        return f"Condemn {self.card}"


@dataclass(frozen=True, slots=True)
class Recall(Action):
    """Return an exhausted army card to the army."""

    card: Card

    @property
    def action_type(self) -> ActionType:
        return ActionType.RECALL

    def __str__(self) -> str:
        return f"Recall {self.card}"


@dataclass(frozen=True, slots=True)
class Rally(Action):
    """Take an army card into hand."""

    card: Card

    @property
    def action_type(self) -> ActionType:
        return ActionType.RALLY

    def __str__(self) -> str:
        return f"Rally {self.card}"


@dataclass(frozen=True, slots=True)
class ReturnToArmy(Action):
    """Put a rallied card back into the army (Flag Bearer)."""

    card: Card

    @property
    def action_type(self) -> ActionType:
        return ActionType.RETURN_TO_ARMY

    def __str__(self) -> str:
        return f"Return {self.card} to army"


@dataclass(frozen=True, slots=True)
class TakeDungeon(Action):
    """Take the revealed dungeon card into hand (Informant)."""

    @property
    def action_type(self) -> ActionType:
        return ActionType.TAKE_DUNGEON

    def __str__(self) -> str:
        return "Take the dungeon card"


@dataclass(frozen=True, slots=True)
class Skip(Action):
    """Pass on an optional prompt."""

    @property
    def action_type(self) -> ActionType:
        return ActionType.SKIP

    def __str__(self) -> str:
        return "Skip"


@dataclass(frozen=True, slots=True)
class StartNewRound(Action):
    """Deal the next round (round winner)."""

    @property
    def action_type(self) -> ActionType:
        return ActionType.START_NEW_ROUND

    def __str__(self) -> str:
        return "Start new round"
