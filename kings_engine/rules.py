"""Effective-value computation and play legality.

Values are always recomputed from the current state: court contents, mutes
and facet effects change between actions, so nothing here is cached.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, auto
from typing import TYPE_CHECKING

from kings_engine.abilities.base import Keyword
from kings_engine.cards import CardName

if TYPE_CHECKING:
    from kings_engine.abilities.registry import CardRegistry
    from kings_engine.cards import Card
    from kings_engine.state import CourtEntry, GameState

MUTED_VALUE = 3
HIGH_VALUE = 7

# Gain Royalty while Immortal is active.
IMMORTAL_ROYALTY = frozenset({CardName.IMMORTAL, CardName.WARLORD})


class Location(IntEnum):
    """Where a card is being valued."""

    HAND = auto()
    ANTECHAMBER = auto()
    COURT = auto()


@dataclass(frozen=True, slots=True)
class ValueContext:
    """Everything effective_value depends on besides the card.

    Attributes:
        location: Hand, antechamber or court.
        on_throne: Card is the topmost court entry.
        disgraced: Forces the value to 1.
        bonus: Stored court bonus (Soldier, Conspiracist).
        conspiracy: Owner's Conspiracist effect is active (hand/antechamber +1).
        steadfast: Card ignores mutes.
        immortal_active: An undisgraced Immortal is in court.
        ancestor_in_court: An undisgraced Ancestor is in court.
        muted_values: Base values muted by Mystic.
        exile_active: Exile is muting every card's text.
        high_court_cards: Other court cards with base value of 7 or more.
    """

    location: Location
    on_throne: bool = False
    disgraced: bool = False
    bonus: int = 0
    conspiracy: bool = False
    steadfast: bool = False
    immortal_active: bool = False
    ancestor_in_court: bool = False
    muted_values: frozenset[int] = frozenset()
    exile_active: bool = False
    high_court_cards: int = 0


def effective_value(registry: CardRegistry, card: Card, context: ValueContext) -> int:
    """Compute a card's value. The result is never below 1."""
    if context.disgraced:
        return 1

    module = registry.get(card.name)
    base = module.base_value
    if base in context.muted_values and not context.steadfast:
        return MUTED_VALUE

    value = base
    if module.value_rule is not None and (context.steadfast or not context.exile_active):
        value = module.value_rule(value, context)

    if context.immortal_active:
        if card.name == CardName.WARLORD:
            value += 1
        elif card.name in (CardName.PRINCESS, CardName.QUEEN, CardName.ELDER):
            value -= 1

    if context.ancestor_in_court and card.name == CardName.ELDER:
        value += 3

    value += context.bonus
    if context.conspiracy and context.location != Location.COURT:
        value += 1

    return max(1, value)


def is_muted(state: GameState, registry: CardRegistry, card: Card, steadfast: bool = False) -> bool:
    """Whether a card's text is switched off (Mystic or Exile)."""
    if steadfast or registry.has_keyword(card.name, Keyword.STEADFAST):
        return False
    if state.exile_owner is not None:
        return True
    return registry.base_value(card.name) in state.muted_values


def _active_in_court(state: GameState, registry: CardRegistry, name: CardName) -> bool:
    return any(
        entry.card.name == name
        and not entry.disgraced
        and not is_muted(state, registry, entry.card, entry.steadfast)
        for entry in state.court
    )


def immortal_active(state: GameState, registry: CardRegistry) -> bool:
    return _active_in_court(state, registry, CardName.IMMORTAL)


def ancestor_in_court(state: GameState, registry: CardRegistry) -> bool:
    return _active_in_court(state, registry, CardName.ANCESTOR)


def is_royalty(state: GameState, registry: CardRegistry, name: CardName) -> bool:
    if registry.has_keyword(name, Keyword.ROYALTY):
        return True
    return name in IMMORTAL_ROYALTY and immortal_active(state, registry)


def is_steadfast(state: GameState, registry: CardRegistry, entry: CourtEntry) -> bool:
    """Steadfast court entries cannot be disgraced by other cards' abilities."""
    if entry.steadfast or registry.has_keyword(entry.card.name, Keyword.STEADFAST):
        return True
    return entry.card.name == CardName.ELDER and ancestor_in_court(state, registry)


def court_value_context(state: GameState, registry: CardRegistry, index: int) -> ValueContext:
    entry = state.court[index]
    high = sum(
        1
        for i, other in enumerate(state.court)
        if i != index and registry.base_value(other.card.name) >= HIGH_VALUE
    )
    return ValueContext(
        location=Location.COURT,
        on_throne=index == len(state.court) - 1,
        disgraced=entry.disgraced,
        bonus=entry.bonus,
        steadfast=is_steadfast(state, registry, entry),
        immortal_active=immortal_active(state, registry),
        ancestor_in_court=ancestor_in_court(state, registry),
        muted_values=state.muted_values,
        exile_active=state.exile_owner is not None,
        high_court_cards=high,
    )


def held_value_context(
    state: GameState, registry: CardRegistry, player: int, card: Card, location: Location = Location.HAND
) -> ValueContext:
    owner = state.players[player]
    conspiracy = owner.conspiracy_turns > 0
    return ValueContext(
        location=location,
        conspiracy=conspiracy,
        steadfast=conspiracy or registry.has_keyword(card.name, Keyword.STEADFAST),
        immortal_active=immortal_active(state, registry),
        ancestor_in_court=ancestor_in_court(state, registry),
        muted_values=state.muted_values,
        exile_active=state.exile_owner is not None,
    )


def court_value(state: GameState, registry: CardRegistry, index: int) -> int:
    return effective_value(registry, state.court[index].card, court_value_context(state, registry, index))


def held_value(
    state: GameState, registry: CardRegistry, player: int, card: Card, location: Location = Location.HAND
) -> int:
    return effective_value(registry, card, held_value_context(state, registry, player, card, location))


def names_in_game(state: GameState) -> list[CardName]:
    """Card names that can be named this match, in registry order."""
    return sorted({card.name for card in state.expected_cards()})


def throne_value(state: GameState, registry: CardRegistry) -> int:
    """Value a hand card must meet. 0 for an empty court, 1 when disgraced."""
    if not state.court:
        return 0
    return court_value(state, registry, len(state.court) - 1)


def can_play_from_hand(
    state: GameState, registry: CardRegistry, player: int, card: Card, any_value: bool = False
) -> bool:
    """Whether ``card`` may be played from ``player``'s hand onto the current throne."""
    if any_value:
        return True
    module = registry.get(card.name)
    if module.play_rule is not None:
        verdict = module.play_rule(state, player, state.throne, registry)
        if verdict is not None:
            return verdict
    return held_value(state, registry, player, card) >= throne_value(state, registry)
