"""Shared state transitions used by card abilities and the executor."""

from __future__ import annotations

from typing import TYPE_CHECKING

from kings_engine.state import CardSource, CourtEntry, GameState, Prompt, without

if TYPE_CHECKING:
    from kings_engine.abilities.base import EffectContext
    from kings_engine.cards import Card, CardName


def update_player(state: GameState, idx: int, **changes) -> GameState:
    return state.with_player(idx, state.players[idx].evolve(**changes))


def court_index(state: GameState, card: Card) -> int:
    """Position of ``card`` in the court."""
    for idx, entry in enumerate(state.court):
        if entry.card == card:
            return idx
    raise ValueError(f"{card!r} is not in the court")


def replace_entry(state: GameState, index: int, entry: CourtEntry) -> GameState:
    court = list(state.court)
    court[index] = entry
    return state.with_court(tuple(court))


def disgrace(state: GameState, index: int, ctx: EffectContext) -> GameState:
    entry = state.court[index]
    if entry.disgraced:
        return state
    ctx.log.public(f"{entry.card} is disgraced")
    return replace_entry(state, index, entry.with_disgraced())


def place_in_court(state: GameState, entry: CourtEntry, ctx: EffectContext) -> GameState:
    state = state.with_court(state.court + (entry,))
    return ctx.registry.get(entry.card.name).hooks.on_enter_court(state, entry, ctx)


def remove_from_court(state: GameState, index: int, ctx: EffectContext) -> tuple[GameState, CourtEntry]:
    """Take an entry out of the court, running its leave hook."""
    entry = state.court[index]
    state = state.with_court(state.court[:index] + state.court[index + 1:])
    state = ctx.registry.get(entry.card.name).hooks.on_leave_court(state, entry, ctx)
    return state, entry


def play_to_court(
    state: GameState, player: int, card: Card, source: CardSource, ctx: EffectContext
) -> tuple[GameState, CourtEntry]:
    """Move a card from hand or antechamber onto the throne."""
    owner = state.players[player]
    if source == CardSource.ANTECHAMBER:
        owner = owner.with_antechamber(without(owner.antechamber, card))
    else:
        owner = owner.with_hand(without(owner.hand, card))
    state = state.with_player(player, owner)
    if owner.conspiracy_turns > 0:
        entry = CourtEntry(card=card, owner=player, bonus=1, steadfast=True)
    else:
        entry = CourtEntry(card=card, owner=player)
    state = place_in_court(state, entry, ctx)
    return state, state.court[-1]


def condemn_from_court(state: GameState, index: int, ctx: EffectContext) -> GameState:
    state, entry = remove_from_court(state, index, ctx)
    ctx.log.public(f"{entry.card} is condemned")
    return state.with_condemned(state.condemned + (entry.card,))


def condemn_from_hand(state: GameState, player: int, card: Card, ctx: EffectContext) -> GameState:
    """Reveal a hand card and put it on the shared condemned pile."""
    owner = state.players[player]
    state = state.with_player(player, owner.with_hand(without(owner.hand, card)))
    ctx.log.public(f"{owner.name} condemns {card}")
    return state.with_condemned(state.condemned + (card,))


def take_into_hand(state: GameState, player: int, card: Card) -> GameState:
    owner = state.players[player]
    return state.with_player(player, owner.with_hand(owner.hand + (card,)))


def move_to_antechamber(state: GameState, player: int, card: Card) -> GameState:
    owner = state.players[player]
    owner = owner.evolve(hand=without(owner.hand, card), antechamber=owner.antechamber + (card,))
    return state.with_player(player, owner)


def transfer_hand_card(state: GameState, giver: int, receiver: int, card: Card) -> GameState:
    state = update_player(state, giver, hand=without(state.players[giver].hand, card))
    return take_into_hand(state, receiver, card)


def recall(state: GameState, player: int, card: Card) -> GameState:
    """Move an exhausted army card back to the army."""
    owner = state.players[player]
    return state.with_player(player, owner.with_army(owner.army + (card,), without(owner.exhausted, card)))


def rally(state: GameState, player: int, card: Card) -> GameState:
    """Move an army card into hand."""
    owner = state.players[player]
    owner = owner.evolve(army=without(owner.army, card), hand=owner.hand + (card,))
    return state.with_player(player, owner)


def return_to_army(state: GameState, player: int, card: Card) -> GameState:
    owner = state.players[player]
    owner = owner.evolve(hand=without(owner.hand, card), army=owner.army + (card,))
    return state.with_player(player, owner)


def exhaust(state: GameState, player: int, card: Card) -> GameState:
    owner = state.players[player]
    return state.with_player(player, owner.with_army(without(owner.army, card), owner.exhausted + (card,)))


def queue_prompts(state: GameState, *prompts: Prompt) -> GameState:
    """Put prompts ahead of any already pending, keeping their order."""
    return state.with_prompts(tuple(prompts) + state.prompts)


def pop_prompt(state: GameState) -> GameState:
    return state.with_prompts(state.prompts[1:])


def hand_has(state: GameState, player: int, name: CardName) -> bool:
    return any(card.name == name for card in state.players[player].hand)


def first_in_hand(state: GameState, player: int, name: CardName) -> Card | None:
    for card in state.players[player].hand:
        if card.name == name:
            return card
    return None
