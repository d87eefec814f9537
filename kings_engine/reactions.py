"""Reaction protocol.

Before a MAY ability or a king flip resolves, the non-acting player is asked
about every reaction they could plausibly hold. Plausibility is judged from
what that player can see, never from their actual hand, so the sequence of
questions is identical whether or not they hold the card.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from kings_engine import effects
from kings_engine.abilities.base import EffectContext
from kings_engine.errors import IllegalMoveError
from kings_engine.state import PendingTrigger, ReactionOption, ReactionState

if TYPE_CHECKING:
    from kings_engine.abilities.registry import CardRegistry
    from kings_engine.cards import CardName
    from kings_engine.events import MessageLog
    from kings_engine.state import GameState, ReactionTrigger


def visibility_set(state: GameState, responder: int) -> Counter:
    """Card names the responder can see outside their hidden zones."""
    player = state.players[responder]
    seen: Counter = Counter()
    seen.update(card.name for card in player.antechamber)
    seen.update(card.name for card in player.condemned)
    seen.update(card.name for card in player.exhausted)
    seen.update(entry.card.name for entry in state.court)
    seen.update(card.name for card in state.condemned)
    if state.accused is not None:
        seen[state.accused.name] += 1
    return seen


def _copyable(state: GameState, registry: CardRegistry, trigger: ReactionTrigger) -> list[CardName]:
    names = []
    for entry in state.court[:-1]:
        if entry.disgraced:
            continue
        reaction = registry.get(entry.card.name).reaction
        if reaction is None or reaction.copies or reaction.trigger != trigger:
            continue
        if entry.card.name not in names:
            names.append(entry.card.name)
    return sorted(names)


def reaction_options(
    state: GameState, responder: int, trigger: ReactionTrigger, registry: CardRegistry
) -> tuple[ReactionOption, ...]:
    """Every reaction the responder could plausibly claim, in registry order."""
    in_game = Counter(card.name for card in state.expected_cards())
    seen = visibility_set(state, responder)
    options: list[ReactionOption] = []
    for module in registry.reaction_modules():
        if in_game[module.name] <= seen[module.name]:
            continue
        if module.reaction.copies:
            options.extend(
                ReactionOption(module.name, copies=name) for name in _copyable(state, registry, trigger)
            )
        elif module.reaction.trigger == trigger:
            options.append(ReactionOption(module.name))
    return tuple(options)


def open_window(state: GameState, pending: PendingTrigger, registry: CardRegistry) -> GameState | None:
    """Enter the reaction sub-state, or return None when nothing can react."""
    options = reaction_options(state, 1 - pending.actor, pending.trigger, registry)
    if not options:
        return None
    return state.with_reaction(ReactionState(pending=pending, options=options))


def check_claim(state: GameState, option: ReactionOption) -> None:
    """Reject a reaction claim for a card the responder does not hold."""
    responder = state.reaction.responder
    if not effects.hand_has(state, responder, option.card):
        raise IllegalMoveError(f"You do not hold {option.card}", reason="false_reaction_claim")


def react(state: GameState, option: ReactionOption, registry: CardRegistry, log: MessageLog) -> GameState:
    """Resolve a genuine reaction. The pending effect is dropped."""
    pending = state.reaction.pending
    responder = state.reaction.responder
    used = effects.first_in_hand(state, responder, option.card)
    ctx = EffectContext(registry=registry, log=log, card=used)
    state = state.with_reaction(None)
    log.public(f"{state.players[responder].name} reacts with {option}")
    state = effects.condemn_from_hand(state, responder, used, ctx)
    reaction = registry.get(option.card).reaction
    return reaction.resolve(state, responder, used, pending, ctx, copied=option.copies)


def decline(state: GameState) -> tuple[GameState, PendingTrigger | None]:
    """Move past the current option.

    Returns the new state and, once every option has been declined, the
    trigger that should now resolve.
    """
    reaction = state.reaction
    if reaction.position + 1 < len(reaction.options):
        return state.with_reaction(ReactionState(reaction.pending, reaction.options, reaction.position + 1)), None
    return state.with_reaction(None), reaction.pending
