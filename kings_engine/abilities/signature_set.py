"""Signature cards players add to their armies."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from kings_engine import effects
from kings_engine.abilities.base import Ability, CardHooks, CardModule, Keyword, Reaction
from kings_engine.actions import AbilityChoice
from kings_engine.cards import CardName
from kings_engine.rules import Location, is_muted, is_royalty, is_steadfast, names_in_game
from kings_engine.state import Prompt, PromptKind

if TYPE_CHECKING:
    from kings_engine.abilities.registry import CardRegistry
    from kings_engine.rules import ValueContext
    from kings_engine.state import CourtEntry, GameState

C = CardName


def _any_disgraced(state: GameState) -> bool:
    return any(entry.disgraced for entry in state.court)


class FlagBearerAbility(Ability):
    name = "Disgrace for Army Actions"
    description = (
        "If a card in Court is disgraced, disgrace this card to Recall once, then Rally twice. "
        "Reveal the rallied cards, then return one to the army."
    )

    def can_activate(self, state, actor, card, registry):
        return _any_disgraced(state)

    def execute(self, state, actor, opponent, choice, ctx):
        state = effects.disgrace(state, effects.court_index(state, ctx.card), ctx)
        return effects.queue_prompts(
            state,
            Prompt(PromptKind.RECALL, actor, source=C.FLAG_BEARER),
            Prompt(PromptKind.RALLY, actor, source=C.FLAG_BEARER, remaining=2),
            Prompt(PromptKind.RETURN_TO_ARMY, actor, source=C.FLAG_BEARER),
        )


class StrangerAbility(Ability):
    """Copies the ability of a court card below the throne.

    Each choice carries the copied card in ``copy``; the remaining fields feed
    the copied ability. The copied card leaves the round afterwards.
    """

    name = "Copy Court Ability"
    description = "Use the ability of a card in Court, then condemn that card."

    def choices(self, state, actor, card, registry):
        options = []
        for entry in state.court[:-1]:
            if entry.disgraced or entry.card.name == C.STRANGER:
                continue
            ability = registry.get(entry.card.name).ability
            if ability is None or is_muted(state, registry, entry.card, entry.steadfast):
                continue
            if not ability.can_activate(state, actor, card, registry):
                continue
            options.extend(
                replace(choice, copy=entry.card) for choice in ability.choices(state, actor, card, registry)
            )
        return options

    def can_activate(self, state, actor, card, registry):
        return bool(self.choices(state, actor, card, registry))

    def execute(self, state, actor, opponent, choice, ctx):
        copied = choice.copy
        ctx.log.public(f"{ctx.card} copies {copied}")
        ability = ctx.registry.get(copied.name).ability
        state = ability.execute(state, actor, opponent, replace(choice, copy=None), ctx)
        if any(entry.card == copied for entry in state.court):
            state = effects.condemn_from_court(state, effects.court_index(state, copied), ctx)
        return state


class StrangerReaction(Reaction):
    copies = True

    def resolve(self, state, responder, used_card, pending, ctx, copied=None):
        if copied is None:
            raise ValueError("Stranger must be claimed as another reaction")
        reaction = ctx.registry.get(copied).reaction
        return reaction.resolve(state, responder, used_card, pending, ctx)


class AegisAbility(Ability):
    name = "Disgrace Court Card"
    description = "May be played on any card. You may disgrace a card in Court."

    def _targets(self, state, card, registry):
        return [
            entry
            for entry in state.court
            if entry.card != card and not entry.disgraced and not is_steadfast(state, registry, entry)
        ]

    def can_activate(self, state, actor, card, registry):
        return bool(self._targets(state, card, registry))

    def choices(self, state, actor, card, registry):
        return [AbilityChoice(target=entry.card) for entry in self._targets(state, card, registry)]

    def execute(self, state, actor, opponent, choice, ctx):
        return effects.disgrace(state, effects.court_index(state, choice.target), ctx)


class AegisHooks(CardHooks):
    """Aegis stays Steadfast while its owner's king is unflipped."""

    def on_enter_court(self, state, entry, ctx):
        if state.players[entry.owner].king_flipped or entry.steadfast:
            return state
        index = effects.court_index(state, entry.card)
        return effects.replace_entry(state, index, replace(entry, steadfast=True))

    def on_king_flip(self, state, player, ctx):
        for index, entry in enumerate(state.court):
            if entry.card.name == C.AEGIS and entry.owner == player and entry.steadfast:
                state = effects.replace_entry(state, index, replace(entry, steadfast=False))
        return state


class AncestorAbility(Ability):
    name = "Recall and Rally"
    description = "Recall. Then you may condemn a card from your hand to Rally."

    def can_activate(self, state, actor, card, registry):
        player = state.players[actor]
        return bool(player.exhausted) or bool(player.hand and player.army)

    def execute(self, state, actor, opponent, choice, ctx):
        return effects.queue_prompts(
            state,
            Prompt(PromptKind.RECALL, actor, source=C.ANCESTOR),
            Prompt(PromptKind.SACRIFICE_FOR_RALLY, actor, source=C.ANCESTOR, optional=True),
        )


class InformantAbility(Ability):
    name = "Guess Dungeon"
    description = "Guess the opponent's dungeon card. If correct, take it into your hand or Rally."

    def can_activate(self, state, actor, card, registry):
        return state.players[1 - actor].dungeon is not None

    def choices(self, state, actor, card, registry):
        return [AbilityChoice(named=name) for name in names_in_game(state)]

    def execute(self, state, actor, opponent, choice, ctx):
        dungeon = state.players[opponent].dungeon
        if dungeon is None or dungeon.name != choice.named:
            ctx.log.public(f"Miss: the dungeon does not hold {choice.named}")
            return state
        ctx.log.public(f"Hit: the dungeon holds {dungeon}")
        return effects.queue_prompts(state, Prompt(PromptKind.INFORMANT_REWARD, actor, source=C.INFORMANT))


class NakturnAbility(Ability):
    name = "Bluff Test"
    description = (
        "If a card in Court is disgraced, name a card. The opponent guesses whether you hold it. "
        "If they guess wrong, look at their hand and condemn a card from it."
    )

    def can_activate(self, state, actor, card, registry):
        return _any_disgraced(state)

    def choices(self, state, actor, card, registry):
        return [AbilityChoice(named=name) for name in names_in_game(state)]

    def execute(self, state, actor, opponent, choice, ctx):
        ctx.log.public(f"{state.players[actor].name} names {choice.named}")
        return effects.queue_prompts(
            state,
            Prompt(PromptKind.GUESS_PRESENCE, opponent, source=C.NAKTURN, named=choice.named),
        )


class LockshiftAbility(Ability):
    name = "Open the Dungeons"
    description = "Look at every dungeon card. Each goes to its owner's hand."

    def can_activate(self, state, actor, card, registry):
        return any(player.dungeon is not None for player in state.players)

    def execute(self, state, actor, opponent, choice, ctx):
        for idx, player in enumerate(state.players):
            if player.dungeon is None:
                continue
            ctx.log.private(actor, f"{player.name}'s dungeon holds {player.dungeon}")
            state = state.with_player(idx, player.evolve(hand=player.hand + (player.dungeon,), dungeon=None))
        ctx.log.public("The dungeons are opened")
        return state


class ConspiracistAbility(Ability):
    name = "Conspiracy"
    description = (
        "Until the end of your next turn, your hand and antechamber cards get +1. "
        "Cards you play meanwhile keep +1 and are Steadfast."
    )

    def execute(self, state, actor, opponent, choice, ctx):
        ctx.log.public(f"{state.players[actor].name} starts a conspiracy")
        return effects.update_player(state, actor, conspiracy_turns=2)


class ExileAbility(Ability):
    name = "Exile"
    description = "All cards are muted until the start of your next turn."

    def execute(self, state, actor, opponent, choice, ctx):
        ctx.log.public("All cards are muted until the exile ends")
        return state.evolve(exile_owner=actor)


def _ancestor_play_rule(state: GameState, player: int, throne: CourtEntry | None, registry: CardRegistry):
    if throne is not None and is_royalty(state, registry, throne.card.name):
        return True
    return None


def _aegis_play_rule(state: GameState, player: int, throne: CourtEntry | None, registry: CardRegistry):
    return True


def _nakturn_value(value: int, context: ValueContext) -> int:
    return 2 if context.location == Location.COURT else value


def _conspiracist_value(value: int, context: ValueContext) -> int:
    return value - 1 if context.on_throne else value


def _exile_value(value: int, context: ValueContext) -> int:
    return value - context.high_court_cards if context.on_throne else value


IMMUNE = frozenset({Keyword.IMMUNE_TO_KINGS_HAND})

SIGNATURE_MODULES: list[CardModule] = [
    CardModule(C.FLAG_BEARER, 1, ability=FlagBearerAbility(), text=FlagBearerAbility.description),
    CardModule(C.STRANGER, 2, keywords=IMMUNE | {Keyword.REACTION}, ability=StrangerAbility(),
               reaction=StrangerReaction(),
               text="Use the ability of a card in Court. Reaction: copy a reaction card in Court."),
    CardModule(C.AEGIS, 3, keywords=IMMUNE, ability=AegisAbility(), hooks=AegisHooks(),
               play_rule=_aegis_play_rule,
               text="Steadfast while your king is unflipped. " + AegisAbility.description),
    CardModule(C.ANCESTOR, 4, keywords=IMMUNE, ability=AncestorAbility(), play_rule=_ancestor_play_rule,
               text="May be played on Royalty. " + AncestorAbility.description
               + " While in Court, Elders are Steadfast and get +3."),
    CardModule(C.INFORMANT, 4, keywords=IMMUNE, ability=InformantAbility(), text=InformantAbility.description),
    CardModule(C.NAKTURN, 4, ability=NakturnAbility(), value_rule=_nakturn_value,
               text="Value 2 in Court. " + NakturnAbility.description),
    CardModule(C.LOCKSHIFT, 5, ability=LockshiftAbility(), text=LockshiftAbility.description),
    CardModule(C.CONSPIRACIST, 6, keywords=frozenset({Keyword.STEADFAST}), ability=ConspiracistAbility(),
               value_rule=_conspiracist_value, text="-1 on the Throne. " + ConspiracistAbility.description),
    CardModule(C.EXILE, 8, keywords=frozenset({Keyword.STEADFAST}), ability=ExileAbility(),
               value_rule=_exile_value,
               text="-1 on the Throne for each other card of value 7 or more in Court. " + ExileAbility.description),
]
