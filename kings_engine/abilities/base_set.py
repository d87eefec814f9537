"""Base characters shared by every variant."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from kings_engine import effects
from kings_engine.abilities.base import (
    Ability,
    CardHooks,
    CardModule,
    Keyword,
    Reaction,
)
from kings_engine.actions import AbilityChoice
from kings_engine.cards import CardName
from kings_engine.rules import Location, court_value, is_royalty, is_steadfast, names_in_game
from kings_engine.scoring import end_round
from kings_engine.state import CourtEntry, Prompt, PromptKind, ReactionTrigger, without

if TYPE_CHECKING:
    from kings_engine.abilities.registry import CardRegistry
    from kings_engine.cards import Card
    from kings_engine.rules import ValueContext
    from kings_engine.state import GameState

C = CardName


def _naming_choices(state: GameState) -> list[AbilityChoice]:
    return [AbilityChoice(named=name) for name in names_in_game(state)]


def _disgraceable(state: GameState, registry: CardRegistry, exclude: Card) -> list[CourtEntry]:
    return [
        entry
        for entry in state.court
        if entry.card != exclude and not entry.disgraced and not is_steadfast(state, registry, entry)
    ]


class FoolAbility(Ability):
    name = "Take Court Card"
    description = "Take any non-disgraced card from the Court into your hand."

    def can_activate(self, state, actor, card, registry):
        return bool(self.choices(state, actor, card, registry))

    def choices(self, state, actor, card, registry):
        return [
            AbilityChoice(target=entry.card)
            for entry in state.court
            if entry.card != card and not entry.disgraced
        ]

    def execute(self, state, actor, opponent, choice, ctx):
        index = effects.court_index(state, choice.target)
        state, entry = effects.remove_from_court(state, index, ctx)
        ctx.log.public(f"{state.players[actor].name} takes {entry.card} from the court")
        return effects.take_into_hand(state, actor, entry.card)


class InquisitorAbility(Ability):
    name = "Summon to Antechamber"
    description = "Name a card. The opponent moves a copy of it from hand to their antechamber."

    def can_activate(self, state, actor, card, registry):
        return len(state.players[1 - actor].hand) > 0

    def choices(self, state, actor, card, registry):
        return _naming_choices(state)

    def execute(self, state, actor, opponent, choice, ctx):
        found = effects.first_in_hand(state, opponent, choice.named)
        if found is None:
            ctx.log.public(f"{state.players[opponent].name} has no {choice.named}")
            return state
        ctx.log.public(f"{state.players[opponent].name} moves {found} to the antechamber")
        return effects.move_to_antechamber(state, opponent, found)


class ExecutionerAbility(Ability):
    name = "Execute by Value"
    description = (
        "Name a number up to the highest base value in Court. "
        "Each player condemns a card of that base value from hand."
    )

    def choices(self, state, actor, card, registry):
        highest = max(registry.base_value(entry.card.name) for entry in state.court)
        return [AbilityChoice(number=n) for n in range(1, highest + 1)]

    def execute(self, state, actor, opponent, choice, ctx):
        ctx.log.public(f"Each player condemns a card of base value {choice.number}")
        return effects.queue_prompts(
            state,
            Prompt(PromptKind.CONDEMN_BY_VALUE, actor, source=C.EXECUTIONER, number=choice.number),
            Prompt(PromptKind.CONDEMN_BY_VALUE, opponent, source=C.EXECUTIONER, number=choice.number),
        )


class SoldierAbility(Ability):
    name = "Say Card Name for Bonus"
    description = (
        "Name a card. If the opponent holds it, this card gains +2 "
        "and you may disgrace up to three cards in the Court."
    )

    def choices(self, state, actor, card, registry):
        return _naming_choices(state)

    def execute(self, state, actor, opponent, choice, ctx):
        if not effects.hand_has(state, opponent, choice.named):
            ctx.log.public(f"Miss: {state.players[opponent].name} has no {choice.named}")
            return state
        ctx.log.public(f"Hit: {state.players[opponent].name} has {choice.named}")
        index = effects.court_index(state, ctx.card)
        entry = state.court[index]
        state = effects.replace_entry(state, index, replace(entry, bonus=entry.bonus + 2))
        return effects.queue_prompts(
            state,
            Prompt(PromptKind.DISGRACE, actor, source=C.SOLDIER, remaining=3, optional=True, card=ctx.card),
        )


class JudgeAbility(Ability):
    name = "Guess Hand Card"
    description = (
        "Guess a card in the opponent's hand. If correct, you may move a card "
        "of base value 2 or more to your antechamber."
    )

    def can_activate(self, state, actor, card, registry):
        return len(state.players[1 - actor].hand) > 0

    def choices(self, state, actor, card, registry):
        return _naming_choices(state)

    def execute(self, state, actor, opponent, choice, ctx):
        if not effects.hand_has(state, opponent, choice.named):
            ctx.log.public(f"Miss: {state.players[opponent].name} has no {choice.named}")
            return state
        ctx.log.public(f"Hit: {state.players[opponent].name} has {choice.named}")
        return effects.queue_prompts(
            state,
            Prompt(PromptKind.PICK_FOR_ANTECHAMBER, actor, source=C.JUDGE, optional=True),
        )


class OathboundAbility(Ability):
    name = "Disgrace Higher Value"
    description = (
        "If played on a higher value card, disgrace that card, then play another "
        "card of any value. That card is immune to King's Hand."
    )
    may = False

    def can_activate(self, state, actor, card, registry):
        if len(state.court) < 2:
            return False
        below = len(state.court) - 2
        return court_value(state, registry, below) > court_value(state, registry, below + 1)

    def execute(self, state, actor, opponent, choice, ctx):
        index = effects.court_index(state, ctx.card)
        if index == 0:
            return state
        state = effects.disgrace(state, index - 1, ctx)
        return effects.queue_prompts(state, Prompt(PromptKind.PLAY_ANY_VALUE, actor, source=C.OATHBOUND))


class MysticAbility(Ability):
    name = "Mute Cards by Value"
    description = (
        "If a card in Court is disgraced, disgrace this card and choose a number "
        "from 1 to 8. Cards of that base value are muted for the round."
    )

    def can_activate(self, state, actor, card, registry):
        return any(entry.disgraced for entry in state.court)

    def choices(self, state, actor, card, registry):
        return [AbilityChoice(number=n) for n in range(1, 9)]

    def execute(self, state, actor, opponent, choice, ctx):
        state = effects.disgrace(state, effects.court_index(state, ctx.card), ctx)
        ctx.log.public(f"Cards of base value {choice.number} are muted for the round")
        return state.evolve(muted_values=state.muted_values | {choice.number})


class WardenAbility(Ability):
    name = "Exchange with Accused"
    description = "With four or more cards in Court, exchange a card from your hand with the accused."

    def can_activate(self, state, actor, card, registry):
        return len(state.court) >= 4 and state.accused is not None and len(state.players[actor].hand) > 0

    def choices(self, state, actor, card, registry):
        return [AbilityChoice(hand_card=c) for c in sorted(set(state.players[actor].hand))]

    def execute(self, state, actor, opponent, choice, ctx):
        player = state.players[actor]
        accused = state.accused
        hand = without(player.hand, choice.hand_card) + (accused,)
        ctx.log.public(f"{player.name} exchanges {choice.hand_card} with the accused {accused}")
        return state.with_player(actor, player.with_hand(hand)).evolve(accused=choice.hand_card)


class SentryAbility(Ability):
    name = "Swap with Court"
    description = "Exchange a card from your hand with a non-Royalty, non-disgraced card in Court that is not the Throne."

    def _targets(self, state, registry):
        return [
            entry
            for entry in state.court[:-1]
            if not entry.disgraced and not is_royalty(state, registry, entry.card.name)
        ]

    def can_activate(self, state, actor, card, registry):
        return bool(self._targets(state, registry)) and len(state.players[actor].hand) > 0

    def choices(self, state, actor, card, registry):
        hand = sorted(set(state.players[actor].hand))
        return [
            AbilityChoice(target=entry.card, hand_card=c)
            for entry in self._targets(state, registry)
            for c in hand
        ]

    def execute(self, state, actor, opponent, choice, ctx):
        index = effects.court_index(state, choice.target)
        state, taken = effects.remove_from_court(state, index, ctx)
        player = state.players[actor]
        hand = without(player.hand, choice.hand_card) + (taken.card,)
        state = state.with_player(actor, player.with_hand(hand))
        ctx.log.public(f"{player.name} swaps {taken.card} in the court for {choice.hand_card}")
        court = list(state.court)
        court.insert(index, CourtEntry(card=choice.hand_card, owner=actor))
        state = state.with_court(tuple(court))
        return ctx.registry.get(choice.hand_card.name).hooks.on_enter_court(state, court[index], ctx)


class PrincessAbility(Ability):
    name = "Exchange Hand Cards"
    description = "Give a card from your hand to the opponent, who gives you one in return."

    def can_activate(self, state, actor, card, registry):
        return len(state.players[actor].hand) > 0 and len(state.players[1 - actor].hand) > 0

    def choices(self, state, actor, card, registry):
        return [AbilityChoice(hand_card=c) for c in sorted(set(state.players[actor].hand))]

    def execute(self, state, actor, opponent, choice, ctx):
        ctx.log.public(f"{state.players[actor].name} gives a card to {state.players[opponent].name}")
        ctx.log.private(opponent, f"You received {choice.hand_card}")
        state = effects.transfer_hand_card(state, actor, opponent, choice.hand_card)
        return effects.queue_prompts(
            state,
            Prompt(PromptKind.SWAP_GIVE, opponent, source=C.PRINCESS, card=choice.hand_card),
        )


class QueenAbility(Ability):
    name = "Disgrace the Court"
    description = "Disgrace all other cards in the Court."
    may = False

    def can_activate(self, state, actor, card, registry):
        return bool(_disgraceable(state, registry, card))

    def execute(self, state, actor, opponent, choice, ctx):
        for entry in _disgraceable(state, ctx.registry, ctx.card):
            state = effects.disgrace(state, effects.court_index(state, entry.card), ctx)
        return state


class KingsHandReaction(Reaction):
    trigger = ReactionTrigger.ABILITY

    def resolve(self, state, responder, used_card, pending, ctx, copied=None):
        ctx.log.public(f"{used_card} prevents the ability of {pending.card}")
        return effects.condemn_from_court(state, effects.court_index(state, pending.card), ctx)


class AssassinReaction(Reaction):
    trigger = ReactionTrigger.KING_FLIP

    def resolve(self, state, responder, used_card, pending, ctx, copied=None):
        ctx.log.public(f"{used_card} strikes: {state.players[pending.actor].name}'s king flip fails")
        return end_round(state, responder, ctx.log)


class ImmortalHooks(CardHooks):
    def on_enter_court(self, state, entry, ctx):
        if not entry.disgraced:
            ctx.log.public("The Immortal holds court: Warlord gains Royalty, other Royalty weakens")
        return state

    def on_leave_court(self, state, entry, ctx):
        ctx.log.public("The Immortal leaves the court")
        return state


def _elder_play_rule(state: GameState, player: int, throne: CourtEntry | None, registry: CardRegistry):
    if throne is not None and is_royalty(state, registry, throne.card.name):
        return True
    return None


def _zealot_play_rule(state: GameState, player: int, throne: CourtEntry | None, registry: CardRegistry):
    if (
        throne is not None
        and state.players[player].king_flipped
        and not is_royalty(state, registry, throne.card.name)
    ):
        return True
    return None


def _warlord_play_rule(state: GameState, player: int, throne: CourtEntry | None, registry: CardRegistry):
    if throne is not None and is_royalty(state, registry, throne.card.name):
        return False
    return None


def _always(state: GameState, player: int, throne: CourtEntry | None, registry: CardRegistry):
    return True


def _warlord_value(value: int, context: ValueContext) -> int:
    return 8 if context.location != Location.COURT else value


def _immortal_value(value: int, context: ValueContext) -> int:
    return 5 if context.location == Location.COURT else value


BASE_MODULES: list[CardModule] = [
    CardModule(C.FOOL, 1, ability=FoolAbility(), play_rule=_always,
               text="May be played on any card. You may take a card from the Court into your hand."),
    CardModule(C.ASSASSIN, 2, keywords=frozenset({Keyword.REACTION}), reaction=AssassinReaction(),
               text="Reaction: when the opponent flips their king, reveal this to win the round."),
    CardModule(C.ELDER, 3, play_rule=_elder_play_rule, text="May be played on any Royalty."),
    CardModule(C.ZEALOT, 3, play_rule=_zealot_play_rule,
               text="If your king is flipped, may be played on any non-Royalty card."),
    CardModule(C.INQUISITOR, 4, ability=InquisitorAbility(), text=InquisitorAbility.description),
    CardModule(C.EXECUTIONER, 4, ability=ExecutionerAbility(), text=ExecutionerAbility.description),
    CardModule(C.SOLDIER, 5, ability=SoldierAbility(), text=SoldierAbility.description),
    CardModule(C.JUDGE, 5, ability=JudgeAbility(), text=JudgeAbility.description),
    CardModule(C.IMMORTAL, 6, keywords=frozenset({Keyword.STEADFAST}), hooks=ImmortalHooks(),
               value_rule=_immortal_value,
               text="Steadfast. Value 5 in Court. While in Court, Warlord gains Royalty and +1; Princess, Queen and Elder lose 1."),
    CardModule(C.OATHBOUND, 6, keywords=frozenset({Keyword.IMMUNE_TO_KINGS_HAND}),
               ability=OathboundAbility(), play_rule=_always, text=OathboundAbility.description),
    CardModule(C.MYSTIC, 7, ability=MysticAbility(), text=MysticAbility.description),
    CardModule(C.WARLORD, 7, play_rule=_warlord_play_rule, value_rule=_warlord_value,
               text="Value 8 in hand. Cannot be played on Royalty."),
    CardModule(C.WARDEN, 7, ability=WardenAbility(), text=WardenAbility.description),
    CardModule(C.SENTRY, 8, ability=SentryAbility(), text=SentryAbility.description),
    CardModule(C.KINGS_HAND, 8, keywords=frozenset({Keyword.REACTION}), reaction=KingsHandReaction(),
               text="Reaction: when the opponent uses an ability, condemn this and the card that triggered it."),
    CardModule(C.PRINCESS, 9, keywords=frozenset({Keyword.ROYALTY}), ability=PrincessAbility(),
               text=PrincessAbility.description),
    CardModule(C.QUEEN, 9, keywords=frozenset({Keyword.ROYALTY}), ability=QueenAbility(),
               text=QueenAbility.description),
]
