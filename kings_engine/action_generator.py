"""Legal action generation for Imposter Kings."""

from __future__ import annotations

from itertools import combinations
from typing import TYPE_CHECKING

from kings_engine import effects
from kings_engine.abilities.base import EffectContext
from kings_engine.actions import (
    Action,
    CardInHandGuess,
    ChangeKingFacet,
    ChooseDungeon,
    ChooseSignatureCards,
    ChooseSquire,
    ChooseSuccessor,
    ChooseWhosFirst,
    Condemn,
    CondemnOpponentCard,
    Decline,
    Discard,
    Disgrace,
    EndMuster,
    Exhaust,
    FlipKing,
    MoveToAntechamber,
    PlayCard,
    Rally,
    React,
    Recall,
    Recommission,
    Recruit,
    ReturnToArmy,
    Skip,
    StartNewRound,
    SwapCard,
    TakeDungeon,
)
from kings_engine.events import MessageLog
from kings_engine.rules import can_play_from_hand, is_muted, is_steadfast
from kings_engine.state import CardSource, GamePhase, KingFacet, PromptKind

if TYPE_CHECKING:
    from kings_engine.abilities.registry import CardRegistry
    from kings_engine.cards import Card
    from kings_engine.state import GameState, Prompt


def generate_legal_actions(state: GameState, viewer: int, registry: CardRegistry) -> list[Action]:
    """Generate every legal action for ``viewer``.

    Args:
        state: Current game state.
        viewer: Player asking.
        registry: Card registry in use.

    Returns:
        The acting player's legal actions, or an empty list for anyone else.
    """
    if state.is_game_over or state.acting_player != viewer:
        return []

    if state.reaction is not None:
        return [React(state.reaction.current_option), Decline()]

    if state.prompt is not None:
        return _generate_prompt_answers(state, state.prompt, registry)

    match state.phase:
        case GamePhase.SIGNATURE_SELECTION:
            return _generate_signature_actions(state)
        case GamePhase.MUSTERING:
            return _generate_muster_actions(state)
        case GamePhase.PLAY:
            return _generate_play_actions(state, registry)
        case GamePhase.ROUND_END:
            return [StartNewRound()]

    return []


def _generate_signature_actions(state: GameState) -> list[Action]:
    pool = sorted(state.config.signature_pool)
    return [
        ChooseSignatureCards(cards=picked)
        for picked in combinations(pool, state.config.signature_card_count)
    ]


def _generate_muster_actions(state: GameState) -> list[Action]:
    """Recruit, recommission, change facet or end the muster."""
    actions: list[Action] = []
    player = state.current_player_state

    # Both cost an exhaust, so the army must keep another card
    if player.hand and len(player.army) >= 2:
        actions.extend(Recruit(card=card) for card in sorted(player.army))
    if len(player.army) >= 2:
        actions.extend(Recommission(card=card) for card in sorted(player.exhausted))

    actions.extend(ChangeKingFacet(facet=facet) for facet in KingFacet if facet != player.king_facet)
    actions.append(EndMuster())
    return actions


def _generate_play_actions(state: GameState, registry: CardRegistry) -> list[Action]:
    player_idx = state.current_player
    player = state.players[player_idx]

    if player.antechamber:
        actions: list[Action] = []
        for card in player.antechamber:
            actions.extend(play_variants(state, player_idx, card, CardSource.ANTECHAMBER, registry))
        return actions

    actions = []
    for card in sorted(player.hand):
        if can_play_from_hand(state, registry, player_idx, card):
            actions.extend(play_variants(state, player_idx, card, CardSource.HAND, registry))
    if player.can_flip_king:
        actions.append(FlipKing())
    return actions


def play_variants(
    state: GameState, player: int, card: Card, source: CardSource, registry: CardRegistry
) -> list[PlayCard]:
    """Every way to play ``card``: without its ability and once per ability choice.

    Choices are evaluated with the card already on the throne.
    """
    ctx = EffectContext(registry=registry, log=MessageLog(), card=card)
    placed, entry = effects.play_to_court(state, player, card, source, ctx)

    ability = registry.get(card.name).ability
    if (
        ability is None
        or is_muted(placed, registry, card, entry.steadfast)
        or not ability.can_activate(placed, player, card, registry)
    ):
        return [PlayCard(card=card, source=source)]

    choices = ability.choices(placed, player, card, registry)
    variants = [PlayCard(card=card, source=source, ability=choice) for choice in choices]
    if ability.may or not variants:
        variants.insert(0, PlayCard(card=card, source=source))
    return variants


def has_any_play(state: GameState, player: int, registry: CardRegistry) -> bool:
    """Whether ``player`` could take a turn right now."""
    owner = state.players[player]
    if owner.antechamber or owner.can_flip_king:
        return True
    return any(can_play_from_hand(state, registry, player, card) for card in owner.hand)


def _generate_prompt_answers(state: GameState, prompt: Prompt, registry: CardRegistry) -> list[Action]:
    actions = prompt_answers(state, prompt, registry)
    if prompt.optional:
        actions.append(Skip())
    return actions


def prompt_answers(state: GameState, prompt: Prompt, registry: CardRegistry) -> list[Action]:
    """Answers to a prompt, not counting Skip."""
    player = state.players[prompt.player]
    opponent = state.players[1 - prompt.player]
    hand = sorted(player.hand)

    match prompt.kind:
        case PromptKind.CHOOSE_FIRST_PLAYER:
            return [ChooseWhosFirst(player=0), ChooseWhosFirst(player=1)]
        case PromptKind.RECRUIT_DISCARD:
            return [Discard(card=card) for card in hand]
        case PromptKind.RECRUIT_EXHAUST:
            return [Exhaust(card=card) for card in sorted(player.army) if card != prompt.card]
        case PromptKind.RECOMMISSION_EXHAUST:
            return [Exhaust(card=card) for card in sorted(player.army)]
        case PromptKind.PICK_SUCCESSOR:
            return [ChooseSuccessor(card=card) for card in hand]
        case PromptKind.PICK_DUNGEON:
            return [ChooseDungeon(card=card) for card in hand]
        case PromptKind.PICK_SQUIRE:
            return [ChooseSquire(card=card) for card in hand]
        case PromptKind.PLAY_ANY_VALUE:
            actions: list[Action] = []
            for card in hand:
                actions.extend(play_variants(state, prompt.player, card, CardSource.HAND, registry))
            return actions
        case PromptKind.PICK_FOR_ANTECHAMBER:
            return [MoveToAntechamber(card=card) for card in hand if registry.base_value(card.name) >= 2]
        case PromptKind.DISGRACE:
            return [
                Disgrace(card=entry.card)
                for entry in state.court
                if entry.card != prompt.card
                and not entry.disgraced
                and not is_steadfast(state, registry, entry)
            ]
        case PromptKind.SWAP_GIVE:
            # The received card can only go back if nothing else is held
            others = [card for card in hand if card != prompt.card]
            return [SwapCard(card=card) for card in (others or hand)]
        case PromptKind.GUESS_PRESENCE:
            return [CardInHandGuess(present=True), CardInHandGuess(present=False)]
        case PromptKind.CONDEMN_OPPONENT_CARD:
            return [CondemnOpponentCard(index=i) for i in range(len(opponent.hand))]
        case PromptKind.CONDEMN_BY_VALUE:
            return [Condemn(card=card) for card in hand if registry.base_value(card.name) == prompt.number]
        case PromptKind.RECALL:
            return [Recall(card=card) for card in sorted(player.exhausted)]
        case PromptKind.SACRIFICE_FOR_RALLY:
            if not player.army:
                return []
            return [Condemn(card=card) for card in hand]
        case PromptKind.RALLY:
            return [Rally(card=card) for card in sorted(player.army)]
        case PromptKind.RETURN_TO_ARMY:
            return [ReturnToArmy(card=card) for card in prompt.cards if card in player.hand]
        case PromptKind.INFORMANT_REWARD:
            actions = []
            if opponent.dungeon is not None:
                actions.append(TakeDungeon())
            actions.extend(Rally(card=card) for card in sorted(player.army))
            return actions

    raise ValueError(f"Unknown prompt kind: {prompt.kind}")
