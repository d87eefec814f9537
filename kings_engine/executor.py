"""Action validation and execution for Imposter Kings."""

from __future__ import annotations

from collections import Counter
from dataclasses import replace
from typing import TYPE_CHECKING

from kings_engine import effects, reactions
from kings_engine.abilities.base import EffectContext, Keyword
from kings_engine.action_generator import generate_legal_actions, has_any_play, prompt_answers
from kings_engine.actions import (
    AbilityChoice,
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
from kings_engine.cards import Card, CardName, army_flavor_base, build_cards
from kings_engine.errors import IllegalMoveError, InvariantViolation, ValidationError
from kings_engine.events import MessageLog
from kings_engine.scoring import end_round
from kings_engine.state import (
    CardSource,
    GamePhase,
    KingFacet,
    PendingTrigger,
    Prompt,
    PromptKind,
    ReactionOption,
    ReactionTrigger,
    round_rng,
    without,
)

if TYPE_CHECKING:
    from kings_engine.abilities.registry import CardRegistry
    from kings_engine.events import Message
    from kings_engine.state import GameState


_CARD_ACTIONS = (
    Recruit,
    Recommission,
    Discard,
    Exhaust,
    ChooseSuccessor,
    ChooseDungeon,
    ChooseSquire,
    PlayCard,
    MoveToAntechamber,
    Disgrace,
    SwapCard,
    Condemn,
    Recall,
    Rally,
    ReturnToArmy,
)


def apply_action(
    state: GameState, actor: int, action: Action, registry: CardRegistry
) -> tuple[GameState, list[Message]]:
    """Validate and execute an action.

    Args:
        state: Current game state.
        actor: Player submitting the action.
        action: Action to execute.
        registry: Card registry in use.

    Returns:
        The new state and the messages the action produced.

    Raises:
        ValidationError: If the action is malformed.
        IllegalMoveError: If the action is not legal for ``actor`` right now.
        InvariantViolation: If the resulting state breaks card conservation.
    """
    validate_action(state, actor, action, registry)
    log = MessageLog()
    new_state = execute_action(state, actor, action, registry, log)
    if new_state.config.check_invariants:
        check_conservation(new_state)
    return new_state, log.messages


def validate_action(state: GameState, actor: int, action: Action, registry: CardRegistry) -> None:
    """Raise unless ``action`` may be applied. Never modifies anything."""
    _validate_structure(action)
    if actor not in (0, 1):
        raise ValidationError(f"Unknown player: {actor}")
    if state.is_game_over:
        raise IllegalMoveError("Game is already over", reason="game_over")
    if state.acting_player != actor:
        raise IllegalMoveError("It is not your turn", reason="not_your_turn")
    if action not in generate_legal_actions(state, actor, registry):
        raise IllegalMoveError(f"Illegal action: {action}")
    if isinstance(action, React):
        reactions.check_claim(state, action.option)


def _validate_structure(action: object) -> None:
    if not isinstance(action, Action):
        raise ValidationError(f"Not an action: {action!r}")

    if isinstance(action, _CARD_ACTIONS) and not isinstance(action.card, Card):
        raise ValidationError(f"{type(action).__name__} needs a card")

    match action:
        case ChooseSignatureCards():
            if not isinstance(action.cards, tuple) or not all(isinstance(c, CardName) for c in action.cards):
                raise ValidationError("Signature cards must be card names")
            if len(set(action.cards)) != len(action.cards):
                raise ValidationError("Signature cards must be distinct")
        case ChooseWhosFirst():
            if action.player not in (0, 1):
                raise ValidationError(f"Unknown player: {action.player}")
        case ChangeKingFacet():
            if not isinstance(action.facet, KingFacet):
                raise ValidationError("Unknown king facet")
        case PlayCard():
            if not isinstance(action.source, CardSource):
                raise ValidationError("Unknown card source")
            if action.ability is not None and not isinstance(action.ability, AbilityChoice):
                raise ValidationError("Malformed ability choice")
        case React():
            if not isinstance(action.option, ReactionOption):
                raise ValidationError("Malformed reaction")
        case CondemnOpponentCard():
            if not isinstance(action.index, int) or isinstance(action.index, bool) or action.index < 0:
                raise ValidationError("Card index must be a non-negative integer")
        case CardInHandGuess():
            if not isinstance(action.present, bool):
                raise ValidationError("Guess must be true or false")


def check_conservation(state: GameState) -> None:
    """Raise InvariantViolation if any card was lost or duplicated."""
    actual = Counter(state.all_cards())
    expected = state.expected_cards()
    if actual != expected:
        missing = expected - actual
        extra = actual - expected
        raise InvariantViolation(f"Card conservation broken: missing={dict(missing)} extra={dict(extra)}")


def execute_action(
    state: GameState, actor: int, action: Action, registry: CardRegistry, log: MessageLog
) -> GameState:
    """Execute a validated action and return the new state."""
    match action:
        case ChooseSignatureCards():
            return _execute_choose_signatures(state, actor, action, log)
        case ChooseWhosFirst():
            return _execute_choose_first(state, action, log)
        case Recruit():
            return effects.queue_prompts(
                state,
                Prompt(PromptKind.RECRUIT_DISCARD, actor, card=action.card),
                Prompt(PromptKind.RECRUIT_EXHAUST, actor, card=action.card),
            )
        case Recommission():
            return effects.queue_prompts(
                state, Prompt(PromptKind.RECOMMISSION_EXHAUST, actor, card=action.card, remaining=2)
            )
        case Discard():
            return _execute_discard(state, actor, action, log)
        case Exhaust():
            return _execute_exhaust(state, actor, action, log)
        case ChangeKingFacet():
            log.public(f"{state.players[actor].name} changes king facet to {action.facet.key}")
            return effects.update_player(state, actor, king_facet=action.facet)
        case EndMuster():
            return _execute_end_muster(state, actor, registry, log)
        case ChooseSuccessor() | ChooseDungeon() | ChooseSquire():
            return _execute_setup_pick(state, actor, action, registry, log)
        case PlayCard():
            return _execute_play_card(state, actor, action, registry, log)
        case FlipKing():
            return _execute_flip_king(state, actor, registry, log)
        case React():
            return _execute_react(state, action, registry, log)
        case Decline():
            return _execute_decline(state, registry, log)
        case StartNewRound():
            return _execute_start_new_round(state, log)
        case (
            MoveToAntechamber() | Disgrace() | SwapCard() | CardInHandGuess() | CondemnOpponentCard()
            | Condemn() | Recall() | Rally() | ReturnToArmy() | TakeDungeon() | Skip()
        ):
            state = _execute_prompt_answer(state, actor, action, registry, log)
            return _after_effect(state, registry, log)
        case _:
            raise ValidationError(f"Unknown action type: {type(action).__name__}")


# --- Setup -----------------------------------------------------------------


def _execute_choose_signatures(
    state: GameState, actor: int, action: ChooseSignatureCards, log: MessageLog
) -> GameState:
    player = state.players[actor]
    army = player.army + build_cards(action.cards, army_flavor_base(actor))
    state = state.with_player(actor, player.evolve(army=army, signature_cards=action.cards))
    log.public(f"{player.name} chooses signature cards: {', '.join(str(c) for c in action.cards)}")

    if actor == 0:
        return state.with_current_player(1)
    state = _deal_round(state, log)
    return state.evolve(
        phase=GamePhase.MUSTERING,
        prompts=(Prompt(PromptKind.CHOOSE_FIRST_PLAYER, state.true_king),),
    )


def _deal_round(state: GameState, log: MessageLog) -> GameState:
    """Shuffle the deck, set the accused aside and deal both hands."""
    rng = round_rng(state.seed, state.round)
    deck = list(build_cards(state.config.base_deck))
    rng.shuffle(deck)
    accused = deck.pop()

    hands: list[list[Card]] = [[], []]
    size = state.config.hand_size
    turn = 0
    while deck and (len(hands[0]) < size or len(hands[1]) < size):
        if len(hands[turn % 2]) < size:
            hands[turn % 2].append(deck.pop())
        turn += 1

    for idx in (0, 1):
        state = effects.update_player(state, idx, hand=tuple(hands[idx]))
    log.public(f"Round {state.round} begins. The accused is {accused}")
    return state.evolve(deck=tuple(deck), accused=accused)


def _execute_choose_first(state: GameState, action: ChooseWhosFirst, log: MessageLog) -> GameState:
    first = action.player
    state = effects.pop_prompt(state)
    log.public(f"{state.players[first].name} will play first; {state.players[1 - first].name} musters first")
    return state.evolve(first_player=first, current_player=1 - first)


# --- Mustering -------------------------------------------------------------


def _execute_discard(state: GameState, actor: int, action: Discard, log: MessageLog) -> GameState:
    player = state.players[actor]
    player = player.evolve(hand=without(player.hand, action.card), condemned=player.condemned + (action.card,))
    log.public(f"{player.name} discards {action.card} to recruit")
    return effects.pop_prompt(state.with_player(actor, player))


def _execute_exhaust(state: GameState, actor: int, action: Exhaust, log: MessageLog) -> GameState:
    prompt = state.prompt
    state = effects.exhaust(state, actor, action.card)
    name = state.players[actor].name
    log.public(f"{name} exhausts {action.card}")

    if prompt.kind == PromptKind.RECRUIT_EXHAUST:
        state = effects.rally(state, actor, prompt.card)
        player = state.players[actor]
        state = state.with_player(actor, player.evolve(recruited=player.recruited + (prompt.card,)))
        log.public(f"{name} recruits a card")
        log.private(actor, f"You recruited {prompt.card}")
        return effects.pop_prompt(state)

    if prompt.remaining > 1:
        return state.with_prompts((replace(prompt, remaining=prompt.remaining - 1),) + state.prompts[1:])
    state = effects.recall(state, actor, prompt.card)
    log.public(f"{name} recommissions {prompt.card}")
    return effects.pop_prompt(state)


def _execute_end_muster(state: GameState, actor: int, registry: CardRegistry, log: MessageLog) -> GameState:
    log.public(f"{state.players[actor].name} ends their muster")
    if actor != state.first_player:
        return state.with_current_player(state.first_player)

    first = state.first_player
    prompts = _setup_prompts(state, first) + _setup_prompts(state, 1 - first)
    return state.evolve(phase=GamePhase.PLAY, current_player=first, turn_number=0, prompts=prompts)


def _setup_prompts(state: GameState, player: int) -> tuple[Prompt, ...]:
    prompts = (Prompt(PromptKind.PICK_SUCCESSOR, player), Prompt(PromptKind.PICK_DUNGEON, player))
    if state.players[player].king_facet == KingFacet.MASTER_TACTICIAN:
        prompts += (Prompt(PromptKind.PICK_SQUIRE, player),)
    return prompts


def _execute_setup_pick(
    state: GameState,
    actor: int,
    action: ChooseSuccessor | ChooseDungeon | ChooseSquire,
    registry: CardRegistry,
    log: MessageLog,
) -> GameState:
    player = state.players[actor]
    hand = without(player.hand, action.card)
    match action:
        case ChooseSuccessor():
            player = player.evolve(hand=hand, successor=action.card)
            slot = "successor"
        case ChooseDungeon():
            player = player.evolve(hand=hand, dungeon=action.card)
            slot = "dungeon"
        case _:
            player = player.evolve(hand=hand, squire=action.card)
            slot = "squire"

    if slot == "successor" and player.king_facet == KingFacet.CHARISMATIC_LEADER:
        log.public(f"{player.name} names {action.card} as successor")
    else:
        log.public(f"{player.name} sets aside a {slot}")
        log.private(actor, f"Your {slot} is {action.card}")

    state = effects.pop_prompt(state.with_player(actor, player))
    if state.prompts:
        return state
    return _begin_turn(state, state.current_player, registry, log)


# --- Play ------------------------------------------------------------------


def _execute_play_card(
    state: GameState, actor: int, action: PlayCard, registry: CardRegistry, log: MessageLog
) -> GameState:
    any_value = state.prompt is not None and state.prompt.kind == PromptKind.PLAY_ANY_VALUE
    if any_value:
        state = effects.pop_prompt(state)

    ctx = EffectContext(registry=registry, log=log, card=action.card)
    state, _ = effects.play_to_court(state, actor, action.card, action.source, ctx)
    state = state.evolve(turn_number=state.turn_number + 1)
    log.public(f"{state.players[actor].name} plays {action.card}")

    if action.ability is None:
        return _after_effect(state, registry, log)

    module = registry.get(action.card.name)
    if module.ability.may and not any_value and not module.has(Keyword.IMMUNE_TO_KINGS_HAND):
        pending = PendingTrigger(ReactionTrigger.ABILITY, actor, card=action.card, choice=action.ability)
        waiting = reactions.open_window(state, pending, registry)
        if waiting is not None:
            return waiting

    state = _resolve_ability(state, actor, action.card, action.ability, registry, log)
    return _after_effect(state, registry, log)


def _resolve_ability(
    state: GameState, actor: int, card: Card, choice: AbilityChoice, registry: CardRegistry, log: MessageLog
) -> GameState:
    ability = registry.get(card.name).ability
    ctx = EffectContext(registry=registry, log=log, card=card)
    log.public(f"{card}: {ability.name} ({choice})")
    return ability.execute(state, actor, 1 - actor, choice, ctx)


def _execute_flip_king(state: GameState, actor: int, registry: CardRegistry, log: MessageLog) -> GameState:
    log.public(f"{state.players[actor].name} flips their king")
    waiting = reactions.open_window(state, PendingTrigger(ReactionTrigger.KING_FLIP, actor), registry)
    if waiting is not None:
        return waiting
    return _resolve_flip(state, actor, registry, log)


def _resolve_flip(state: GameState, actor: int, registry: CardRegistry, log: MessageLog) -> GameState:
    player = state.players[actor]
    taken = tuple(card for card in (player.successor, player.squire) if card is not None)
    player = player.evolve(hand=player.hand + taken, successor=None, squire=None, king_flipped=True)
    state = state.with_player(actor, player)
    log.public(f"{player.name} takes their successor")

    if state.court:
        state = effects.replace_entry(state, len(state.court) - 1, state.court[-1].with_disgraced())
        log.public(f"{state.court[-1].card} on the throne is disgraced")

    ctx = EffectContext(registry=registry, log=log, card=None)
    for name in dict.fromkeys(entry.card.name for entry in state.court):
        state = registry.get(name).hooks.on_king_flip(state, actor, ctx)
    return _end_turn(state, registry, log)


def _execute_react(state: GameState, action: React, registry: CardRegistry, log: MessageLog) -> GameState:
    pending = state.reaction.pending
    state = reactions.react(state, action.option, registry, log)
    if state.phase != GamePhase.PLAY:
        return state

    if pending.trigger == ReactionTrigger.KING_FLIP:
        return _end_turn(state, registry, log)

    # The prevented player must play again
    state = _settle_prompts(state, registry)
    if not state.prompts and not has_any_play(state, pending.actor, registry):
        log.public(f"{state.players[pending.actor].name} cannot play and loses the round")
        return end_round(state, 1 - pending.actor, log)
    return state


def _execute_decline(state: GameState, registry: CardRegistry, log: MessageLog) -> GameState:
    log.public(f"{state.players[state.reaction.responder].name} does not react")
    state, pending = reactions.decline(state)
    if pending is None:
        return state
    if pending.trigger == ReactionTrigger.KING_FLIP:
        return _resolve_flip(state, pending.actor, registry, log)
    state = _resolve_ability(state, pending.actor, pending.card, pending.choice, registry, log)
    return _after_effect(state, registry, log)


# --- Ability prompts -------------------------------------------------------


def _consume_prompt(state: GameState) -> GameState:
    prompt = state.prompt
    if prompt.remaining > 1:
        return state.with_prompts((replace(prompt, remaining=prompt.remaining - 1),) + state.prompts[1:])
    return effects.pop_prompt(state)


def _execute_prompt_answer(
    state: GameState, actor: int, action: Action, registry: CardRegistry, log: MessageLog
) -> GameState:
    prompt = state.prompt
    name = state.players[actor].name
    ctx = EffectContext(registry=registry, log=log, card=None)

    match action:
        case Skip():
            log.public(f"{name} skips")
            return effects.pop_prompt(state)

        case MoveToAntechamber():
            log.public(f"{name} moves {action.card} to the antechamber")
            return effects.pop_prompt(effects.move_to_antechamber(state, actor, action.card))

        case Disgrace():
            state = effects.disgrace(state, effects.court_index(state, action.card), ctx)
            return _consume_prompt(state)

        case SwapCard():
            receiver = 1 - actor
            log.public(f"{name} gives a card back")
            log.private(receiver, f"You received {action.card}")
            state = effects.transfer_hand_card(state, actor, receiver, action.card)
            return effects.pop_prompt(state)

        case CardInHandGuess():
            return _execute_guess(state, actor, action, prompt, log)

        case CondemnOpponentCard():
            target = 1 - actor
            card = state.players[target].hand[action.index]
            return effects.pop_prompt(effects.condemn_from_hand(state, target, card, ctx))

        case Condemn():
            state = effects.pop_prompt(effects.condemn_from_hand(state, actor, action.card, ctx))
            if prompt.kind == PromptKind.SACRIFICE_FOR_RALLY:
                state = effects.queue_prompts(state, Prompt(PromptKind.RALLY, actor, source=prompt.source))
            return state

        case Recall():
            log.public(f"{name} recalls {action.card}")
            return effects.pop_prompt(effects.recall(state, actor, action.card))

        case Rally():
            return _execute_rally(state, actor, action, prompt, log)

        case ReturnToArmy():
            log.public(f"{name} returns a rallied card to the army")
            log.private(actor, f"You returned {action.card} to the army")
            return effects.pop_prompt(effects.return_to_army(state, actor, action.card))

        case TakeDungeon():
            target = 1 - actor
            card = state.players[target].dungeon
            state = effects.update_player(state, target, dungeon=None)
            log.public(f"{name} takes {card} from the dungeon")
            return effects.pop_prompt(effects.take_into_hand(state, actor, card))

    raise ValidationError(f"Unknown action type: {type(action).__name__}")


def _execute_guess(
    state: GameState, guesser: int, action: CardInHandGuess, prompt: Prompt, log: MessageLog
) -> GameState:
    namer = 1 - guesser
    state = effects.pop_prompt(state)
    truth = effects.hand_has(state, namer, prompt.named)
    names = state.players[guesser].name, state.players[namer].name
    if action.present == truth:
        log.public(f"{names[0]} guesses right")
        return state

    log.public(f"{names[0]} guesses wrong; {names[1]} looks at their hand")
    hand = state.players[guesser].hand
    log.private(namer, f"{names[0]}'s hand: " + ", ".join(f"#{i + 1} {card}" for i, card in enumerate(hand)))
    return effects.queue_prompts(state, Prompt(PromptKind.CONDEMN_OPPONENT_CARD, namer, source=prompt.source))


def _execute_rally(state: GameState, actor: int, action: Rally, prompt: Prompt, log: MessageLog) -> GameState:
    state = effects.rally(state, actor, action.card)
    name = state.players[actor].name
    if prompt.source != CardName.FLAG_BEARER:
        log.public(f"{name} rallies a card")
        log.private(actor, f"You rallied {action.card}")
        return effects.pop_prompt(state)

    # Flag Bearer reveals what it rallies and offers those cards back
    log.public(f"{name} rallies {action.card}")
    state = _consume_prompt(state)
    prompts = tuple(
        replace(p, cards=p.cards + (action.card,))
        if p.kind == PromptKind.RETURN_TO_ARMY and p.player == actor and p.source == prompt.source
        else p
        for p in state.prompts
    )
    return state.with_prompts(prompts)


# --- Turn flow -------------------------------------------------------------


def _settle_prompts(state: GameState, registry: CardRegistry) -> GameState:
    """Drop leading prompts nobody can answer."""
    while state.prompt is not None and not prompt_answers(state, state.prompt, registry):
        state = effects.pop_prompt(state)
    return state


def _after_effect(state: GameState, registry: CardRegistry, log: MessageLog) -> GameState:
    """End the turn once nothing is left pending."""
    if state.phase != GamePhase.PLAY:
        return state
    state = _settle_prompts(state, registry)
    if state.reaction is not None or state.prompts:
        return state
    return _end_turn(state, registry, log)


def _end_turn(state: GameState, registry: CardRegistry, log: MessageLog) -> GameState:
    ending = state.current_player
    player = state.players[ending]
    if player.conspiracy_turns > 0:
        state = effects.update_player(state, ending, conspiracy_turns=player.conspiracy_turns - 1)
    following = 1 - ending
    return _begin_turn(state.with_current_player(following), following, registry, log)


def _begin_turn(state: GameState, player: int, registry: CardRegistry, log: MessageLog) -> GameState:
    if state.exile_owner == player:
        state = state.evolve(exile_owner=None)
        log.public("The exile ends")
    if not has_any_play(state, player, registry):
        log.public(f"{state.players[player].name} cannot play and loses the round")
        return end_round(state, 1 - player, log)
    return state


# --- Round end -------------------------------------------------------------


def _execute_start_new_round(state: GameState, log: MessageLog) -> GameState:
    """Return every card to where it belongs, then deal the next round."""
    loose: list[Card] = []
    for player in state.players:
        loose.extend(player.hand)
        loose.extend(player.antechamber)
        loose.extend(player.condemned)
        loose.extend(card for card in (player.successor, player.squire, player.dungeon) if card is not None)
    loose.extend(entry.card for entry in state.court)
    loose.extend(state.condemned)
    # Warden can leave an army card as the accused
    if state.accused is not None:
        loose.append(state.accused)

    armies = [list(p.army) for p in state.players]
    exhausted = [list(p.exhausted) for p in state.players]
    for card in loose:
        owner = card.army_owner
        if owner is None:
            continue
        if card in state.players[owner].recruited:
            exhausted[owner].append(card)
        else:
            armies[owner].append(card)

    players = tuple(
        p.evolve(
            hand=(),
            antechamber=(),
            army=tuple(armies[idx]),
            exhausted=tuple(exhausted[idx]),
            successor=None,
            squire=None,
            dungeon=None,
            condemned=(),
            king_flipped=False,
            recruited=(),
            conspiracy_turns=0,
        )
        for idx, p in enumerate(state.players)
    )
    winner = state.round_winner
    state = state.evolve(
        players=(players[0], players[1]),
        round=state.round + 1,
        court=(),
        accused=None,
        deck=(),
        condemned=(),
        prompts=(),
        reaction=None,
        muted_values=frozenset(),
        exile_owner=None,
        first_player=None,
        round_winner=None,
        turn_number=0,
    )
    state = _deal_round(state, log)
    return state.evolve(
        phase=GamePhase.MUSTERING,
        prompts=(Prompt(PromptKind.CHOOSE_FIRST_PLAYER, winner),),
    )
