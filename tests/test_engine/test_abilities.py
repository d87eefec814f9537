"""Tests for card abilities."""

import pytest

from kings_engine.abilities.base import Keyword
from kings_engine.abilities.registry import CardRegistry, create_default_registry
from kings_engine.action_generator import generate_legal_actions
from kings_engine.actions import (
    AbilityChoice,
    CardInHandGuess,
    Condemn,
    CondemnOpponentCard,
    MoveToAntechamber,
    PlayCard,
    Skip,
    SwapCard,
)
from kings_engine.cards import Card, CardName
from kings_engine.config import GameConfig
from kings_engine.executor import apply_action
from kings_engine.rules import immortal_active, is_muted, is_royalty
from kings_engine.state import (
    CardSource,
    CourtEntry,
    GamePhase,
    GameState,
    PlayerState,
    PromptKind,
)

C = CardName
NO_CHECKS = GameConfig(check_invariants=False)


@pytest.fixture
def registry():
    return create_default_registry()


def _state(hand0=(), hand1=(), court=(), **changes) -> GameState:
    return GameState(
        players=(
            PlayerState(name="A", hand=tuple(hand0)),
            PlayerState(name="B", hand=tuple(hand1)),
        ),
        config=NO_CHECKS,
        phase=GamePhase.PLAY,
        current_player=0,
        first_player=0,
        court=tuple(court),
        **changes,
    )


class TestRegistry:
    def test_every_card_registered(self, registry):
        assert len(registry) == len(CardName)
        assert [m.name for m in registry] == sorted(CardName)

    def test_reaction_modules_in_registry_order(self, registry):
        names = [m.name for m in registry.reaction_modules()]
        assert names == [C.ASSASSIN, C.STRANGER, C.KINGS_HAND]

    def test_may_flag(self, registry):
        assert registry.get(C.SOLDIER).ability.may
        assert not registry.get(C.QUEEN).ability.may
        assert not registry.get(C.OATHBOUND).ability.may

    def test_keywords(self, registry):
        assert registry.has_keyword(C.PRINCESS, Keyword.ROYALTY)
        assert registry.has_keyword(C.CONSPIRACIST, Keyword.STEADFAST)
        assert registry.has_keyword(C.IMMORTAL, Keyword.STEADFAST)
        assert registry.has_keyword(C.OATHBOUND, Keyword.IMMUNE_TO_KINGS_HAND)

    def test_duplicate_registration_rejected(self, registry):
        module = registry.get(C.FOOL)
        with pytest.raises(ValueError):
            CardRegistry([module, module])

    def test_unknown_card(self):
        with pytest.raises(KeyError):
            CardRegistry().get(C.FOOL)


class TestBaseAbilities:
    def test_fool_takes_court_card(self, registry):
        fool, soldier = Card(C.FOOL), Card(C.SOLDIER)
        state = _state(hand0=[fool], hand1=[Card(C.ELDER)], court=[CourtEntry(soldier, owner=1)])

        action = PlayCard(card=fool, ability=AbilityChoice(target=soldier))
        state, _ = apply_action(state, 0, action, registry)

        assert state.players[0].hand == (soldier,)
        assert [entry.card for entry in state.court] == [fool]
        assert state.current_player == 1

    def test_inquisitor_summons_to_antechamber(self, registry):
        inquisitor, queen = Card(C.INQUISITOR), Card(C.QUEEN)
        state = _state(hand0=[inquisitor], hand1=[queen, Card(C.ELDER)])

        action = PlayCard(card=inquisitor, ability=AbilityChoice(named=C.QUEEN))
        state, _ = apply_action(state, 0, action, registry)

        assert state.players[1].antechamber == (queen,)
        assert state.players[1].hand == (Card(C.ELDER),)
        actions = generate_legal_actions(state, 1, registry)
        assert actions
        assert all(a.card == queen and a.source == CardSource.ANTECHAMBER for a in actions)

    def test_queen_disgraces_the_court(self, registry):
        queen = Card(C.QUEEN)
        state = _state(
            hand0=[queen],
            hand1=[Card(C.FOOL)],
            court=[CourtEntry(Card(C.ELDER), owner=1), CourtEntry(Card(C.SOLDIER), owner=1)],
        )

        state, _ = apply_action(state, 0, PlayCard(card=queen, ability=AbilityChoice()), registry)

        assert [entry.disgraced for entry in state.court] == [True, True, False]

    def test_mystic_mutes_a_value(self, registry):
        mystic = Card(C.MYSTIC)
        state = _state(
            hand0=[mystic],
            hand1=[Card(C.QUEEN)],
            court=[CourtEntry(Card(C.SOLDIER), owner=1, disgraced=True)],
        )

        state, _ = apply_action(state, 0, PlayCard(card=mystic, ability=AbilityChoice(number=5)), registry)

        assert state.muted_values == frozenset({5})
        assert state.throne.disgraced

    def test_mystic_cannot_mute_immortal(self, registry):
        mystic, immortal = Card(C.MYSTIC), Card(C.IMMORTAL)
        state = _state(
            hand0=[mystic],
            hand1=[Card(C.QUEEN)],
            court=[CourtEntry(immortal, owner=1), CourtEntry(Card(C.SOLDIER), owner=1, disgraced=True)],
        )

        state, _ = apply_action(state, 0, PlayCard(card=mystic, ability=AbilityChoice(number=6)), registry)

        assert state.muted_values == frozenset({6})
        assert not is_muted(state, registry, immortal)
        assert immortal_active(state, registry)
        assert is_royalty(state, registry, C.WARLORD)

    def test_queen_skips_immortal(self, registry):
        queen, immortal = Card(C.QUEEN), Card(C.IMMORTAL)
        state = _state(
            hand0=[queen],
            hand1=[Card(C.FOOL)],
            court=[CourtEntry(immortal, owner=1), CourtEntry(Card(C.SOLDIER), owner=1)],
        )

        state, _ = apply_action(state, 0, PlayCard(card=queen, ability=AbilityChoice()), registry)

        assert not state.court[0].disgraced
        assert state.court[1].disgraced
        assert immortal_active(state, registry)

    def test_judge_hit_moves_own_card(self, registry):
        judge, queen = Card(C.JUDGE), Card(C.QUEEN)
        state = _state(hand0=[judge, queen, Card(C.FOOL)], hand1=[Card(C.ELDER), Card(C.SOLDIER)])

        state, _ = apply_action(state, 0, PlayCard(card=judge, ability=AbilityChoice(named=C.ELDER)), registry)
        assert generate_legal_actions(state, 0, registry) == [MoveToAntechamber(card=queen), Skip()]

        state, _ = apply_action(state, 0, MoveToAntechamber(card=queen), registry)

        assert state.players[0].antechamber == (queen,)
        assert state.current_player == 1

    def test_princess_exchange(self, registry):
        princess, fool, soldier = Card(C.PRINCESS), Card(C.FOOL), Card(C.SOLDIER)
        state = _state(hand0=[princess, fool], hand1=[soldier, Card(C.ELDER)])

        action = PlayCard(card=princess, ability=AbilityChoice(hand_card=fool))
        state, messages = apply_action(state, 0, action, registry)

        assert state.prompt.kind == PromptKind.SWAP_GIVE
        assert state.acting_player == 1
        assert SwapCard(card=fool) not in generate_legal_actions(state, 1, registry)
        assert any(m.visible_to == 1 for m in messages)

        state, _ = apply_action(state, 1, SwapCard(card=soldier), registry)

        assert state.players[0].hand == (soldier,)
        assert set(state.players[1].hand) == {fool, Card(C.ELDER)}
        assert state.current_player == 1

    def test_warden_exchanges_with_accused(self, registry):
        warden, fool, accused = Card(C.WARDEN), Card(C.FOOL), Card(C.QUEEN)
        court = [
            CourtEntry(Card(C.ELDER, 0), owner=1),
            CourtEntry(Card(C.ELDER, 1), owner=0),
            CourtEntry(Card(C.INQUISITOR), owner=1),
            CourtEntry(Card(C.SOLDIER), owner=0),
        ]
        state = _state(hand0=[warden, fool], hand1=[Card(C.SENTRY)], court=court, accused=accused)

        state, _ = apply_action(state, 0, PlayCard(card=warden, ability=AbilityChoice(hand_card=fool)), registry)

        assert state.accused == fool
        assert state.players[0].hand == (accused,)

    def test_oathbound_forces_another_play(self, registry):
        oathbound, elder, queen = Card(C.OATHBOUND), Card(C.ELDER), Card(C.QUEEN)
        state = _state(hand0=[oathbound, elder], hand1=[Card(C.SOLDIER)], court=[CourtEntry(queen, owner=1)])

        actions = generate_legal_actions(state, 0, registry)
        assert PlayCard(card=oathbound, ability=AbilityChoice()) in actions
        assert PlayCard(card=oathbound) not in actions

        state, _ = apply_action(state, 0, PlayCard(card=oathbound, ability=AbilityChoice()), registry)

        assert state.court[0].disgraced
        assert state.prompt.kind == PromptKind.PLAY_ANY_VALUE
        assert state.reaction is None

        state, _ = apply_action(state, 0, PlayCard(card=elder), registry)

        assert [entry.card for entry in state.court] == [queen, oathbound, elder]
        assert state.current_player == 1

    def test_executioner_prompts_each_player(self, registry):
        executioner = Card(C.EXECUTIONER)
        soldier0, soldier1 = Card(C.SOLDIER, 0), Card(C.SOLDIER, 1)
        state = _state(
            hand0=[executioner, soldier0],
            hand1=[soldier1, Card(C.QUEEN)],
            court=[CourtEntry(Card(C.SENTRY), owner=1), CourtEntry(Card(C.ELDER), owner=1)],
        )

        action = PlayCard(card=executioner, ability=AbilityChoice(number=5))
        state, _ = apply_action(state, 0, action, registry)
        assert [(p.kind, p.player) for p in state.prompts] == [
            (PromptKind.CONDEMN_BY_VALUE, 0),
            (PromptKind.CONDEMN_BY_VALUE, 1),
        ]

        state, _ = apply_action(state, 0, Condemn(card=soldier0), registry)
        state, _ = apply_action(state, 1, Condemn(card=soldier1), registry)

        assert state.condemned == (soldier0, soldier1)
        assert state.players[1].hand == (Card(C.QUEEN),)
        assert state.current_player == 1


class TestSignatureAbilities:
    def test_nakturn_wrong_guess_condemns(self, registry):
        nakturn, queen, soldier = Card(C.NAKTURN, 100), Card(C.QUEEN), Card(C.SOLDIER)
        state = _state(
            hand0=[nakturn, queen],
            hand1=[soldier, Card(C.ELDER)],
            court=[CourtEntry(Card(C.FOOL), owner=1, disgraced=True)],
        )
        state = state.with_player(0, state.players[0].evolve(signature_cards=(C.NAKTURN,)))

        state, _ = apply_action(state, 0, PlayCard(card=nakturn, ability=AbilityChoice(named=C.QUEEN)), registry)
        assert state.prompt.kind == PromptKind.GUESS_PRESENCE
        assert state.acting_player == 1

        state, messages = apply_action(state, 1, CardInHandGuess(present=False), registry)
        assert state.prompt.kind == PromptKind.CONDEMN_OPPONENT_CARD
        assert any(m.visible_to == 0 and "Soldier" in m.text for m in messages)

        state, _ = apply_action(state, 0, CondemnOpponentCard(index=0), registry)

        assert soldier in state.condemned
        assert state.players[1].hand == (Card(C.ELDER),)
        assert state.current_player == 1

    def test_nakturn_right_guess(self, registry):
        nakturn = Card(C.NAKTURN, 100)
        state = _state(
            hand0=[nakturn, Card(C.QUEEN)],
            hand1=[Card(C.SOLDIER)],
            court=[CourtEntry(Card(C.FOOL), owner=1, disgraced=True)],
        )

        state, _ = apply_action(state, 0, PlayCard(card=nakturn, ability=AbilityChoice(named=C.QUEEN)), registry)
        state, _ = apply_action(state, 1, CardInHandGuess(present=True), registry)

        assert state.prompts == ()
        assert state.players[1].hand == (Card(C.SOLDIER),)

    def test_lockshift_opens_dungeons(self, registry):
        lockshift = Card(C.LOCKSHIFT, 100)
        state = _state(hand0=[lockshift], hand1=[Card(C.QUEEN)])
        state = state.with_player(0, state.players[0].evolve(dungeon=Card(C.MYSTIC)))
        state = state.with_player(1, state.players[1].evolve(dungeon=Card(C.WARDEN)))

        state, _ = apply_action(state, 0, PlayCard(card=lockshift, ability=AbilityChoice()), registry)

        assert state.players[0].hand == (Card(C.MYSTIC),)
        assert Card(C.WARDEN) in state.players[1].hand
        assert state.players[0].dungeon is None
        assert state.players[1].dungeon is None

    def test_aegis_is_steadfast_while_king_unflipped(self, registry):
        aegis = Card(C.AEGIS, 100)
        state = _state(hand0=[aegis], hand1=[Card(C.QUEEN)])

        state, _ = apply_action(state, 0, PlayCard(card=aegis), registry)

        assert state.throne.steadfast

    def test_conspiracy_lasts_two_own_turns(self, registry):
        conspiracist = Card(C.CONSPIRACIST, 100)
        state = _state(hand0=[conspiracist, Card(C.FOOL)], hand1=[Card(C.QUEEN)])

        state, _ = apply_action(state, 0, PlayCard(card=conspiracist, ability=AbilityChoice()), registry)

        assert state.players[0].conspiracy_turns == 1
        assert state.current_player == 1

    def test_exile_mutes_until_next_turn(self, registry):
        exile, queen = Card(C.EXILE, 100), Card(C.QUEEN)
        state = _state(hand0=[exile, Card(C.FOOL)], hand1=[queen, Card(C.ELDER)])

        state, _ = apply_action(state, 0, PlayCard(card=exile, ability=AbilityChoice()), registry)
        assert state.exile_owner == 0
        assert generate_legal_actions(state, 1, registry) == [PlayCard(card=queen)]

        state, _ = apply_action(state, 1, PlayCard(card=queen), registry)

        assert state.exile_owner is None
        assert state.current_player == 0
