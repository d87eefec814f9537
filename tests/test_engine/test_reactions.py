"""Tests for the reaction protocol."""

from dataclasses import replace

import pytest

from kings_engine.abilities.base import Reaction
from kings_engine.abilities.registry import create_default_registry
from kings_engine.action_generator import generate_legal_actions
from kings_engine.actions import AbilityChoice, Decline, FlipKing, PlayCard, React
from kings_engine.cards import Card, CardName
from kings_engine.config import FULL_COURT
from kings_engine.errors import IllegalMoveError
from kings_engine.executor import apply_action
from kings_engine.reactions import reaction_options, visibility_set
from kings_engine.state import (
    CourtEntry,
    GamePhase,
    GameState,
    PlayerState,
    ReactionOption,
    ReactionTrigger,
)
from kings_engine.views import build_board, build_status

C = CardName
FULL_COURT_NO_CHECKS = replace(FULL_COURT, check_invariants=False)


@pytest.fixture
def registry():
    return create_default_registry()


def _state(hand0=(), hand1=(), court=(), successor=None, signatures1=()) -> GameState:
    return GameState(
        players=(
            PlayerState(name="A", hand=tuple(hand0), successor=successor),
            PlayerState(name="B", hand=tuple(hand1), signature_cards=tuple(signatures1)),
        ),
        config=FULL_COURT_NO_CHECKS,
        phase=GamePhase.PLAY,
        current_player=0,
        first_player=0,
        court=tuple(court),
    )


def _soldier_play(soldier=Card(C.SOLDIER)) -> PlayCard:
    return PlayCard(card=soldier, ability=AbilityChoice(named=C.QUEEN))


class TestReactionOptions:
    def test_unseen_kings_hand_is_offered(self, registry):
        state = _state(court=[CourtEntry(Card(C.SOLDIER), owner=0)])
        options = reaction_options(state, 1, ReactionTrigger.ABILITY, registry)
        assert options == (ReactionOption(C.KINGS_HAND),)

    def test_visible_kings_hand_is_not_offered(self, registry):
        state = _state(court=[CourtEntry(Card(C.KINGS_HAND), owner=1), CourtEntry(Card(C.SOLDIER), owner=0)])
        assert reaction_options(state, 1, ReactionTrigger.ABILITY, registry) == ()

    def test_king_flip_offers_assassin(self, registry):
        state = _state()
        options = reaction_options(state, 1, ReactionTrigger.KING_FLIP, registry)
        assert options == (ReactionOption(C.ASSASSIN),)

    def test_stranger_copies_reaction_in_court(self, registry):
        state = _state(
            court=[CourtEntry(Card(C.KINGS_HAND), owner=1), CourtEntry(Card(C.FOOL), owner=0)],
            signatures1=[C.STRANGER],
        )
        options = reaction_options(state, 1, ReactionTrigger.ABILITY, registry)
        assert options == (ReactionOption(C.STRANGER, copies=C.KINGS_HAND),)

    def test_visibility_ignores_hidden_zones(self, registry):
        state = _state(hand1=[Card(C.KINGS_HAND)], court=[CourtEntry(Card(C.ASSASSIN), owner=0)])
        seen = visibility_set(state, 1)
        assert seen[C.KINGS_HAND] == 0
        assert seen[C.ASSASSIN] == 1


class TestReactionWindow:
    def test_may_ability_opens_window(self, registry):
        soldier = Card(C.SOLDIER)
        state = _state(hand0=[soldier], hand1=[Card(C.QUEEN)])

        state, _ = apply_action(state, 0, _soldier_play(soldier), registry)

        assert state.reaction is not None
        assert state.acting_player == 1
        assert generate_legal_actions(state, 1, registry) == [React(ReactionOption(C.KINGS_HAND)), Decline()]
        assert generate_legal_actions(state, 0, registry) == []

    def test_window_looks_the_same_with_or_without_the_card(self, registry):
        soldier = Card(C.SOLDIER)
        holding = _state(hand0=[soldier], hand1=[Card(C.KINGS_HAND)])
        bluffing = _state(hand0=[soldier], hand1=[Card(C.SENTRY)])

        holding, _ = apply_action(holding, 0, _soldier_play(soldier), registry)
        bluffing, _ = apply_action(bluffing, 0, _soldier_play(soldier), registry)

        assert generate_legal_actions(holding, 1, registry) == generate_legal_actions(bluffing, 1, registry)
        assert build_status(holding, 1) == build_status(bluffing, 1)
        assert build_board(holding, 0, registry) == build_board(bluffing, 0, registry)

    def test_decline_resolves_ability(self, registry):
        soldier = Card(C.SOLDIER)
        state = _state(
            hand0=[soldier],
            hand1=[Card(C.QUEEN)],
            court=[CourtEntry(Card(C.ELDER), owner=1)],
        )
        state, _ = apply_action(state, 0, _soldier_play(soldier), registry)

        state, _ = apply_action(state, 1, Decline(), registry)

        assert state.reaction is None
        assert state.throne.bonus == 2

    def test_mandatory_ability_opens_no_window(self, registry):
        queen = Card(C.QUEEN)
        state = _state(hand0=[queen], hand1=[Card(C.FOOL)], court=[CourtEntry(Card(C.SOLDIER), owner=1)])

        state, _ = apply_action(state, 0, PlayCard(card=queen, ability=AbilityChoice()), registry)

        assert state.reaction is None
        assert state.court[0].disgraced


class TestFalseClaims:
    def test_kings_hand_in_court_cannot_be_claimed(self, registry):
        fool, kings_hand = Card(C.FOOL), Card(C.KINGS_HAND)
        state = _state(
            hand0=[fool],
            hand1=[Card(C.QUEEN)],
            court=[CourtEntry(kings_hand, owner=1)],
        )
        state, _ = apply_action(state, 0, PlayCard(card=fool, ability=AbilityChoice(target=kings_hand)), registry)

        with pytest.raises(IllegalMoveError):
            apply_action(state, 1, React(ReactionOption(C.KINGS_HAND)), registry)

    def test_claim_without_card_leaves_ability_pending(self, registry):
        fool, kings_hand = Card(C.FOOL), Card(C.KINGS_HAND)
        state = _state(
            hand0=[fool],
            hand1=[Card(C.QUEEN)],
            court=[CourtEntry(kings_hand, owner=1)],
            signatures1=[C.STRANGER],
        )
        state, _ = apply_action(state, 0, PlayCard(card=fool, ability=AbilityChoice(target=kings_hand)), registry)
        option = ReactionOption(C.STRANGER, copies=C.KINGS_HAND)
        assert generate_legal_actions(state, 1, registry) == [React(option), Decline()]

        with pytest.raises(IllegalMoveError) as exc:
            apply_action(state, 1, React(option), registry)

        assert exc.value.reason == "false_reaction_claim"
        assert state.reaction is not None
        assert state.reaction.pending.card == fool

        state, _ = apply_action(state, 1, Decline(), registry)
        assert kings_hand in state.players[0].hand
        assert state.current_player == 1


class TestKingsHand:
    def test_prevents_ability_and_actor_plays_again(self, registry):
        soldier, kings_hand = Card(C.SOLDIER), Card(C.KINGS_HAND)
        state = _state(
            hand0=[soldier, Card(C.QUEEN)],
            hand1=[kings_hand, Card(C.FOOL)],
            court=[CourtEntry(Card(C.ELDER), owner=1)],
        )
        state, _ = apply_action(state, 0, _soldier_play(soldier), registry)

        state, _ = apply_action(state, 1, React(ReactionOption(C.KINGS_HAND)), registry)

        assert state.reaction is None
        assert kings_hand in state.condemned
        assert soldier in state.condemned
        assert [entry.card for entry in state.court] == [Card(C.ELDER)]
        assert state.players[1].hand == (Card(C.FOOL),)
        assert state.current_player == 0
        assert state.acting_player == 0

    def test_actor_without_play_loses(self, registry):
        soldier, kings_hand = Card(C.SOLDIER), Card(C.KINGS_HAND)
        state = _state(
            hand0=[soldier],
            hand1=[kings_hand],
            court=[CourtEntry(Card(C.ELDER), owner=1)],
        )
        state, _ = apply_action(state, 0, _soldier_play(soldier), registry)

        state, _ = apply_action(state, 1, React(ReactionOption(C.KINGS_HAND)), registry)

        assert state.phase == GamePhase.ROUND_END
        assert state.round_winner == 1
        assert state.players[1].points == 2


class TestAssassin:
    def test_assassin_wins_the_round(self, registry):
        assassin = Card(C.ASSASSIN)
        state = _state(
            hand0=[Card(C.ELDER)],
            hand1=[assassin],
            court=[CourtEntry(Card(C.SOLDIER), owner=1)],
            successor=Card(C.PRINCESS),
        )
        state, _ = apply_action(state, 0, FlipKing(), registry)
        assert state.reaction.current_option == ReactionOption(C.ASSASSIN)

        state, _ = apply_action(state, 1, React(ReactionOption(C.ASSASSIN)), registry)

        assert state.phase == GamePhase.ROUND_END
        assert state.round_winner == 1
        assert state.players[1].points == 3
        assert assassin in state.condemned
        assert not state.players[0].king_flipped

    def test_declined_flip_resolves(self, registry):
        princess = Card(C.PRINCESS)
        state = _state(
            hand1=[Card(C.FOOL)],
            court=[CourtEntry(Card(C.SOLDIER), owner=1)],
            successor=princess,
        )
        state, _ = apply_action(state, 0, FlipKing(), registry)

        state, _ = apply_action(state, 1, Decline(), registry)

        assert state.players[0].king_flipped
        assert state.players[0].hand == (princess,)
        assert state.throne.disgraced
        assert state.current_player == 1


class TestStranger:
    def test_stranger_resolves_as_copied_kings_hand(self, registry):
        soldier, stranger = Card(C.SOLDIER), Card(C.STRANGER, 200)
        state = _state(
            hand0=[soldier, Card(C.QUEEN)],
            hand1=[stranger, Card(C.FOOL)],
            court=[CourtEntry(Card(C.KINGS_HAND), owner=1), CourtEntry(Card(C.ELDER), owner=1)],
            signatures1=[C.STRANGER],
        )
        state, _ = apply_action(state, 0, _soldier_play(soldier), registry)
        option = ReactionOption(C.STRANGER, copies=C.KINGS_HAND)
        assert React(option) in generate_legal_actions(state, 1, registry)

        state, _ = apply_action(state, 1, React(option), registry)

        assert state.reaction is None
        assert stranger in state.condemned
        assert soldier in state.condemned
        assert [entry.card for entry in state.court] == [Card(C.KINGS_HAND), Card(C.ELDER)]
        assert state.players[1].hand == (Card(C.FOOL),)
        assert state.acting_player == 0


class TestReactionBase:
    def test_resolve_is_required(self):
        class Unfinished(Reaction):
            trigger = ReactionTrigger.ABILITY

        with pytest.raises(TypeError):
            Unfinished()

    def test_stranger_needs_a_copied_reaction(self, registry):
        with pytest.raises(ValueError):
            registry.get(C.STRANGER).reaction.resolve(_state(), 1, Card(C.STRANGER, 200), None, None)
