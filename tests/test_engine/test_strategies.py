"""Tests for the bot strategies."""

from dataclasses import replace

import pytest

from kings_engine.abilities.registry import create_default_registry
from kings_engine.action_generator import generate_legal_actions
from kings_engine.actions import AbilityChoice, Decline, PlayCard, React
from kings_engine.cards import Card, CardName
from kings_engine.config import FULL_COURT
from kings_engine.executor import apply_action
from kings_engine.game import Game
from kings_engine.state import GamePhase, GameState, PlayerState
from kings_engine.views import build_board, build_status
from strategies.heuristic import HeuristicStrategy
from strategies.random_strategy import RandomStrategy

C = CardName


@pytest.fixture
def registry():
    return create_default_registry()


def _reaction_window(hand1, registry) -> GameState:
    soldier = Card(C.SOLDIER)
    state = GameState(
        players=(
            PlayerState(name="A", hand=(soldier,)),
            PlayerState(name="B", hand=tuple(hand1)),
        ),
        config=replace(FULL_COURT, check_invariants=False),
        phase=GamePhase.PLAY,
        current_player=0,
        first_player=0,
    )
    state, _ = apply_action(state, 0, PlayCard(card=soldier, ability=AbilityChoice(named=C.QUEEN)), registry)
    return state


class TestClaimableActions:
    def test_unheld_reaction_filtered(self, registry):
        state = _reaction_window([Card(C.QUEEN)], registry)
        legal = generate_legal_actions(state, 1, registry)
        board = build_board(state, 1, registry)

        assert RandomStrategy(seed=0).claimable_actions(board, legal) == [Decline()]

    def test_held_reaction_kept(self, registry):
        state = _reaction_window([Card(C.KINGS_HAND)], registry)
        legal = generate_legal_actions(state, 1, registry)
        board = build_board(state, 1, registry)

        assert RandomStrategy(seed=0).claimable_actions(board, legal) == legal


class TestRandomStrategy:
    def test_same_seed_same_choices(self):
        game = Game(seed=1)
        board, status, legal = game.board(0), game.status(0), game.legal_actions(0)

        first = [RandomStrategy(seed=42).select_action(board, status, legal) for _ in range(3)]
        second = [RandomStrategy(seed=42).select_action(board, status, legal) for _ in range(3)]

        assert first == second
        assert all(action in legal for action in first)

    def test_nothing_to_do(self):
        game = Game(seed=1)
        assert RandomStrategy(seed=0).select_action(game.board(1), game.status(1), []) is None


class TestHeuristicStrategy:
    def test_picks_legal_action(self):
        game = Game(seed=2)
        legal = game.legal_actions(0)
        action = HeuristicStrategy(seed=0).select_action(game.board(0), game.status(0), legal)
        assert action in legal

    def test_reacts_with_held_card(self, registry):
        state = _reaction_window([Card(C.KINGS_HAND)], registry)
        legal = generate_legal_actions(state, 1, registry)
        action = HeuristicStrategy(seed=0).select_action(
            build_board(state, 1, registry), build_status(state, 1), legal
        )
        assert isinstance(action, React)

    def test_never_claims_unheld_card(self, registry):
        state = _reaction_window([Card(C.QUEEN)], registry)
        legal = generate_legal_actions(state, 1, registry)
        action = HeuristicStrategy(seed=0).select_action(
            build_board(state, 1, registry), build_status(state, 1), legal
        )
        assert action == Decline()
