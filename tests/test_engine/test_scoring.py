"""Tests for round scoring."""

from kings_engine.cards import Card, CardName
from kings_engine.config import GameConfig
from kings_engine.events import MessageLog
from kings_engine.scoring import end_round, round_points
from kings_engine.state import GamePhase, GameState, PlayerState

C = CardName


def _state(winner=None, loser=None, config=None) -> GameState:
    return GameState(
        players=(winner or PlayerState(name="A"), loser or PlayerState(name="B")),
        config=config or GameConfig(check_invariants=False),
        phase=GamePhase.PLAY,
    )


class TestRoundPoints:
    def test_full_points(self):
        state = _state(loser=PlayerState(name="B", hand=(Card(C.FOOL),)))
        assert round_points(state, 0) == 3

    def test_minimum_point(self):
        state = _state(
            winner=PlayerState(name="A", king_flipped=True),
            loser=PlayerState(name="B", king_flipped=True),
        )
        assert round_points(state, 0) == 1

    def test_unflipped_winner(self):
        state = _state(loser=PlayerState(name="B", king_flipped=True))
        assert round_points(state, 0) == 2

    def test_loser_successor_counts(self):
        state = _state(
            winner=PlayerState(name="A", king_flipped=True),
            loser=PlayerState(name="B", successor=Card(C.ELDER)),
        )
        assert round_points(state, 0) == 2

    def test_clamped_to_config(self):
        config = GameConfig(check_invariants=False, round_points_max=2)
        state = _state(loser=PlayerState(name="B", hand=(Card(C.FOOL),)), config=config)
        assert round_points(state, 0) == 2


class TestEndRound:
    def test_round_end(self):
        log = MessageLog()
        state = end_round(_state(), 1, log)

        assert state.phase == GamePhase.ROUND_END
        assert state.round_winner == 1
        assert state.players[1].points == 2
        assert state.winner is None
        assert log.messages

    def test_game_over_at_threshold(self):
        winner = PlayerState(name="A", points=6)
        state = end_round(_state(winner=winner), 0, MessageLog())

        assert state.phase == GamePhase.GAME_OVER
        assert state.winner == 0
        assert state.players[0].points == 8

    def test_custom_threshold(self):
        config = GameConfig(check_invariants=False, points_to_win=2)
        state = end_round(_state(config=config), 0, MessageLog())
        assert state.phase == GamePhase.GAME_OVER
